# questionnaire_api/logging_setup.py
"""
Process-wide logging for the questionnaire server.

One stdout handler, shared by the app's own loggers and uvicorn's, at the
level named by LOG_LEVEL. boto3's HTTP stack is held at WARNING so that S3
writes do not flood the log at DEBUG.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_QUIET_LOGGERS = ("botocore", "boto3", "urllib3")


def _dict_config(level: str) -> Dict[str, Any]:
    level = level.strip().upper() or "INFO"
    loggers: Dict[str, Any] = {
        name: {"level": level, "handlers": ["console"], "propagate": False}
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
    }
    for name in _QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": loggers,
    }


def configure_logging(level: str = "INFO") -> None:
    """Install the console handler once; later calls leave existing handlers alone."""
    if logging.getLogger().handlers:
        return
    dictConfig(_dict_config(level))
