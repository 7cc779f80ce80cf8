# questionnaire_api/middleware.py
"""
Request body cap.

A declared Content-Length over the limit is refused before any body is read.
Bodies without one (chunked uploads) are counted as they arrive and refused
as soon as the running total passes the limit. Accepted bodies are replayed
to the app unchanged.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

TOO_LARGE_MESSAGE = "Request body too large"


class BodySizeLimitMiddleware:
    def __init__(self, app: FastAPI, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def _reject(self, scope, receive, send, size: int) -> None:  # type: ignore[no-untyped-def]
        logger.warning("Rejected %s: body of at least %s bytes exceeds limit of %s",
                       scope.get("path"), size, self.max_body_bytes)
        response = JSONResponse({"success": False, "message": TOO_LARGE_MESSAGE}, status_code=413)
        await response(scope, receive, send)

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        for key, value in scope.get("headers") or []:
            if key.lower() == b"content-length" and value.isdigit():
                if int(value) > self.max_body_bytes:
                    await self._reject(scope, receive, send, int(value))
                    return
                break

        buffered = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_bytes:
                await self._reject(scope, receive, send, received)
                return
            if not message.get("more_body", False):
                break

        async def replay():  # type: ignore[no-untyped-def]
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)
