import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from questionnaire_api.config import Settings, get_settings
from questionnaire_api.errors import PersistenceError, SubmissionError
from questionnaire_api.logging_setup import configure_logging
from questionnaire_api.middleware import BodySizeLimitMiddleware
from questionnaire_api.routers.enhance import router as enhance_router
from questionnaire_api.routers.questionnaire import router as questionnaire_router
from questionnaire_api.services.enhancer import TextEnhancer, get_enhancer
from questionnaire_api.services.storage import StorageBackend, get_storage
from questionnaire_api.services.writer import ArtifactWriter

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to save questionnaire data"


def _failure(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return JSONResponse(body, status_code=status_code)


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(SubmissionError)
    async def _submission_error(request: Request, exc: SubmissionError):
        if isinstance(exc, PersistenceError):
            logger.error("Persistence failed on %s: %s", request.url.path, exc.detail,
                         exc_info=exc.__cause__ or exc)
            detail = exc.detail if settings.expose_error_details else None
            return _failure(exc.status_code, exc.message, detail)
        if exc.status_code >= 500:
            logger.error("%s on %s", exc.message, request.url.path)
        else:
            logger.info("Rejected %s: %s", request.url.path, exc.message)
        return _failure(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError):
        logger.info("Invalid request body on %s: %s", request.url.path, exc.errors())
        return _failure(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s", request.url.path)
        detail = str(exc) if settings.expose_error_details else None
        return _failure(500, GENERIC_FAILURE_MESSAGE, detail)


def create_app(settings: Optional[Settings] = None,
               storage: Optional[StorageBackend] = None,
               enhancer: Optional[TextEnhancer] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Questionnaire API")
    app.state.settings = settings
    app.state.writer = ArtifactWriter(storage or get_storage(settings))
    app.state.enhancer = enhancer or get_enhancer(settings)

    # last added is outermost: CORS wraps the size limiter
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
    )

    _install_error_handlers(app, settings)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(questionnaire_router)
    app.include_router(enhance_router)
    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    settings = app.state.settings
    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
