from contextlib import asynccontextmanager

from fastapi import FastAPI

from api import forms
from core.config import Settings, settings as default_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestLoggingMiddleware, SlowRequestMiddleware
from core.errors import register_error_handlers
from intake import UserForm, ValidationGateway
from schemas.user import UserRecord

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(
        "startup",
        message="User form service starting up",
        symmetric_timestamps=app.state.user_form.symmetric_timestamps,
    )
    yield
    log.info("shutdown", message="User form service shutting down")


def create_app(settings: Settings | None = None, *, user_form: UserForm | None = None) -> FastAPI:
    """Build the application. Logging is configured here, not at import time."""
    settings = settings or default_settings
    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    app = FastAPI(
        title="User Form API",
        description="Parses a submitted user form into a validated user record",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.user_form = user_form or UserForm(
        ValidationGateway(UserRecord, max_errors=settings.MAX_VALIDATION_ERRORS),
        symmetric_timestamps=settings.SYMMETRIC_TIMESTAMPS,
    )

    register_error_handlers(app)

    # Middleware (order matters: last added = first executed)
    app.add_middleware(SlowRequestMiddleware, slow_threshold_ms=settings.SLOW_REQUEST_MS)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(forms.router, tags=["forms"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": settings.APP_VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    log.info(
        "server_config",
        host=default_settings.BACKEND_HOST,
        port=default_settings.BACKEND_PORT,
        debug=default_settings.APP_DEBUG,
    )
    uvicorn.run(
        "main:app",
        host=default_settings.BACKEND_HOST,
        port=default_settings.BACKEND_PORT,
        reload=default_settings.APP_DEBUG,
        log_config=None,  # Disable uvicorn's default logging, we handle it
    )
