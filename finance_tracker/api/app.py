"""
FastAPI application factory.
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request

from finance_tracker import __version__
from finance_tracker.api.errors import register_error_handlers, unexpected_error_response
from finance_tracker.api.routes import router
from finance_tracker.audit import configure_logging, create_correlation_id
from finance_tracker.config import Settings, get_settings, validate_all_settings
from finance_tracker.orchestrator import PaymentFlow, create_app_components


REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.get_logger(__name__)


def check_settings(settings: Settings) -> None:
    """
    Fail fast when a settings section can't be loaded.

    Raises:
        RuntimeError: Naming every broken section
    """
    status = validate_all_settings(settings)
    broken = sorted(key for key, ok in status.items() if ok is False)
    if broken:
        for section in broken:
            logger.error("invalid_settings", section=section, error=status.get(f"{section}_error"))
        raise RuntimeError(f"Invalid settings: {', '.join(broken)}")


def create_app(
    flow: Optional[PaymentFlow] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        flow: Pre-built payment flow (tests inject one over in-memory storage).
              Built from settings when omitted.
        settings: Defaults to the cached environment settings.
    """
    settings = settings or get_settings()
    check_settings(settings)
    app_settings = settings.app

    configure_logging(app_settings.log_level, json_logs=app_settings.log_json)

    app = FastAPI(
        title="Finance Tracker API",
        version=__version__,
        debug=app_settings.debug_mode and not app_settings.is_production,
    )
    app.state.flow = flow or create_app_components(settings)
    app.state.user_header = settings.auth.user_header

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Attach a correlation id to every request and echo it back."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or create_correlation_id()
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        except Exception as e:
            response = await unexpected_error_response(request, e)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    register_error_handlers(app)
    app.include_router(router)

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok", "version": __version__}

    return app
