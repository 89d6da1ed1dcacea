"""
HTTP error handling.

Domain failures map to the narrowest status code; anything unexpected
collapses to a generic 500 whose body never carries internal details.
Error bodies always look like {"error": "<message>"}.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from finance_tracker.api.dependencies import read_user_id
from finance_tracker.api.exceptions import ApiError, UnauthenticatedError
from finance_tracker.services.storage import NotFoundError, StorageError


logger = structlog.get_logger(__name__)


# Generic 500 messages shown to the client, per operation
FAILURE_MESSAGES = {
    ("GET", "/payments"): "Error al leer los pagos",
    ("POST", "/payments"): "Error al crear el pago",
    ("PUT", "/payments"): "Error al actualizar el pago",
    ("DELETE", "/payments"): "Error al eliminar el pago",
    ("GET", "/payments/stats"): "Error al calcular estadísticas",
    ("GET", "/payments/stats/categories"): "Error al calcular estadísticas",
}
SINGLE_READ_FAILURE_MESSAGE = "Error al leer el pago"
DEFAULT_FAILURE_MESSAGE = "Error interno del servidor"


def failure_message(request: Request) -> str:
    path = request.url.path.rstrip("/") or "/"
    message = FAILURE_MESSAGES.get((request.method, path))
    if message:
        return message
    # GET /payments/{id}
    if request.method == "GET" and path.startswith("/payments/"):
        return SINGLE_READ_FAILURE_MESSAGE
    return DEFAULT_FAILURE_MESSAGE


async def unauthenticated_response(request: Request, exc: UnauthenticatedError) -> JSONResponse:
    await request.app.state.flow.audit_logger.log_unauthenticated(
        method=request.method,
        path=request.url.path,
        correlation_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unexpected_error_response(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic 500 for a fault nothing else handled.

    Called from the request-id middleware so the response still carries
    the X-Request-ID header.
    """
    logger.error(
        "unhandled_error",
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    await request.app.state.flow.audit_logger.log_error(
        error_type=type(exc).__name__,
        error_message=str(exc),
        details={"path": request.url.path, "method": request.method},
        user_id=getattr(request.state, "user_id", None),
        correlation_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=500, content={"error": failure_message(request)})


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers for the application."""

    @app.exception_handler(UnauthenticatedError)
    async def unauthenticated(request: Request, exc: UnauthenticatedError):
        return await unauthenticated_response(request, exc)

    @app.exception_handler(ApiError)
    async def api_error(request: Request, exc: ApiError):
        logger.warning("request_rejected", path=request.url.path, reason=exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        logger.info("payment_not_found", path=request.url.path)
        return JSONResponse(status_code=404, content={"error": "Pago no encontrado"})

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        # Already audited by the flow; details stay server-side
        logger.error("storage_failure", path=request.url.path, method=request.method, error=str(exc))
        return JSONResponse(status_code=500, content={"error": failure_message(request)})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        # Bodies are decoded before the identity dependency runs
        if read_user_id(request) is None:
            return await unauthenticated_response(request, UnauthenticatedError())

        logger.info("request_invalid", path=request.url.path, error_count=len(exc.errors()))
        return JSONResponse(
            status_code=422,
            content={
                "error": "Datos inválidos",
                "detail": jsonable_encoder(exc.errors()),
            },
        )
