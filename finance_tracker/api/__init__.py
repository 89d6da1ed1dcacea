"""HTTP access layer."""

from finance_tracker.api.app import REQUEST_ID_HEADER, create_app
from finance_tracker.api.exceptions import ApiError, BadRequestError, UnauthenticatedError

__all__ = [
    "ApiError",
    "BadRequestError",
    "REQUEST_ID_HEADER",
    "UnauthenticatedError",
    "create_app",
]
