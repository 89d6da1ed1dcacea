"""Errors raised by request handlers and dependencies."""


class ApiError(Exception):
    """Base class for errors raised by request handlers."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(ApiError):
    """No valid caller identity."""

    status_code = 401

    def __init__(self, message: str = "No autenticado"):
        super().__init__(message)


class BadRequestError(ApiError):
    """A required parameter is missing or malformed."""

    status_code = 400
