"""
Request dependencies.

Caller identity is supplied by the upstream session/auth provider through a
trusted header (AUTH_USER_HEADER, X-User-Id by default). Handlers take the
user id ONLY from here, never from query parameters or the request body, so
one user can never reach another user's collection.
"""

from typing import Optional

from fastapi import Request

from finance_tracker.api.exceptions import UnauthenticatedError
from finance_tracker.audit import create_correlation_id
from finance_tracker.orchestrator import PaymentFlow


def get_flow(request: Request) -> PaymentFlow:
    return request.app.state.flow


def get_correlation_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    return request_id or create_correlation_id()


def read_user_id(request: Request) -> Optional[str]:
    """The identity header's value, or None when missing or blank."""
    user_id = request.headers.get(request.app.state.user_header, "").strip()
    return user_id or None


def get_current_user_id(request: Request) -> str:
    """
    The authenticated caller's opaque user id.

    Also kept on request.state so error handlers can attribute failures.

    Raises:
        UnauthenticatedError: If the auth provider supplied no identity
    """
    user_id = read_user_id(request)
    if user_id is None:
        raise UnauthenticatedError()
    request.state.user_id = user_id
    return user_id
