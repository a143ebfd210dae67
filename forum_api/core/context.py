"""Request-scoped context stored in contextvars.

The request id and the authenticated user id are set once per request and
read back by the logging processors, so every log event emitted while the
request is in flight carries them without threading them through calls.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Incoming request ID. A new one is generated when missing.

    Returns:
        The request ID that was set.
    """
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_user_id() -> str | None:
    """Get the current user ID."""
    return user_id_var.get()


def set_user_id(user_id: str | None) -> None:
    """Set the authenticated user ID for the current context."""
    user_id_var.set(str(user_id) if user_id is not None else None)


def get_context() -> dict[str, Any]:
    """Return the non-empty context values as a dictionary."""
    context: dict[str, Any] = {}

    request_id = get_request_id()
    if request_id:
        context["request_id"] = request_id

    user_id = get_user_id()
    if user_id:
        context["user_id"] = user_id

    return context


def clear_context() -> None:
    """Reset context values at the end of a request."""
    request_id_var.set("")
    user_id_var.set(None)
