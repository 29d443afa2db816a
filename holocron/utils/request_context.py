"""Request-scoped identifier shared by the middleware and error handlers."""

from __future__ import annotations

from contextvars import ContextVar, Token

__all__ = [
    "REQUEST_ID_CONTEXT",
    "clear_request_id",
    "get_request_id",
    "set_request_id",
]

# Each request handler runs in its own task, so the ContextVar scopes the
# identifier to the active request.
REQUEST_ID_CONTEXT: ContextVar[str] = ContextVar("request_id", default="")


def set_request_id(request_id: str) -> Token[str]:
    """Store ``request_id`` for the active request.

    The returned token lets tests restore the previous value afterwards.
    """

    return REQUEST_ID_CONTEXT.set(request_id)


def get_request_id() -> str:
    """Return the active request identifier, or an empty string."""

    return REQUEST_ID_CONTEXT.get()


def clear_request_id(token: Token[str] | None = None) -> None:
    if token is not None:
        REQUEST_ID_CONTEXT.reset(token)
    else:
        REQUEST_ID_CONTEXT.set("")
