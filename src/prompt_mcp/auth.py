"""Bearer token authentication for the MCP stream and request endpoints."""

from __future__ import annotations

import logging
from typing import Collection

from fastapi import Request

from .errors import UnauthenticatedError, UnauthorizedError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def check_authorization(header: str | None, allowed_tokens: Collection[str]) -> None:
    """Validate an ``Authorization`` header value against the allow-list.

    An empty allow-list disables authentication. Otherwise a missing header,
    or one that does not use the Bearer scheme, raises
    UnauthenticatedError; a well-formed header carrying an unknown token
    raises UnauthorizedError.
    """
    if not allowed_tokens:
        return

    if not header or not header.startswith(BEARER_PREFIX):
        raise UnauthenticatedError()

    token = header[len(BEARER_PREFIX):].strip()
    if token not in allowed_tokens:
        raise UnauthorizedError()


async def require_bearer_token(request: Request) -> None:
    """FastAPI dependency guarding both legs of the channel."""
    settings = request.app.state.settings
    try:
        check_authorization(request.headers.get("authorization"), settings.auth_tokens)
    except (UnauthenticatedError, UnauthorizedError) as exc:
        logger.warning(
            "Rejected %s %s from %s: %s",
            request.method,
            request.url.path,
            request.client.host if request.client else "unknown",
            exc.reason,
        )
        raise


__all__ = [
    "BEARER_PREFIX",
    "check_authorization",
    "require_bearer_token",
]
