"""Error taxonomy for the channel protocol and the prompt layer."""

from __future__ import annotations


class ChannelError(Exception):
    """Request rejected before reaching the protocol engine.

    Rendered at the HTTP boundary as a plain-text response carrying
    ``status_code`` and ``reason``.
    """

    status_code: int = 400
    reason: str = "Bad request"

    def __init__(self, reason: str | None = None) -> None:
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class UnauthenticatedError(ChannelError):
    status_code = 401
    reason = "Missing Bearer token"


class UnauthorizedError(ChannelError):
    status_code = 403
    reason = "Invalid token"


class BadRequestError(ChannelError):
    status_code = 400
    reason = "Missing sessionId"


class UnknownSessionError(ChannelError):
    status_code = 404
    reason = "Unknown sessionId"


class PromptError(Exception):
    """Base class for prompt registry failures."""


class InvalidArgumentsError(PromptError):
    def __init__(self, argument: str, message: str | None = None) -> None:
        super().__init__(message or f"Missing required argument: {argument}")
        self.argument = argument


class UnknownPromptError(PromptError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown prompt: {name}")
        self.name = name


class PromptAssetError(PromptError):
    """Raised at startup when a template instruction text cannot be loaded."""
