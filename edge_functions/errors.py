"""
Error taxonomy for the edge function handlers.

Each error carries the HTTP status and a message that is safe to show to the
caller. Upstream detail stays in the server logs.
"""

import functools

import structlog
from fastapi import status

logger = structlog.get_logger(__name__)


class HandlerError(Exception):
    """Base class for errors that terminate a handler with a JSON error body."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(HandlerError):
    """Missing or invalid bearer credential, or failed step-up password."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class Forbidden(HandlerError):
    """Authenticated but not permitted."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin access required"


class InvalidInput(HandlerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class RateLimited(HandlerError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many attempts. Please try again later."


class NotFound(HandlerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ContactNotFound(NotFound):
    """The notice cannot be delivered; reported to the trigger as a failed send."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Could not find user email"


class UpstreamFailure(HandlerError):
    """Identity or email provider failure, reported generically."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"


def catch_unexpected(func):
    """
    Turn any exception that is not a HandlerError into a generic 500.

    Applied inside the timing floor so the boundary response is padded too.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except HandlerError:
            raise
        except Exception:
            logger.exception("Unexpected error", handler=func.__name__)
            raise HandlerError("An unexpected error occurred")

    return wrapper
