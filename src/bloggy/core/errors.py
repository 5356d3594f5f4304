"""Domain error taxonomy.

Every failure surfaced by the service layer is one of these exceptions. The
HTTP layer maps them onto status codes in :mod:`bloggy.main`.
"""

from __future__ import annotations

from typing import Literal

MessageType = Literal["info", "success", "warning", "danger"]

GENERIC_FAILURE_TEXT = "Something went wrong. Please try again."


class BloggyError(RuntimeError):
    """Base exception for all expected Bloggy failures.

    Attributes:
        message: Human-readable text safe to show to end users.
        status_code: HTTP status used when the error reaches the API boundary.
        expose: When False the API replies with a generic text and the
            message is only logged.
    """

    status_code: int = 500
    message_type: MessageType = "danger"
    expose: bool = True

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(BloggyError):
    """Raised when an identifier lookup misses."""

    status_code = 404


class ForbiddenError(BloggyError):
    """Raised when access control rejects an action."""

    status_code = 403


class UnauthenticatedError(BloggyError):
    """Raised when an action requires a signed-in user."""

    status_code = 401


class UnverifiedError(BloggyError):
    """Raised when an action requires a confirmed account."""

    status_code = 403


class ValidationFailedError(BloggyError):
    """Raised for missing required fields or duplicate unique keys."""

    status_code = 400


class DependencyFailedError(BloggyError):
    """Raised when the mail service or the identity provider fails."""

    status_code = 502


class PartialWriteError(BloggyError):
    """Raised when only one of two required store mutations succeeded.

    The service that raises it logs the identifiers needed for manual
    reconciliation before raising.
    """

    status_code = 500
    expose = False
