"""Error taxonomy and centralized normalization for API responses.

Every error surfaced to a client leaves as JSON ``{"message": ..., "error"?: ...}``:
- 4xx errors carry the message of the :class:`ApiError` that was raised
- 5xx errors pass through :func:`normalize_db_error` or
  :func:`normalize_unknown_error`, so no stack traces or driver text
  reach the client while the details are logged for debugging
"""

import logging
from dataclasses import dataclass

from blogserver.app.core.logging import log_event

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base for errors that map onto a fixed HTTP status."""

    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    """A required field is missing or the body cannot be parsed."""

    http_status = 400


class Unauthenticated(ApiError):
    """No credential, or a credential that resolves to no principal."""

    http_status = 401


class Forbidden(ApiError):
    """The principal is not the author of the post it tries to mutate."""

    http_status = 403


class NotFound(ApiError):
    http_status = 404


class StoreError(ApiError):
    """Unexpected persistence failure; the original exception is chained."""

    http_status = 500


@dataclass(frozen=True)
class NormalizedError:
    """Standardized representation of a server-side failure."""

    user_message: str
    error_category: str
    retryable: bool
    http_status: int = 500

    def to_body(self) -> dict[str, str]:
        return {"message": self.user_message, "error": self.error_category}


def normalize_db_error(
    exc: BaseException,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    """Normalize a database error into a user-friendly message."""
    exc_msg = str(exc).lower()

    if "locked" in exc_msg or "busy" in exc_msg:
        error = NormalizedError(
            user_message=(
                "The database is temporarily busy. Please try again in a moment."
            ),
            error_category="db",
            retryable=True,
            http_status=500,
        )
    elif "readonly" in exc_msg or "read-only" in exc_msg or "permission" in exc_msg:
        error = NormalizedError(
            user_message=(
                "A database permission error occurred. "
                "Check APP_DB_PATH points to a writable location."
            ),
            error_category="db",
            retryable=False,
            http_status=500,
        )
    else:
        error = NormalizedError(
            user_message="A database error occurred. Please try again.",
            error_category="db",
            retryable=True,
            http_status=500,
        )

    log_event(
        logger, "error", "db_error_normalized",
        operation=operation,
        error_category=error.error_category,
        retryable=error.retryable,
        correlation_id=correlation_id or "N/A",
        detail=str(exc),
    )
    return error


def normalize_unknown_error(
    exc: BaseException,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    """Normalize an unexpected error into a safe generic message."""
    log_event(
        logger, "exception", "unknown_error",
        operation=operation,
        error_category="unknown",
        correlation_id=correlation_id or "N/A",
        detail=f"{type(exc).__name__}: {exc}",
    )
    return NormalizedError(
        user_message="Server error",
        error_category="unknown",
        retryable=False,
        http_status=500,
    )
