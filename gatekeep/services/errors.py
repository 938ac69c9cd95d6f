"""Service-layer error taxonomy. The API layer maps each class to an HTTP status."""

from typing import Any


class ServiceError(Exception):
    """Base class for errors raised to the immediate caller of a service operation."""

    status_code: int = 400
    error_code: str = "bad_request"

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        self.message = message
        self.detail = detail or {}
        super().__init__(message)


class ValidationError(ServiceError):
    """Malformed input. detail maps field name -> list of messages (safe to show)."""

    status_code = 422
    error_code = "validation_error"

    def __init__(self, field_errors: dict[str, list[str]], message: str = "Invalid input.") -> None:
        self.field_errors = field_errors
        super().__init__(message, detail={"fields": field_errors})


class DuplicateAccountError(ServiceError):
    """An active account already uses this (normalized) email."""

    status_code = 409
    error_code = "duplicate_account"

    def __init__(self, message: str = "An account with this email already exists.") -> None:
        super().__init__(message)


class RateLimitedError(ServiceError):
    """Too many recent failed attempts for this email + source pair."""

    status_code = 429
    error_code = "rate_limited"

    def __init__(self, retry_after_seconds: int) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            "Too many attempts. Try again later.",
            detail={"retry_after_seconds": retry_after_seconds},
        )


class AccountLockedError(ServiceError):
    """The account's lockout window is active."""

    status_code = 429
    error_code = "rate_limited"

    def __init__(self, retry_after_seconds: int) -> None:
        self.retry_after_seconds = retry_after_seconds
        # Same external message as RateLimitedError; only the ledger tells them apart.
        super().__init__(
            "Too many attempts. Try again later.",
            detail={"retry_after_seconds": retry_after_seconds},
        )


class InvalidCredentialsError(ServiceError):
    """
    Credentials rejected on an authenticated flow (bearer token, password change).

    Login itself never raises this: a failed login is a None result.
    """

    status_code = 401
    error_code = "invalid_credentials"

    def __init__(self, message: str = "Invalid email or password.") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    status_code = 403
    error_code = "forbidden"


class NotFoundError(ServiceError):
    """Account or session id unknown on an operation that requires it to exist."""

    status_code = 404
    error_code = "not_found"


class StorageError(ServiceError):
    """Transient storage failure (timeout, connection loss). Safe for the caller to retry."""

    status_code = 503
    error_code = "storage_unavailable"

    def __init__(self, message: str = "Storage temporarily unavailable.") -> None:
        super().__init__(message)


__all__ = [
    "AccountLockedError",
    "DuplicateAccountError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "NotFoundError",
    "RateLimitedError",
    "ServiceError",
    "StorageError",
    "ValidationError",
]
