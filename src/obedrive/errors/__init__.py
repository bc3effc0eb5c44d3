"""Public error exports for obedrive."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    FinalizationError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    ObeDriveError,
    PermissionDeniedError,
    PersistenceError,
    PreconditionError,
    ProvisioningError,
    QuotaExceededError,
    RateLimitError,
    UploadError,
    map_http_error,
)

__all__ = [
    "ObeDriveError",
    "InvalidStateError",
    "InvalidArgumentError",
    "ProvisioningError",
    "UploadError",
    "PersistenceError",
    "PreconditionError",
    "FinalizationError",
    "AuthError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]
