"""Exception hierarchy and HTTP error mapping for obedrive."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class ObeDriveError(Exception):
    """
    Base exception for obedrive.

    Attributes:
        details: Optional structured information (destination, segment, ...).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


# ----------------------------
# Engine errors
# ----------------------------
class InvalidStateError(ObeDriveError):
    """Raised when the engine is used in an invalid state (e.g., record frozen)."""


class InvalidArgumentError(ObeDriveError):
    """Raised when arguments are invalid (unknown item, missing course field, HTTP 400)."""


class ProvisioningError(ObeDriveError):
    """Raised when a folder segment could not be found or created."""

    @property
    def destination(self) -> Optional[str]:
        return self.details.get("destination")

    @property
    def segment(self) -> Optional[str]:
        return self.details.get("segment")


class UploadError(ObeDriveError):
    """Raised when an upload to one destination fails (non-fatal for dual uploads)."""

    @property
    def destination(self) -> Optional[str]:
        return self.details.get("destination")


class PersistenceError(ObeDriveError):
    """Raised when a submission record write (status/metadata/folders) fails."""


class PreconditionError(ObeDriveError):
    """Raised when an item is marked complete, or submitted, before it is ready."""


class FinalizationError(ObeDriveError):
    """Raised when the submission store rejects the final submit."""


# ----------------------------
# Drive transport errors
# ----------------------------
class AuthError(ObeDriveError):
    """Raised when OAuth/service-account authentication fails (HTTP 401)."""


class PermissionDeniedError(ObeDriveError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class NotFoundError(ObeDriveError):
    """Raised when a Drive resource is not found (HTTP 404)."""


class ConflictError(ObeDriveError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class RateLimitError(ObeDriveError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(ObeDriveError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(ObeDriveError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(ObeDriveError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to obedrive exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> ObeDriveError:
    """
    Map a Drive HTTP error to an obedrive exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionDeniedError, or QuotaExceededError if quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - otherwise (5xx included) -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionDeniedError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
