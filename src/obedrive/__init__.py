"""obedrive public API."""

from __future__ import annotations

import logging

from obedrive.auth import AuthInfo, DriveAuthClient
from obedrive.checklist import ChecklistReconciler
from obedrive.config import EngineConfig
from obedrive.destinations import DriveDestination, GoogleDriveDestination
from obedrive.errors import (
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
from obedrive.models import (
    ArtifactMetadata,
    ArtifactRef,
    Category,
    CategoryFolders,
    ChecklistItem,
    CompletionSummary,
    CourseInfo,
    DestinationKind,
    FolderRef,
    ItemStatus,
    LocalFile,
    Notification,
    OutcomeKind,
    OverallStatus,
    SubmissionRecord,
    SubmissionStatus,
    SubmitResult,
    UploadOutcome,
    UploadProgress,
)
from obedrive.paths import PathResolver
from obedrive.provision import FolderProvisioner
from obedrive.session import SubmissionSession
from obedrive.submission import (
    GateState,
    InMemorySubmissionStore,
    RestSubmissionStore,
    SubmissionGate,
    SubmissionStore,
)
from obedrive.upload import DualUploadCoordinator

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # High-level
    "SubmissionSession",
    "EngineConfig",
    # Engine components
    "PathResolver",
    "FolderProvisioner",
    "DualUploadCoordinator",
    "ChecklistReconciler",
    "SubmissionGate",
    "GateState",
    # Destinations / stores
    "DriveDestination",
    "GoogleDriveDestination",
    "SubmissionStore",
    "InMemorySubmissionStore",
    "RestSubmissionStore",
    # Auth
    "AuthInfo",
    "DriveAuthClient",
    # Models
    "Category",
    "CourseInfo",
    "CategoryFolders",
    "DestinationKind",
    "FolderRef",
    "ArtifactRef",
    "UploadProgress",
    "LocalFile",
    "ArtifactMetadata",
    "ItemStatus",
    "ChecklistItem",
    "CompletionSummary",
    "SubmissionStatus",
    "OverallStatus",
    "SubmissionRecord",
    "OutcomeKind",
    "UploadOutcome",
    "SubmitResult",
    "Notification",
    # Errors
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
