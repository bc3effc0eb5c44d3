"""Public model exports for obedrive."""

from __future__ import annotations

from .course import Category, CategoryFolders, CourseInfo
from .drive_file import ArtifactRef, DestinationKind, DriveFile, FolderRef, UploadProgress
from .results import Notification, NotificationLevel, OutcomeKind, SubmitResult, UploadOutcome
from .submission import (
    ArtifactMetadata,
    ChecklistItem,
    CompletionSummary,
    ItemStatus,
    LocalFile,
    OverallStatus,
    SubmissionRecord,
    SubmissionStatus,
)

__all__ = [
    "Category",
    "CategoryFolders",
    "CourseInfo",
    "DestinationKind",
    "DriveFile",
    "FolderRef",
    "ArtifactRef",
    "UploadProgress",
    "ItemStatus",
    "SubmissionStatus",
    "OverallStatus",
    "LocalFile",
    "ArtifactMetadata",
    "ChecklistItem",
    "CompletionSummary",
    "SubmissionRecord",
    "OutcomeKind",
    "UploadOutcome",
    "SubmitResult",
    "Notification",
    "NotificationLevel",
]
