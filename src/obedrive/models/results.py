"""Result models for uploads, submits and user notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional

from .drive_file import ArtifactRef, DestinationKind
from .submission import SubmissionRecord


class OutcomeKind(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(slots=True)
class UploadOutcome:
    """
    Per-destination result of one dual upload.

    A destination listed in `omitted` was not attempted (not connected, or its
    folder is not provisioned); that is not an error.
    """

    personal: Optional[ArtifactRef] = None
    shared: Optional[ArtifactRef] = None
    errors: list[str] = field(default_factory=list)
    omitted: list[DestinationKind] = field(default_factory=list)

    # Set when the artifact was delivered but the record update failed.
    persistence_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.personal is not None or self.shared is not None

    @property
    def kind(self) -> OutcomeKind:
        if self.personal is not None and self.shared is not None:
            return OutcomeKind.FULL
        if self.succeeded:
            return OutcomeKind.PARTIAL
        return OutcomeKind.FAILED

    @property
    def primary(self) -> Optional[ArtifactRef]:
        """The reference recorded in metadata (personal copy first)."""
        return self.personal or self.shared

    def get(self, kind: DestinationKind) -> Optional[ArtifactRef]:
        return self.personal if kind is DestinationKind.PERSONAL else self.shared


@dataclass(slots=True)
class SubmitResult:
    """Result of SubmissionSession.submit_all()."""

    ok: bool
    record: Optional[SubmissionRecord] = None
    error: Optional[Exception] = None

    @property
    def error_type(self) -> Optional[str]:
        return self.error.__class__.__name__ if self.error is not None else None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


NotificationLevel = Literal["info", "success", "warning", "error"]


@dataclass(slots=True, frozen=True)
class Notification:
    """A user-visible message for one terminal outcome."""

    level: NotificationLevel
    message: str
