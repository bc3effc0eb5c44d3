"""Data model for Drive items and destination references."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class DestinationKind(str, Enum):
    """The two independent stores an artifact is replicated into."""

    PERSONAL = "personal"
    SHARED = "shared"

    @property
    def label(self) -> str:
        return "Personal" if self is DestinationKind.PERSONAL else "Shared"


@dataclass(slots=True)
class DriveFile:
    """A Drive item as returned by the Drive v3 API (subset of fields)."""

    file_id: str
    name: str
    mime_type: str
    parents: list[str] = field(default_factory=list)

    web_view_link: Optional[str] = None
    created_time: Optional[datetime] = None
    modified_time: Optional[datetime] = None
    size: Optional[int] = None


@dataclass(slots=True, frozen=True)
class FolderRef:
    """A folder inside one destination."""

    id: str
    name: str


@dataclass(slots=True, frozen=True)
class ArtifactRef:
    """Result of a successful upload to one destination."""

    id: str
    name: str
    view_url: Optional[str] = None


@dataclass(slots=True, frozen=True)
class UploadProgress:
    loaded: int
    total: int

    @property
    def percentage(self) -> int:
        if self.total <= 0:
            return 100
        return (self.loaded * 200 + self.total) // (2 * self.total)
