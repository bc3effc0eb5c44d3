"""Checklist items and the persisted submission record."""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional

from obedrive.util.mime import DEFAULT_MIME, guess_mime_type
from obedrive.util.time import parse_optional_rfc3339, to_rfc3339

from .course import Category, CategoryFolders, CourseInfo


class ItemStatus(str, Enum):
    PENDING = "pending"
    YES = "yes"
    NO = "no"


class SubmissionStatus(str, Enum):
    """
    Record-level status.

    `partial` and `complete` are derived by the store from the completion
    percentage; `submitted` is terminal.
    """

    DRAFT = "draft"
    PARTIAL = "partial"
    COMPLETE = "complete"
    SUBMITTED = "submitted"


class OverallStatus(str, Enum):
    """Administrative review status (the only fields writable after submit)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_REVIEW = "in-review"


@dataclass(slots=True, frozen=True)
class LocalFile:
    """A file held in memory by the caller (not yet or already uploaded)."""

    name: str
    data: bytes
    mime_type: str = DEFAULT_MIME
    last_modified: int = 0

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(
        cls, path: str | os.PathLike[str], *, mime_type: Optional[str] = None
    ) -> LocalFile:
        """Read a file from disk; MIME type is guessed from the name when omitted."""
        p = Path(path)
        data = p.read_bytes()
        return cls(
            name=p.name,
            data=data,
            mime_type=mime_type or guess_mime_type(p.name),
            last_modified=int(p.stat().st_mtime * 1000),
        )


@dataclass(slots=True, frozen=True)
class ArtifactMetadata:
    """Persisted metadata of one uploaded artifact."""

    name: str
    size: int
    mime_type: str
    last_modified: int
    storage_id: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_local_file(
        cls,
        local_file: LocalFile,
        *,
        storage_id: Optional[str] = None,
        url: Optional[str] = None,
    ) -> ArtifactMetadata:
        return cls(
            name=local_file.name,
            size=local_file.size,
            mime_type=local_file.mime_type,
            last_modified=local_file.last_modified,
            storage_id=storage_id,
            url=url,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "size": self.size,
            "type": self.mime_type,
            "lastModified": self.last_modified,
        }
        if self.storage_id:
            out["googleDriveId"] = self.storage_id
        if self.url:
            out["url"] = self.url
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactMetadata:
        size = data.get("size")
        last_modified = data.get("lastModified")
        storage_id = data.get("googleDriveId")
        url = data.get("url")
        return cls(
            name=str(data.get("name", "")),
            size=size if isinstance(size, int) else 0,
            mime_type=str(data.get("type", "")),
            last_modified=last_modified if isinstance(last_modified, int) else 0,
            storage_id=storage_id if isinstance(storage_id, str) else None,
            url=url if isinstance(url, str) else None,
        )


@dataclass(slots=True)
class ChecklistItem:
    """
    One row of the submission checklist.

    Invariant (kept by the reconciler): status == YES iff every required key
    has either a local file or persisted metadata.
    """

    id: str
    name: str
    category: Category
    required_keys: list[str]
    status: ItemStatus = ItemStatus.PENDING
    uploaded_files: dict[str, ArtifactMetadata] = field(default_factory=dict)
    local_files: dict[str, LocalFile] = field(default_factory=dict)
    submitted_at: Optional[datetime] = None

    def has_artifact(self, key: str) -> bool:
        return key in self.local_files or key in self.uploaded_files

    def missing_keys(self) -> list[str]:
        return [k for k in self.required_keys if not self.has_artifact(k)]

    def all_artifacts_present(self) -> bool:
        return not self.missing_keys()

    def clear_artifacts(self) -> None:
        self.uploaded_files = {}
        self.local_files = {}

    def clone(self) -> ChecklistItem:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "fileTypes": list(self.required_keys),
            "status": self.status.value,
        }
        if self.uploaded_files:
            out["uploadedFiles"] = {k: v.to_dict() for k, v in self.uploaded_files.items()}
        if self.submitted_at is not None:
            out["submittedAt"] = to_rfc3339(self.submitted_at)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChecklistItem:
        uploaded = data.get("uploadedFiles") or {}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            category=Category(data["category"]),
            required_keys=[str(k) for k in data.get("fileTypes", [])],
            status=ItemStatus(data.get("status", ItemStatus.PENDING.value)),
            uploaded_files={
                str(k): ArtifactMetadata.from_dict(v)
                for k, v in uploaded.items()
                if isinstance(v, dict)
            },
            submitted_at=parse_optional_rfc3339(data.get("submittedAt")),
        )


@dataclass(slots=True, frozen=True)
class CompletionSummary:
    total: int
    completed: int
    pending: int
    percentage: int

    @classmethod
    def from_items(cls, items: list[ChecklistItem]) -> CompletionSummary:
        total = len(items)
        completed = sum(1 for i in items if i.status is ItemStatus.YES)
        pending = sum(1 for i in items if i.status is ItemStatus.PENDING)
        # Half-up, as the service computes it: 1 of 8 is 13%, not 12%.
        percentage = (completed * 200 + total) // (2 * total) if total else 0
        return cls(total=total, completed=completed, pending=pending, percentage=percentage)


@dataclass(slots=True)
class SubmissionRecord:
    """Aggregate of all checklist items for one (course, section, semester)."""

    submission_id: str
    course_info: CourseInfo
    theory: list[ChecklistItem] = field(default_factory=list)
    lab: list[ChecklistItem] = field(default_factory=list)

    submission_status: SubmissionStatus = SubmissionStatus.DRAFT
    overall_status: OverallStatus = OverallStatus.PENDING
    completion_percentage: int = 0
    folders: CategoryFolders = field(default_factory=CategoryFolders)

    submitted_at: Optional[datetime] = None
    last_modified_at: Optional[datetime] = None
    review_comments: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def is_submitted(self) -> bool:
        return self.submission_status is SubmissionStatus.SUBMITTED

    def items(self, category: Category) -> list[ChecklistItem]:
        return self.theory if category is Category.THEORY else self.lab

    def all_items(self) -> list[ChecklistItem]:
        return [*self.theory, *self.lab]

    def iter_items(self) -> Iterator[ChecklistItem]:
        yield from self.theory
        yield from self.lab

    def find_item(self, item_id: str, category: Category) -> Optional[ChecklistItem]:
        for item in self.items(category):
            if item.id == item_id:
                return item
        return None

    def summary(self) -> CompletionSummary:
        return CompletionSummary.from_items(self.all_items())

    def clone(self) -> SubmissionRecord:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "_id": self.submission_id,
            "courseInfo": self.course_info.to_dict(),
            "documents": {
                "theory": [i.to_dict() for i in self.theory],
                "lab": [i.to_dict() for i in self.lab],
            },
            "submissionStatus": self.submission_status.value,
            "overallStatus": self.overall_status.value,
            "completionPercentage": self.completion_percentage,
            "googleDriveFolders": self.folders.to_dict(),
        }
        if self.submitted_at is not None:
            out["submittedAt"] = to_rfc3339(self.submitted_at)
        if self.last_modified_at is not None:
            out["lastModifiedAt"] = to_rfc3339(self.last_modified_at)
        if self.review_comments is not None:
            out["reviewComments"] = self.review_comments
        if self.reviewed_at is not None:
            out["reviewedAt"] = to_rfc3339(self.reviewed_at)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubmissionRecord:
        documents = data.get("documents") or {}
        percentage = data.get("completionPercentage")
        comments = data.get("reviewComments")
        return cls(
            submission_id=str(data.get("_id") or data.get("id") or ""),
            course_info=CourseInfo.from_dict(data.get("courseInfo") or {}),
            theory=[ChecklistItem.from_dict(d) for d in documents.get("theory", [])],
            lab=[ChecklistItem.from_dict(d) for d in documents.get("lab", [])],
            submission_status=SubmissionStatus(
                data.get("submissionStatus", SubmissionStatus.DRAFT.value)
            ),
            overall_status=OverallStatus(data.get("overallStatus", OverallStatus.PENDING.value)),
            completion_percentage=percentage if isinstance(percentage, int) else 0,
            folders=CategoryFolders.from_dict(data.get("googleDriveFolders")),
            submitted_at=parse_optional_rfc3339(data.get("submittedAt")),
            last_modified_at=parse_optional_rfc3339(data.get("lastModifiedAt")),
            review_comments=comments if isinstance(comments, str) else None,
            reviewed_at=parse_optional_rfc3339(data.get("reviewedAt")),
        )
