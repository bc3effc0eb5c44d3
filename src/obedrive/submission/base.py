"""Persistence capability for submission records."""

from __future__ import annotations

from typing import Optional, Protocol, Union

from obedrive.models import (
    ArtifactMetadata,
    Category,
    CourseInfo,
    ItemStatus,
    OverallStatus,
    SubmissionRecord,
)


class SubmissionStore(Protocol):
    """
    Server of record for submissions.

    Implementations raise PersistenceError for failed writes and
    FinalizationError (carrying the server message) for a rejected finalize.
    """

    def get_or_create(self, course_info: CourseInfo) -> SubmissionRecord:
        ...

    def get(self, submission_id: str) -> SubmissionRecord:
        """Fetch a record by id, whatever its status."""
        ...

    def update_item_status(
        self,
        submission_id: str,
        item_id: str,
        category: Category,
        status: Union[ItemStatus, str],
        uploaded_files: dict[str, ArtifactMetadata],
    ) -> SubmissionRecord:
        ...

    def finalize(self, submission_id: str) -> SubmissionRecord:
        ...

    def update_folders(
        self,
        submission_id: str,
        theory_folder_id: Optional[str],
        lab_folder_id: Optional[str],
    ) -> SubmissionRecord:
        ...

    def review(
        self,
        submission_id: str,
        overall_status: Union[OverallStatus, str],
        comments: Optional[str] = None,
    ) -> SubmissionRecord:
        ...
