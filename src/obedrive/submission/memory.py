"""In-process submission store with the server's derivation rules."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Union

from obedrive.checklist import default_items
from obedrive.errors import (
    FinalizationError,
    InvalidArgumentError,
    PersistenceError,
)
from obedrive.models import (
    ArtifactMetadata,
    Category,
    CategoryFolders,
    CourseInfo,
    ItemStatus,
    OverallStatus,
    SubmissionRecord,
    SubmissionStatus,
)
from obedrive.util.ids import new_submission_id
from obedrive.util.time import now_utc

logger = logging.getLogger(__name__)

INCOMPLETE_SUBMISSION_MESSAGE = (
    "Cannot submit incomplete submission. Please complete all required documents."
)


class InMemorySubmissionStore:
    """
    Submission records kept in a dict, keyed by (course, section, semester).

    Every save recomputes the completion percentage and the derived status
    (draft / partial / complete). `submitted` is terminal: checklist and
    folder writes are rejected afterwards, review fields stay writable.
    Records are cloned on the way in and out.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, SubmissionRecord] = {}
        self._by_key: dict[tuple[str, str, str], str] = {}

    def get_or_create(self, course_info: CourseInfo) -> SubmissionRecord:
        _validate_course_info(course_info)
        with self._lock:
            submission_id = self._by_key.get(course_info.key)
            if submission_id is not None:
                return self._records[submission_id].clone()

            record = SubmissionRecord(
                submission_id=new_submission_id(),
                course_info=course_info,
                theory=default_items(Category.THEORY),
                lab=default_items(Category.LAB),
                last_modified_at=now_utc(),
            )
            self._records[record.submission_id] = record
            self._by_key[course_info.key] = record.submission_id
            logger.info(
                "Created submission %s for %s", record.submission_id, "/".join(course_info.key)
            )
            return record.clone()

    def get(self, submission_id: str) -> SubmissionRecord:
        with self._lock:
            return self._get(submission_id, PersistenceError).clone()

    def update_item_status(
        self,
        submission_id: str,
        item_id: str,
        category: Category,
        status: Union[ItemStatus, str],
        uploaded_files: dict[str, ArtifactMetadata],
    ) -> SubmissionRecord:
        try:
            new_status = ItemStatus(status)
        except ValueError as exc:
            raise InvalidArgumentError(f"Invalid item status {status!r}", cause=exc) from exc

        with self._lock:
            record = self._get(submission_id, PersistenceError)
            _ensure_writable(record)

            item = record.find_item(item_id, Category(category))
            if item is None:
                raise PersistenceError(
                    f"Document {item_id!r} not found in submission",
                    details={"submission_id": submission_id, "item_id": item_id},
                )

            item.status = new_status
            item.uploaded_files = dict(uploaded_files)
            item.submitted_at = now_utc() if new_status is ItemStatus.YES else None
            _recompute(record)
            return record.clone()

    def update_folders(
        self,
        submission_id: str,
        theory_folder_id: Optional[str],
        lab_folder_id: Optional[str],
    ) -> SubmissionRecord:
        with self._lock:
            record = self._get(submission_id, PersistenceError)
            _ensure_writable(record)
            record.folders = CategoryFolders(
                theory_folder_id=theory_folder_id or record.folders.theory_folder_id,
                lab_folder_id=lab_folder_id or record.folders.lab_folder_id,
            )
            record.last_modified_at = now_utc()
            return record.clone()

    def finalize(self, submission_id: str) -> SubmissionRecord:
        with self._lock:
            record = self._get(submission_id, FinalizationError)
            if record.is_submitted:
                return record.clone()

            _recompute(record)
            if record.completion_percentage < 100:
                raise FinalizationError(
                    INCOMPLETE_SUBMISSION_MESSAGE,
                    details={
                        "submission_id": submission_id,
                        "completion_percentage": record.completion_percentage,
                    },
                )

            record.submission_status = SubmissionStatus.SUBMITTED
            record.submitted_at = now_utc()
            record.last_modified_at = record.submitted_at
            logger.info("Submission %s finalized", submission_id)
            return record.clone()

    def review(
        self,
        submission_id: str,
        overall_status: Union[OverallStatus, str],
        comments: Optional[str] = None,
    ) -> SubmissionRecord:
        try:
            new_status = OverallStatus(overall_status)
        except ValueError as exc:
            raise InvalidArgumentError(
                f"Invalid review status {overall_status!r}", cause=exc
            ) from exc

        with self._lock:
            record = self._get(submission_id, PersistenceError)
            record.overall_status = new_status
            if comments is not None:
                record.review_comments = comments
            record.reviewed_at = now_utc()
            return record.clone()

    def _get(self, submission_id: str, error_cls: type) -> SubmissionRecord:
        record = self._records.get(submission_id)
        if record is None:
            raise error_cls(
                "Submission not found",
                details={"submission_id": submission_id},
            )
        return record


def _validate_course_info(course_info: CourseInfo) -> None:
    missing = [
        name
        for name, value in (
            ("course_code", course_info.course_code),
            ("course_section", course_info.course_section),
            ("semester", course_info.semester),
        )
        if not value or not value.strip()
    ]
    if missing:
        raise InvalidArgumentError(
            f"Missing required course fields: {', '.join(missing)}",
            details={"missing": missing},
        )


def _ensure_writable(record: SubmissionRecord) -> None:
    if record.is_submitted:
        raise PersistenceError(
            "Submission is already submitted and can no longer be modified",
            details={"submission_id": record.submission_id},
        )


def _recompute(record: SubmissionRecord) -> None:
    percentage = record.summary().percentage
    record.completion_percentage = percentage
    if not record.is_submitted:
        if percentage >= 100:
            record.submission_status = SubmissionStatus.COMPLETE
        elif percentage > 0:
            record.submission_status = SubmissionStatus.PARTIAL
        else:
            record.submission_status = SubmissionStatus.DRAFT
    record.last_modified_at = now_utc()
