"""Local checklist state reconciled against the submission store."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Iterable, Optional, Union

from obedrive.errors import (
    InvalidArgumentError,
    InvalidStateError,
    PersistenceError,
    PreconditionError,
)
from obedrive.models import (
    ArtifactMetadata,
    Category,
    ChecklistItem,
    CompletionSummary,
    ItemStatus,
    LocalFile,
    SubmissionRecord,
)
from obedrive.util.time import now_utc

from .locks import KeyedLock

logger = logging.getLogger(__name__)

ItemKey = tuple[Category, str]


class ChecklistReconciler:
    """
    Owns the session's view of the checklist.

    Local state is optimistic: mutations are applied immediately and pushed
    to the store afterwards (last writer wins). A failed push leaves the
    item dirty and the local change in place; `sync` retries it.

    Once a loaded record reports `submitted`, the checklist is frozen as a
    deep copy and served unchanged; later records only update review fields.
    """

    def __init__(self, store, *, max_workers: int = 4) -> None:
        self._store = store
        self._lock = threading.RLock()
        self._item_locks = KeyedLock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="obedrive-sync",
        )

        self._record: Optional[SubmissionRecord] = None
        self._snapshot: Optional[SubmissionRecord] = None
        self._dirty: set[ItemKey] = set()
        self._uploading: set[tuple[Category, str, str]] = set()
        self._revision = 0
        self._closed = False

    # ----------------------------
    # State
    # ----------------------------
    @property
    def revision(self) -> int:
        """Incremented on every local mutation."""
        with self._lock:
            return self._revision

    @property
    def frozen(self) -> bool:
        with self._lock:
            return self._snapshot is not None

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def loaded(self) -> bool:
        with self._lock:
            return self._record is not None

    @property
    def submission_id(self) -> str:
        return self._require_record().submission_id

    def view(self) -> SubmissionRecord:
        """A copy of the current record (the frozen snapshot once submitted)."""
        with self._lock:
            if self._snapshot is not None:
                return self._snapshot.clone()
            return self._require_record().clone()

    def items(self, category: Category) -> list[ChecklistItem]:
        return self.view().items(category)

    def get_item(self, item_id: str, category: Category) -> ChecklistItem:
        item = self.view().find_item(item_id, category)
        if item is None:
            raise InvalidArgumentError(
                f"Unknown checklist item {item_id!r} in {category.value}",
                details={"item_id": item_id, "category": category.value},
            )
        return item

    def summary(self) -> CompletionSummary:
        return self.view().summary()

    def incomplete_items(self) -> list[ChecklistItem]:
        return [i for i in self.view().iter_items() if i.status is not ItemStatus.YES]

    def can_submit(self) -> bool:
        with self._lock:
            if self._record is None and self._snapshot is None:
                return False
        return not self.incomplete_items()

    def dirty_keys(self) -> list[ItemKey]:
        with self._lock:
            return sorted(self._dirty, key=lambda k: (k[0].value, k[1]))

    def is_uploading(self, item_id: str, category: Category, key: str) -> bool:
        with self._lock:
            return (category, item_id, key) in self._uploading

    # ----------------------------
    # Reconciliation
    # ----------------------------
    def load(self, record: SubmissionRecord) -> SubmissionRecord:
        """
        Merge a record fetched from the store and return the resulting view.

        The local checklist is replaced only on the first load or when it is
        empty. Later loads keep local items, add items unknown locally and
        take the record-level fields.

        Raises:
            PersistenceError: if the record belongs to another submission
                than the one already loaded.
        """
        incoming = record.clone()
        with self._lock:
            if self._closed:
                logger.warning("Ignoring record %s loaded after close", incoming.submission_id)
                return self.view()

            loaded = self._snapshot if self._snapshot is not None else self._record
            if (
                loaded is not None
                and loaded.submission_id
                and incoming.submission_id != loaded.submission_id
            ):
                raise PersistenceError(
                    "Store returned a different submission than the one loaded",
                    details={
                        "submission_id": loaded.submission_id,
                        "received_id": incoming.submission_id,
                    },
                )

            if self._snapshot is not None:
                self._apply_review_fields(self._snapshot, incoming)
                return self._snapshot.clone()

            current = self._record
            if current is None or not current.all_items():
                self._record = incoming
            else:
                _merge_unknown_items(current, incoming)
                _take_record_fields(current, incoming)

            if self._record.is_submitted:
                self._snapshot = self._record.clone()
                self._dirty.clear()
                logger.info("Submission %s is submitted; checklist frozen", self._snapshot.submission_id)
                return self._snapshot.clone()

            return self._record.clone()

    # ----------------------------
    # Artifact lifecycle
    # ----------------------------
    def begin_upload(self, item_id: str, category: Category, key: str) -> None:
        """Mark an artifact as uploading (absent -> uploading)."""
        with self._lock:
            self._ensure_open()
            self._ensure_mutable()
            item = self._find(item_id, category)
            _require_key(item, key)
            self._uploading.add((category, item_id, key))

    def fail_upload(self, item_id: str, category: Category, key: str) -> None:
        """Return an uploading artifact to absent; the item is untouched."""
        with self._lock:
            self._uploading.discard((category, item_id, key))

    def record_upload(
        self,
        item_id: str,
        category: Category,
        key: str,
        local_file: LocalFile,
        metadata: ArtifactMetadata,
    ) -> Optional[ChecklistItem]:
        """
        Apply a completed upload (uploading -> present) and persist the item.

        The item becomes `yes` when this was its last missing artifact.
        Completions arriving after `close()` are ignored and return None.

        Raises:
            PersistenceError: if the store rejected the update. The local
                change is kept and the item stays dirty.
        """
        with self._item_locks.hold((category, item_id)):
            with self._lock:
                self._uploading.discard((category, item_id, key))
                if self._closed:
                    logger.warning(
                        "Ignoring upload of %s/%s completed after close", item_id, key
                    )
                    return None
                self._ensure_mutable()
                item = self._find(item_id, category)
                _require_key(item, key)

                item.local_files[key] = local_file
                item.uploaded_files[key] = metadata
                if item.status is not ItemStatus.YES and item.all_artifacts_present():
                    item.status = ItemStatus.YES
                    item.submitted_at = now_utc()
                    logger.info("Checklist item %s is complete", item_id)
                self._touch((category, item_id))
                result = item.clone()

            self._push_locked((category, item_id))
        return result

    # ----------------------------
    # Item status
    # ----------------------------
    def set_item_status(
        self,
        item_id: str,
        category: Category,
        status: Union[ItemStatus, str],
    ) -> ChecklistItem:
        """
        Set an item to `yes` or `no`.

        `yes` requires every required artifact; `no` clears the item's local
        files and persisted metadata.

        Raises:
            InvalidArgumentError: for any status other than yes/no.
            PreconditionError: if `yes` is requested with artifacts missing.
            PersistenceError: if the store rejected the update.
        """
        target = _coerce_status(status)

        with self._item_locks.hold((category, item_id)):
            with self._lock:
                self._ensure_open()
                self._ensure_mutable()
                item = self._find(item_id, category)

                if target is ItemStatus.YES:
                    missing = item.missing_keys()
                    if missing:
                        raise PreconditionError(
                            "Please upload all required files before marking as submitted.",
                            details={"item_id": item_id, "missing_keys": missing},
                        )
                    item.status = ItemStatus.YES
                    item.submitted_at = now_utc()
                else:
                    item.clear_artifacts()
                    item.status = ItemStatus.NO
                    item.submitted_at = None

                self._touch((category, item_id))
                result = item.clone()

            self._push_locked((category, item_id))
        return result

    # ----------------------------
    # Persistence
    # ----------------------------
    def submit_sync(self, keys: Optional[Iterable[ItemKey]] = None) -> dict[ItemKey, Future]:
        """Schedule pushes for `keys` (default: dirty items) without waiting."""
        with self._lock:
            self._ensure_open()
            targets = list(keys) if keys is not None else sorted(
                self._dirty, key=lambda k: (k[0].value, k[1])
            )
            for category, item_id in targets:
                self._find(item_id, category)
        return {key: self._executor.submit(self._push, key) for key in targets}

    def sync(
        self,
        keys: Optional[Iterable[ItemKey]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> dict[ItemKey, Exception]:
        """
        Push items concurrently and return the failures keyed by item.

        Each item is independent; an empty dict means every push succeeded.
        Pushes still running after `timeout` are reported as PersistenceError.
        """
        futures = self.submit_sync(keys)
        if not futures:
            return {}

        _, not_done = wait(futures.values(), timeout=timeout)
        failures: dict[ItemKey, Exception] = {}
        for key, future in futures.items():
            if future in not_done:
                failures[key] = PersistenceError(
                    f"Timed out syncing checklist item {key[1]!r}",
                    details={"item_id": key[1], "category": key[0].value},
                )
                continue
            exc = future.exception()
            if exc is not None:
                failures[key] = exc

        if failures:
            logger.warning("Sync left %d checklist item(s) dirty", len(failures))
        return failures

    def close(self) -> None:
        """Stop accepting mutations; late upload completions are ignored."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=False)

    # ----------------------------
    # Internals
    # ----------------------------
    def _push(self, key: ItemKey) -> None:
        with self._item_locks.hold(key):
            self._push_locked(key)

    def _push_locked(self, key: ItemKey) -> None:
        # Caller holds the item lock, so the item cannot change mid-push.
        category, item_id = key
        with self._lock:
            submission_id = self._require_record().submission_id
            item = self._find(item_id, category)
            status = item.status
            uploaded = dict(item.uploaded_files)

        try:
            updated = self._store.update_item_status(
                submission_id, item_id, category, status, uploaded
            )
        except Exception as exc:
            logger.warning("Failed to persist checklist item %s: %s", item_id, exc)
            if isinstance(exc, PersistenceError):
                raise
            raise PersistenceError(
                f"Failed to save checklist item {item_id!r}: {exc}",
                details={"submission_id": submission_id, "item_id": item_id},
                cause=exc,
            ) from exc

        with self._lock:
            self._dirty.discard(key)
        if updated is not None:
            self.load(updated)

    def _touch(self, key: ItemKey) -> None:
        self._revision += 1
        self._dirty.add(key)
        if self._record is not None:
            self._record.last_modified_at = now_utc()

    def _require_record(self) -> SubmissionRecord:
        with self._lock:
            if self._snapshot is not None:
                return self._snapshot
            if self._record is None:
                raise InvalidStateError("Checklist is not loaded; call load() first")
            return self._record

    def _find(self, item_id: str, category: Category) -> ChecklistItem:
        item = self._require_record().find_item(item_id, category)
        if item is None:
            raise InvalidArgumentError(
                f"Unknown checklist item {item_id!r} in {category.value}",
                details={"item_id": item_id, "category": category.value},
            )
        return item

    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidStateError("Checklist reconciler is closed")

    def _ensure_mutable(self) -> None:
        if self._snapshot is not None:
            raise InvalidStateError(
                "Submission is already submitted; the checklist can no longer change",
                details={"submission_id": self._snapshot.submission_id},
            )

    @staticmethod
    def _apply_review_fields(target: SubmissionRecord, source: SubmissionRecord) -> None:
        target.overall_status = source.overall_status
        target.review_comments = source.review_comments
        target.reviewed_at = source.reviewed_at


def _merge_unknown_items(current: SubmissionRecord, incoming: SubmissionRecord) -> None:
    for category in Category:
        local = current.items(category)
        known = {i.id for i in local}
        for item in incoming.items(category):
            if item.id not in known:
                local.append(item.clone())


def _take_record_fields(current: SubmissionRecord, incoming: SubmissionRecord) -> None:
    current.submission_id = incoming.submission_id or current.submission_id
    current.submission_status = incoming.submission_status
    current.overall_status = incoming.overall_status
    current.completion_percentage = incoming.completion_percentage
    if incoming.folders.theory_folder_id or incoming.folders.lab_folder_id:
        current.folders = incoming.folders
    current.submitted_at = incoming.submitted_at
    current.last_modified_at = incoming.last_modified_at or current.last_modified_at
    current.review_comments = incoming.review_comments
    current.reviewed_at = incoming.reviewed_at


def _require_key(item: ChecklistItem, key: str) -> None:
    if key not in item.required_keys:
        raise InvalidArgumentError(
            f"Unknown artifact key {key!r} for checklist item {item.id!r}",
            details={"item_id": item.id, "key": key, "required_keys": list(item.required_keys)},
        )


def _coerce_status(status: Union[ItemStatus, str]) -> ItemStatus:
    try:
        value = ItemStatus(status)
    except ValueError:
        value = None
    if value not in (ItemStatus.YES, ItemStatus.NO):
        raise InvalidArgumentError(
            f"Item status must be 'yes' or 'no', got {status!r}",
            details={"status": str(status)},
        )
    return value
