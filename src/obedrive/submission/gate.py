"""Draft -> submitted state machine around the final submit."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from obedrive.checklist import ChecklistReconciler
from obedrive.errors import (
    FinalizationError,
    InvalidStateError,
    PersistenceError,
    PreconditionError,
)
from obedrive.models import ItemStatus, SubmissionRecord

from .base import SubmissionStore

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    DRAFT = "draft"
    SUBMITTABLE = "submittable"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class SubmissionGate:
    """
    Guards `finalize`.

    Finalize is only called when every item is `yes` and every `yes` item
    has been pushed to the store. At most one submit runs at a time and the
    submitting flag is released whatever happens.
    """

    def __init__(
        self,
        reconciler: ChecklistReconciler,
        store: SubmissionStore,
        *,
        settle_timeout_sec: float = 30.0,
        settle_delay_sec: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._reconciler = reconciler
        self._store = store
        self._settle_timeout_sec = settle_timeout_sec
        self._settle_delay_sec = settle_delay_sec
        self._sleep = sleep

        self._lock = threading.Lock()
        self._submitting = False
        self._synced_revision: Optional[int] = None

    @property
    def state(self) -> GateState:
        with self._lock:
            submitting = self._submitting
        if self._reconciler.frozen:
            return GateState.SUBMITTED
        if submitting:
            return GateState.SUBMITTING
        if self._reconciler.can_submit():
            return GateState.SUBMITTABLE
        return GateState.DRAFT

    @staticmethod
    def can_submit(record: SubmissionRecord) -> bool:
        """True when every item of both categories is `yes`."""
        items = record.all_items()
        return bool(items) and all(i.status is ItemStatus.YES for i in items)

    def submit(self) -> SubmissionRecord:
        """
        Finalize the submission and return the frozen record.

        Raises:
            InvalidStateError: if a submit is already running.
            PreconditionError: if any item is not `yes` (finalize not called).
            PersistenceError: if the pre-flight sync failed or timed out.
            FinalizationError: if the store rejected finalize.
        """
        with self._lock:
            if self._reconciler.frozen:
                return self._reconciler.view()
            if self._submitting:
                raise InvalidStateError("A submission is already in progress")

            view = self._reconciler.view()
            if not self.can_submit(view):
                incomplete = [i for i in view.iter_items() if i.status is not ItemStatus.YES]
                raise PreconditionError(
                    "Please complete all required documents before submitting: "
                    + ", ".join(i.name for i in incomplete),
                    details={"items": [f"{i.category.value}/{i.id}" for i in incomplete]},
                )
            self._submitting = True

        try:
            self._preflight_sync(view)

            if self._settle_delay_sec > 0:
                self._sleep(self._settle_delay_sec)
            submission_id = self._reconciler.submission_id
            self._reconciler.load(self._store.get(submission_id))

            try:
                finalized = self._store.finalize(submission_id)
            except FinalizationError:
                raise
            except Exception as exc:
                raise FinalizationError(
                    str(exc) or exc.__class__.__name__,
                    details={"submission_id": submission_id},
                    cause=exc,
                ) from exc

            record = self._reconciler.load(finalized)
            logger.info("Submission %s submitted", submission_id)
            return record
        except Exception as exc:
            logger.warning("Submit failed: %s", exc)
            raise
        finally:
            with self._lock:
                self._submitting = False

    def _preflight_sync(self, view: SubmissionRecord) -> None:
        revision = self._reconciler.revision
        if revision == self._synced_revision:
            logger.debug("Checklist unchanged since last sync; skipping pre-flight sync")
            return

        keys = [(i.category, i.id) for i in view.iter_items() if i.status is ItemStatus.YES]
        failures = self._reconciler.sync(keys, timeout=self._settle_timeout_sec)
        if failures:
            first = next(iter(failures.values()))
            raise PersistenceError(
                f"Could not save {len(failures)} document(s) before submitting: {first}",
                details={"items": [f"{c.value}/{i}" for c, i in failures]},
                cause=first,
            )
        self._synced_revision = revision
