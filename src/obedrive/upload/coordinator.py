"""Concurrent upload of one artifact to the personal and shared destinations."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from obedrive.destinations import DriveDestination, ProgressCallback
from obedrive.errors import UploadError
from obedrive.models import (
    ArtifactRef,
    DestinationKind,
    FolderRef,
    LocalFile,
    OutcomeKind,
    UploadOutcome,
)

logger = logging.getLogger(__name__)


class DualUploadCoordinator:
    """
    Fan one file out to both destinations and fan the results back in.

    There is no two-phase commit between the stores: each side succeeds or
    fails on its own and the caller decides what outcome is acceptable
    (see UploadOutcome.kind). Nothing is retried here.
    """

    def __init__(
        self,
        personal: Optional[DriveDestination],
        shared: Optional[DriveDestination],
        *,
        max_workers: int = 4,
    ) -> None:
        self._destinations: dict[DestinationKind, Optional[DriveDestination]] = {
            DestinationKind.PERSONAL: personal,
            DestinationKind.SHARED: shared,
        }
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="obedrive-upload",
        )

    def destination(self, kind: DestinationKind) -> Optional[DriveDestination]:
        return self._destinations[kind]

    def is_usable(self, kind: DestinationKind) -> bool:
        dest = self._destinations[kind]
        return dest is not None and dest.is_usable()

    def upload(
        self,
        file: LocalFile,
        logical_name: str,
        personal_folder: Optional[FolderRef],
        shared_folder: Optional[FolderRef],
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadOutcome:
        """
        Upload `file` as `logical_name` into both target folders.

        A side whose folder is None, or whose destination is missing or not
        usable, is recorded in `omitted`. `on_progress` only reports the
        personal transfer.
        """
        outcome = UploadOutcome()
        targets = {
            DestinationKind.PERSONAL: personal_folder,
            DestinationKind.SHARED: shared_folder,
        }

        futures: dict[DestinationKind, Future[ArtifactRef]] = {}
        for kind, folder in targets.items():
            dest = self._destinations[kind]
            if folder is None or dest is None or not dest.is_usable():
                logger.debug("Skipping %s upload of %s: destination not ready", kind.value, logical_name)
                outcome.omitted.append(kind)
                continue
            progress = on_progress if kind is DestinationKind.PERSONAL else None
            futures[kind] = self._executor.submit(
                _upload_one, dest, file, logical_name, folder, progress
            )

        for kind, future in futures.items():
            try:
                ref = future.result()
            except UploadError as exc:
                outcome.errors.append(f"{kind.label} drive upload failed: {exc}")
                continue
            if kind is DestinationKind.PERSONAL:
                outcome.personal = ref
            else:
                outcome.shared = ref

        _log_outcome(logical_name, outcome)
        return outcome

    def shutdown(self, *, wait: bool = False) -> None:
        """Stop accepting uploads; transfers already running are allowed to finish."""
        self._executor.shutdown(wait=wait)


def _upload_one(
    dest: DriveDestination,
    file: LocalFile,
    logical_name: str,
    folder: FolderRef,
    on_progress: Optional[ProgressCallback],
) -> ArtifactRef:
    kind = dest.kind
    try:
        return dest.upload(
            file.data,
            logical_name,
            folder.id,
            mime_type=file.mime_type,
            on_progress=on_progress,
        )
    except Exception as exc:
        raise UploadError(
            str(exc) or exc.__class__.__name__,
            details={"destination": kind.value, "folder_id": folder.id, "name": logical_name},
            cause=exc,
        ) from exc


def _log_outcome(logical_name: str, outcome: UploadOutcome) -> None:
    kind = outcome.kind
    if kind is OutcomeKind.FULL:
        logger.info("Uploaded %s to personal and shared drive", logical_name)
    elif kind is OutcomeKind.PARTIAL:
        logger.warning(
            "Uploaded %s to one destination only (omitted=%s, errors=%s)",
            logical_name,
            [k.value for k in outcome.omitted],
            outcome.errors,
        )
    else:
        logger.error("Upload of %s failed on every destination: %s", logical_name, outcome.errors)
