"""SubmissionSession: the public entry point tying the engine together."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Union

from obedrive.auth import AuthInfo
from obedrive.checklist import ChecklistReconciler, artifact_display_name
from obedrive.config import EngineConfig
from obedrive.destinations import DriveDestination, GoogleDriveDestination, ProgressCallback
from obedrive.errors import (
    InvalidArgumentError,
    InvalidStateError,
    ObeDriveError,
    PersistenceError,
    ProvisioningError,
)
from obedrive.models import (
    ArtifactMetadata,
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
    SubmissionRecord,
    SubmitResult,
    UploadOutcome,
)
from obedrive.paths import PathResolver
from obedrive.provision import FolderProvisioner
from obedrive.submission import GateState, SubmissionGate, SubmissionStore
from obedrive.upload import DualUploadCoordinator

logger = logging.getLogger(__name__)

Notifier = Callable[[Notification], None]

_LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_notification(notification: Notification) -> None:
    """Default notifier: write the notification to the session logger."""
    logger.log(_LOG_LEVELS.get(notification.level, logging.INFO), notification.message)


class SubmissionSession:
    """
    One instructor's document submission for one course section.

    Typical flow:
        session.open()
        session.provision_category_folders()
        session.upload_artifact("class-test", "marginal", file, Category.THEORY)
        ...
        session.submit_all()

    Either destination may be None (not connected). The personal destination
    is the primary copy; the shared one mirrors it into the institutional
    folder tree.
    """

    def __init__(
        self,
        course_info: CourseInfo,
        store: SubmissionStore,
        *,
        personal: Optional[DriveDestination] = None,
        shared: Optional[DriveDestination] = None,
        config: Optional[EngineConfig] = None,
        notifier: Optional[Notifier] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.course_info = course_info
        self.config = config or EngineConfig()
        self._store = store
        self._notifier = notifier or log_notification

        self._resolver = PathResolver(self.config.org_root_folder)
        self._provisioners: dict[DestinationKind, FolderProvisioner] = {}
        if personal is not None:
            self._provisioners[DestinationKind.PERSONAL] = FolderProvisioner(personal)
        if shared is not None:
            self._provisioners[DestinationKind.SHARED] = FolderProvisioner(shared)

        self._coordinator = DualUploadCoordinator(
            personal,
            shared,
            max_workers=self.config.max_upload_workers,
        )
        self._reconciler = ChecklistReconciler(store, max_workers=self.config.max_upload_workers)
        self._gate = SubmissionGate(
            self._reconciler,
            store,
            settle_timeout_sec=self.config.settle_timeout_sec,
            settle_delay_sec=self.config.settle_delay_sec,
            sleep=sleep,
        )
        self._closed = False

    @classmethod
    def from_auth(
        cls,
        course_info: CourseInfo,
        store: SubmissionStore,
        *,
        personal_auth: Optional[AuthInfo] = None,
        shared_auth: Optional[AuthInfo] = None,
        config: Optional[EngineConfig] = None,
        notifier: Optional[Notifier] = None,
    ) -> "SubmissionSession":
        """Build Google Drive destinations from credentials."""
        cfg = config or EngineConfig()
        personal = GoogleDriveDestination.personal(personal_auth, cfg) if personal_auth else None
        shared = None
        if shared_auth is not None and cfg.shared_root_folder_id:
            shared = GoogleDriveDestination.shared(shared_auth, cfg)
        return cls(
            course_info,
            store,
            personal=personal,
            shared=shared,
            config=cfg,
            notifier=notifier,
        )

    def __enter__(self) -> "SubmissionSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----------------------------
    # State
    # ----------------------------
    @property
    def record(self) -> SubmissionRecord:
        """Current checklist view. Requires open() first."""
        self._require_open()
        return self._reconciler.view()

    @property
    def state(self) -> GateState:
        return self._gate.state

    @property
    def reconciler(self) -> ChecklistReconciler:
        return self._reconciler

    def open(self) -> SubmissionRecord:
        """Fetch (or create) the submission record for the course and load it."""
        self._ensure_not_closed()
        record = self._store.get_or_create(self.course_info)
        view = self._reconciler.load(record)
        logger.info(
            "Opened submission %s (%s, %d%%)",
            view.submission_id,
            view.submission_status.value,
            view.completion_percentage,
        )
        return view

    def refresh(self) -> SubmissionRecord:
        """Reload the record from the store, keeping local checklist state."""
        self._require_open()
        return self._reconciler.load(self._store.get(self._reconciler.submission_id))

    # ----------------------------
    # Folders
    # ----------------------------
    def provision_category_folders(self) -> CategoryFolders:
        """
        Ensure the Theory and Lab folders exist in every connected destination.

        Returns the personal folder ids, which are also saved on the record.

        Raises:
            ProvisioningError: if the personal hierarchy could not be created.
        """
        self._require_open()
        personal: dict[Category, FolderRef] = {}

        for kind in DestinationKind:
            provisioner = self._provisioners.get(kind)
            if provisioner is None or not provisioner.destination.is_usable():
                self._notify("info", f"{kind.label} drive not connected; folders not created there")
                continue

            for category in Category:
                try:
                    ref = provisioner.ensure(self._resolver.resolve(self.course_info, category, kind))
                except (ProvisioningError, InvalidArgumentError) as exc:
                    if kind is DestinationKind.PERSONAL:
                        self._notify("error", "Failed to create course folder structure in Google Drive")
                        raise
                    logger.warning("Shared %s folder not provisioned: %s", category.value, exc)
                    self._notify("warning", f"Shared drive folders not created: {exc}")
                    break
                if kind is DestinationKind.PERSONAL:
                    personal[category] = ref

        folders = CategoryFolders(
            theory_folder_id=_ref_id(personal.get(Category.THEORY)),
            lab_folder_id=_ref_id(personal.get(Category.LAB)),
        )
        if folders.theory_folder_id or folders.lab_folder_id:
            self._save_folders(folders)
        return folders

    # ----------------------------
    # Uploads and status
    # ----------------------------
    def upload_artifact(
        self,
        item_id: str,
        artifact_key: str,
        file: LocalFile,
        category: Category,
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadOutcome:
        """
        Upload one artifact of a checklist item to both destinations.

        The upload counts when at least one destination took it; the item is
        then updated (and becomes `yes` when it was the last missing file).
        A store failure after a successful upload is reported in
        `outcome.persistence_error` and can be retried with `retry_sync`.
        """
        self._require_open()
        category = Category(category)
        self._reconciler.begin_upload(item_id, category, artifact_key)

        logical_name = f"{artifact_key}_{file.name}"
        folders: dict[DestinationKind, Optional[FolderRef]] = {}
        provisioning_errors: dict[DestinationKind, str] = {}
        try:
            for kind in DestinationKind:
                try:
                    folders[kind] = self._folder_for(kind, category)
                except (ProvisioningError, InvalidArgumentError) as exc:
                    folders[kind] = None
                    provisioning_errors[kind] = f"{kind.label} drive upload failed: {exc}"

            outcome = self._coordinator.upload(
                file,
                logical_name,
                folders[DestinationKind.PERSONAL],
                folders[DestinationKind.SHARED],
                on_progress=on_progress,
            )
        except Exception:
            self._reconciler.fail_upload(item_id, category, artifact_key)
            raise

        for kind, message in provisioning_errors.items():
            if kind in outcome.omitted:
                outcome.omitted.remove(kind)
            outcome.errors.insert(0, message)

        if outcome.succeeded:
            primary = outcome.primary
            metadata = ArtifactMetadata.from_local_file(
                file,
                storage_id=primary.id if primary else None,
                url=primary.view_url if primary else None,
            )
            try:
                self._reconciler.record_upload(item_id, category, artifact_key, file, metadata)
            except PersistenceError as exc:
                outcome.persistence_error = str(exc)
        else:
            self._reconciler.fail_upload(item_id, category, artifact_key)

        self._notify_upload(file, artifact_key, outcome)
        return outcome

    def set_item_status(
        self,
        item_id: str,
        category: Category,
        status: Union[ItemStatus, str],
    ) -> None:
        """
        Mark an item `yes` (all files present) or `no` (clears its files).

        Raises:
            PreconditionError: `yes` with required files missing.
            PersistenceError: the store rejected the change (kept locally).
        """
        self._require_open()
        try:
            self._reconciler.set_item_status(item_id, Category(category), status)
        except PersistenceError as exc:
            self._notify("warning", f"Failed to update status: {exc}")
            raise
        except ObeDriveError as exc:
            self._notify("error", str(exc))
            raise

    def retry_sync(self, item_id: str, category: Category) -> ChecklistItem:
        """Push one item to the store again (after a persistence failure)."""
        self._require_open()
        key = (Category(category), item_id)
        failures = self._reconciler.sync([key])
        if key in failures:
            raise failures[key]
        return self._reconciler.get_item(item_id, Category(category))

    def get_completion_summary(self) -> CompletionSummary:
        self._require_open()
        return self._reconciler.summary()

    # ----------------------------
    # Submit
    # ----------------------------
    def submit_all(self) -> SubmitResult:
        """Finalize the submission. Failures are returned, not raised."""
        self._require_open()
        try:
            record = self._gate.submit()
        except ObeDriveError as exc:
            self._notify("error", f"Failed to submit documents: {exc}")
            return SubmitResult(ok=False, record=self._reconciler.view(), error=exc)

        self._notify("success", "All remaining documents submitted successfully!")
        return SubmitResult(ok=True, record=record)

    def close(self) -> None:
        """Release worker pools; running transfers finish but are not applied."""
        if self._closed:
            return
        self._closed = True
        self._reconciler.close()
        self._coordinator.shutdown(wait=False)
        logger.debug("Session for %s closed", "/".join(self.course_info.key))

    # ----------------------------
    # Internals
    # ----------------------------
    def _require_open(self) -> None:
        self._ensure_not_closed()
        if not self._reconciler.loaded:
            raise InvalidStateError("Session is not open. Call open() first.")

    def _ensure_not_closed(self) -> None:
        if self._closed:
            raise InvalidStateError("Session is closed")

    def _folder_for(self, kind: DestinationKind, category: Category) -> Optional[FolderRef]:
        provisioner = self._provisioners.get(kind)
        if provisioner is None or not provisioner.destination.is_usable():
            return None
        path = self._resolver.resolve(self.course_info, category, kind)
        ref = provisioner.cached(path)
        if ref is None and self.config.provision_on_upload:
            ref = provisioner.ensure(path)
        return ref

    def _save_folders(self, folders: CategoryFolders) -> None:
        try:
            record = self._store.update_folders(
                self._reconciler.submission_id,
                folders.theory_folder_id,
                folders.lab_folder_id,
            )
        except PersistenceError as exc:
            logger.warning("Could not save folder ids on the submission: %s", exc)
            self._notify("warning", f"Folder ids not saved: {exc}")
            return
        self._reconciler.load(record)

    def _notify_upload(self, file: LocalFile, key: str, outcome: UploadOutcome) -> None:
        label = artifact_display_name(key)
        for kind in outcome.omitted:
            if self._coordinator.is_usable(kind):
                self._notify("info", f"{kind.label} course folder not ready; {label} not copied there")
            else:
                self._notify("info", f"{kind.label} drive not connected; {label} not copied there")

        kind = outcome.kind
        if kind is OutcomeKind.FULL:
            self._notify("success", f'File "{file.name}" uploaded successfully!')
        elif kind is OutcomeKind.PARTIAL:
            where = "personal" if outcome.personal is not None else "shared"
            message = f'File "{file.name}" uploaded to {where} drive only'
            if outcome.errors:
                message += ": " + "; ".join(outcome.errors)
            self._notify("warning", message)
        else:
            detail = "; ".join(outcome.errors) or "no destination available"
            self._notify("error", f"Failed to upload file to Google Drive: {detail}")

        if outcome.persistence_error:
            self._notify("warning", f"{label} uploaded but not saved: {outcome.persistence_error}")

    def _notify(self, level: str, message: str) -> None:
        try:
            self._notifier(Notification(level=level, message=message))  # type: ignore[arg-type]
        except Exception:
            logger.exception("Notifier failed for %r", message)


def _ref_id(ref: Optional[FolderRef]) -> Optional[str]:
    return ref.id if ref is not None else None
