"""Google Drive implementation of the destination capability."""

from __future__ import annotations

from typing import Callable, Optional

from obedrive.auth import AuthInfo
from obedrive.config import EngineConfig
from obedrive.controller import GoogleDriveController
from obedrive.errors import InvalidArgumentError
from obedrive.models import ArtifactRef, DestinationKind, DriveFile, FolderRef

from .base import ProgressCallback

# Drive alias for the signed-in user's "My Drive".
MY_DRIVE_ROOT_ID = "root"


class GoogleDriveDestination:
    """Personal or shared Drive destination backed by a GoogleDriveController."""

    def __init__(
        self,
        controller: GoogleDriveController,
        *,
        kind: DestinationKind,
        root_id: str,
        usable: Optional[Callable[[], bool]] = None,
    ) -> None:
        if not root_id or not isinstance(root_id, str):
            raise InvalidArgumentError("root_id must be a non-empty string")
        self._controller = controller
        self.kind = kind
        self.root_id = root_id
        self._usable = usable

    @classmethod
    def personal(
        cls,
        auth_info: AuthInfo,
        config: Optional[EngineConfig] = None,
        *,
        usable: Optional[Callable[[], bool]] = None,
    ) -> GoogleDriveDestination:
        """Destination rooted at the signed-in user's My Drive."""
        cfg = config or EngineConfig()
        controller = GoogleDriveController(
            auth_info,
            supports_all_drives=cfg.supports_all_drives,
            chunk_size=cfg.upload_chunk_size,
        )
        return cls(controller, kind=DestinationKind.PERSONAL, root_id=MY_DRIVE_ROOT_ID, usable=usable)

    @classmethod
    def shared(
        cls,
        auth_info: AuthInfo,
        config: EngineConfig,
        *,
        usable: Optional[Callable[[], bool]] = None,
    ) -> GoogleDriveDestination:
        """Destination rooted at the institutional shared folder."""
        if not config.shared_root_folder_id:
            raise InvalidArgumentError("EngineConfig.shared_root_folder_id is required")
        controller = GoogleDriveController(
            auth_info,
            supports_all_drives=config.supports_all_drives,
            chunk_size=config.upload_chunk_size,
        )
        return cls(
            controller,
            kind=DestinationKind.SHARED,
            root_id=config.shared_root_folder_id,
            usable=usable,
        )

    def is_usable(self) -> bool:
        if self._usable is None:
            return True
        return bool(self._usable())

    def find(self, name: str, parent_id: str) -> Optional[FolderRef]:
        found = self._controller.find_folder(name, parent_id)
        if found is None:
            return None
        return FolderRef(id=found.file_id, name=found.name)

    def create(self, name: str, parent_id: str) -> FolderRef:
        created = self._controller.create_folder(name, parent_id)
        return FolderRef(id=created.file_id, name=created.name)

    def upload(
        self,
        data: bytes,
        name: str,
        parent_id: str,
        *,
        mime_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ArtifactRef:
        uploaded = self._controller.upload_bytes(
            data,
            name,
            parent_id,
            mime_type=mime_type,
            on_progress=on_progress,
        )
        return _to_artifact_ref(uploaded)


def _to_artifact_ref(info: DriveFile) -> ArtifactRef:
    view_url = info.web_view_link
    if not view_url and info.file_id:
        view_url = f"https://drive.google.com/file/d/{info.file_id}/view"
    return ArtifactRef(id=info.file_id, name=info.name, view_url=view_url)
