"""The Drive-like storage capability consumed by the engine."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from obedrive.models import ArtifactRef, DestinationKind, FolderRef, UploadProgress

ProgressCallback = Callable[[UploadProgress], None]


class DriveDestination(Protocol):
    """
    One hierarchical object store artifacts are replicated into.

    `is_usable()` is the only session signal the engine needs; an unusable
    destination is skipped, not treated as a failure.
    """

    kind: DestinationKind
    root_id: str

    def is_usable(self) -> bool: ...

    def find(self, name: str, parent_id: str) -> Optional[FolderRef]: ...

    def create(self, name: str, parent_id: str) -> FolderRef: ...

    def upload(
        self,
        data: bytes,
        name: str,
        parent_id: str,
        *,
        mime_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ArtifactRef: ...
