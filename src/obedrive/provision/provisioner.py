"""Get-or-create provisioning of folder hierarchies in one destination."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Sequence

from obedrive.destinations import DriveDestination
from obedrive.errors import InvalidArgumentError, ProvisioningError
from obedrive.models import FolderRef
from obedrive.paths import FolderPath, normalize_path

logger = logging.getLogger(__name__)


class FolderProvisioner:
    """
    Ensure folder paths exist in a single destination.

    Each segment is looked up with `find` and created with `create` only when
    missing. Drive has no compare-and-swap for folder creation, so two
    sessions provisioning the same path at once can still create duplicate
    siblings; idempotence is best-effort.

    Resolved prefixes are memoized for the lifetime of the provisioner (one
    submission session), so ensuring a cached path makes no destination call.
    """

    def __init__(self, destination: DriveDestination) -> None:
        self._destination = destination
        self._cache: dict[FolderPath, FolderRef] = {}
        self._lock = threading.Lock()

    @property
    def destination(self) -> DriveDestination:
        return self._destination

    def ensure(self, path: Sequence[str]) -> FolderRef:
        """
        Return the terminal folder of `path`, creating missing segments.

        Raises:
            InvalidArgumentError: if the path is empty or has blank segments.
            ProvisioningError: if a find/create call fails. Ancestors created
                before the failure are kept and will be found on retry.
        """
        segments = normalize_path(path)
        if not segments:
            raise InvalidArgumentError("folder path must have at least one segment")

        with self._lock:
            cached = self._cache.get(segments)
            if cached is not None:
                logger.debug("Folder cache hit for %s in %s", "/".join(segments), self._kind)
                return cached

            parent_id = self._destination.root_id
            ref: Optional[FolderRef] = None
            for depth in range(1, len(segments) + 1):
                prefix = segments[:depth]
                ref = self._cache.get(prefix)
                if ref is None:
                    ref = self._get_or_create(segments[depth - 1], parent_id, depth)
                    self._cache[prefix] = ref
                parent_id = ref.id

            return ref  # type: ignore[return-value]

    def cached(self, path: Sequence[str]) -> Optional[FolderRef]:
        """Return the memoized folder for `path` without any destination call."""
        with self._lock:
            return self._cache.get(normalize_path(path))

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    # ----------------------------
    # Internals
    # ----------------------------
    @property
    def _kind(self) -> str:
        kind = getattr(self._destination, "kind", None)
        return getattr(kind, "value", str(kind))

    def _get_or_create(self, segment: str, parent_id: str, depth: int) -> FolderRef:
        details = {
            "destination": self._kind,
            "segment": segment,
            "depth": depth,
            "parent_id": parent_id,
        }

        try:
            found = self._destination.find(segment, parent_id)
        except Exception as exc:
            raise ProvisioningError(
                f"Failed to look up folder {segment!r} in {self._kind} destination",
                details=details,
                cause=exc,
            ) from exc

        if found is not None:
            logger.debug("Found folder %r (%s) in %s", segment, found.id, self._kind)
            return found

        try:
            created = self._destination.create(segment, parent_id)
        except Exception as exc:
            raise ProvisioningError(
                f"Failed to create folder {segment!r} in {self._kind} destination",
                details=details,
                cause=exc,
            ) from exc

        logger.info("Created folder %r (%s) in %s", segment, created.id, self._kind)
        return created
