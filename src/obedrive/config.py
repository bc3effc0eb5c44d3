"""Engine configuration for obedrive."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

_CHUNK_GRANULARITY = 256 * 1024
_ENV_PREFIX = "OBEDRIVE_"


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """
    Tunables for one submission session.

    Attributes:
        org_root_folder: First segment of the personal folder hierarchy.
        shared_root_folder_id: Drive id of the institutional folder the shared
            hierarchy lives under. None disables the shared destination.
        max_upload_workers: Thread pool size for dual uploads and pre-flight sync.
        upload_chunk_size: Resumable upload chunk size (multiple of 256 KiB).
        settle_timeout_sec: Bound on the pre-flight sync barrier before finalize.
        settle_delay_sec: Pause after the barrier so the store can recompute
            the completion percentage before it is reloaded.
        provision_on_upload: Provision a missing category folder during upload
            instead of skipping that destination.
        supports_all_drives: Pass supportsAllDrives to every Drive request.
    """

    org_root_folder: str = "smart-mark"
    shared_root_folder_id: Optional[str] = None
    max_upload_workers: int = 4
    upload_chunk_size: int = 5 * 1024 * 1024
    settle_timeout_sec: float = 30.0
    settle_delay_sec: float = 1.0
    provision_on_upload: bool = False
    supports_all_drives: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.org_root_folder, str) or not self.org_root_folder.strip():
            raise ValueError("org_root_folder must be a non-empty string")

        if self.shared_root_folder_id is not None and not self.shared_root_folder_id.strip():
            raise ValueError("shared_root_folder_id must be None or a non-empty string")

        if self.max_upload_workers < 2:
            # Both sides of a dual upload must be able to run at once.
            raise ValueError("max_upload_workers must be >= 2")

        if self.upload_chunk_size <= 0 or self.upload_chunk_size % _CHUNK_GRANULARITY:
            raise ValueError("upload_chunk_size must be a positive multiple of 256 KiB")

        if self.settle_timeout_sec <= 0:
            raise ValueError("settle_timeout_sec must be > 0")

        if self.settle_delay_sec < 0:
            raise ValueError("settle_delay_sec must be >= 0")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
        """
        Build a config from OBEDRIVE_* environment variables.

        Values are parsed by EngineSettings; a value that does not parse
        (e.g. OBEDRIVE_SUPPORTS_ALL_DRIVES=ture) raises ValueError instead of
        falling back to a default.
        """
        if environ is None:
            settings = EngineSettings()
        else:
            values = {
                key[len(_ENV_PREFIX):].lower(): value
                for key, value in environ.items()
                if key.startswith(_ENV_PREFIX) and value.strip()
            }
            settings = EngineSettings.model_validate(values)
        return settings.to_config()


class EngineSettings(BaseSettings):
    """Typed OBEDRIVE_* environment settings."""

    model_config = SettingsConfigDict(
        env_prefix=_ENV_PREFIX,
        env_ignore_empty=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    org_root_folder: str = "smart-mark"
    shared_root_folder_id: Optional[str] = None
    max_upload_workers: int = 4
    upload_chunk_size: int = 5 * 1024 * 1024
    settle_timeout_sec: float = 30.0
    settle_delay_sec: float = 1.0
    provision_on_upload: bool = False
    supports_all_drives: bool = True

    def to_config(self) -> EngineConfig:
        return EngineConfig(**self.model_dump())
