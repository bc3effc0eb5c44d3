"""Internal controller exports for obedrive."""

from __future__ import annotations

from .drive_controller import GoogleDriveController, ProgressCallback

__all__ = ["GoogleDriveController", "ProgressCallback"]
