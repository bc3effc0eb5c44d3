"""Destination capability and its Google Drive implementation."""

from __future__ import annotations

from .base import DriveDestination, ProgressCallback
from .google_drive import MY_DRIVE_ROOT_ID, GoogleDriveDestination

__all__ = ["DriveDestination", "ProgressCallback", "GoogleDriveDestination", "MY_DRIVE_ROOT_ID"]
