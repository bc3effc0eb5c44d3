"""Dual-destination uploads."""

from __future__ import annotations

from .coordinator import DualUploadCoordinator

__all__ = ["DualUploadCoordinator"]
