"""Folder path resolution."""

from __future__ import annotations

from .resolver import FolderPath, PathResolver, normalize_path, split_semester

__all__ = ["FolderPath", "PathResolver", "normalize_path", "split_semester"]
