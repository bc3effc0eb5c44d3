"""Folder provisioning."""

from __future__ import annotations

from .provisioner import FolderProvisioner

__all__ = ["FolderProvisioner"]
