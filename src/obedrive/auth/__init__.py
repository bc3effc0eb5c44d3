"""Public auth exports for obedrive."""

from __future__ import annotations

from .auth_info import AuthInfo
from .drive_auth import PERSONAL_SCOPES, SHARED_SCOPES, DriveAuthClient

__all__ = ["AuthInfo", "DriveAuthClient", "PERSONAL_SCOPES", "SHARED_SCOPES"]
