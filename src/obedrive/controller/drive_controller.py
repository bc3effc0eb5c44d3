"""Google Drive API controller (internal use only)."""

from __future__ import annotations

import io
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from obedrive.auth import AuthInfo, DriveAuthClient
from obedrive.errors import (
    ApiError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    RateLimitError,
    map_http_error,
)
from obedrive.models import DriveFile, UploadProgress
from obedrive.util.mime import FOLDER_MIME, DEFAULT_MIME
from obedrive.util.time import parse_optional_rfc3339

FILE_FIELDS = "id,name,mimeType,parents,webViewLink,createdTime,modifiedTime,size"
LIST_FIELDS = f"nextPageToken,files({FILE_FIELDS})"

T = TypeVar("T")

ProgressCallback = Callable[[UploadProgress], None]

logger = logging.getLogger(__name__)

_DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class GoogleDriveController:
    """
    Drive API controller (internal only).

    Notes:
        - The Drive `service` object is NOT exposed.
        - `supports_all_drives` is applied to all requests consistently.
        - Metadata calls retry on 429/5xx/network errors. Media uploads are
          never retried: Drive does not deduplicate by name, so a retry after
          an ambiguous failure could leave two copies.
    """

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        scopes: Optional[list[str]] = None,
        supports_all_drives: bool = True,
        chunk_size: int = _DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._supports_all_drives = supports_all_drives
        self._retry_policy = _RetryPolicy()
        self._chunk_size = chunk_size

        client = DriveAuthClient(auth_info)
        self._service = client.build_drive_service(scopes, ensure_valid=True)

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        supports_all_drives: bool = True,
        chunk_size: int = _DEFAULT_CHUNK_SIZE,
    ) -> "GoogleDriveController":
        """Create controller from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._supports_all_drives = supports_all_drives
        obj._retry_policy = _RetryPolicy()
        obj._chunk_size = chunk_size
        obj._service = service
        return obj

    # ----------------------------
    # Public API
    # ----------------------------
    def find_folder(self, name: str, parent_id: str) -> Optional[DriveFile]:
        """
        Find a non-trashed folder named `name` directly under `parent_id`.

        Returns the oldest match when duplicates exist, so concurrent
        provisioning races resolve to the same folder on every lookup.
        """
        q = (
            f"name = '{escape_query_value(name)}'"
            f" and '{escape_query_value(parent_id)}' in parents"
            f" and mimeType = '{FOLDER_MIME}'"
            " and trashed = false"
        )
        matches = self._find_by_query(q, order_by="createdTime")
        return matches[0] if matches else None

    def create_folder(self, name: str, parent_id: str) -> DriveFile:
        body = {"name": name, "mimeType": FOLDER_MIME, "parents": [parent_id]}
        req = self._service.files().create(
            body=body,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute)
        logger.info("Created Drive folder %r under %s (%s)", name, parent_id, data.get("id"))
        return _file_dict_to_drive_file(data)

    def upload_bytes(
        self,
        data: bytes,
        name: str,
        parent_id: str,
        *,
        mime_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> DriveFile:
        """Upload in-memory bytes as a new file under parent_id (resumable)."""
        if not name or not isinstance(name, str):
            raise InvalidArgumentError("name must be a non-empty string")
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidArgumentError("data must be bytes")

        from googleapiclient.http import MediaIoBaseUpload

        media = MediaIoBaseUpload(
            io.BytesIO(bytes(data)),
            mimetype=mime_type or DEFAULT_MIME,
            chunksize=self._chunk_size,
            resumable=True,
        )
        body = {"name": name, "parents": [parent_id]}
        req = self._service.files().create(
            body=body,
            media_body=media,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )

        total = len(data)
        response = None
        while response is None:
            status, response = self._execute(req.next_chunk, retry=False)
            if status is not None and on_progress is not None:
                on_progress(UploadProgress(loaded=int(status.resumable_progress), total=total))

        if on_progress is not None:
            on_progress(UploadProgress(loaded=total, total=total))
        return _file_dict_to_drive_file(response)

    # ----------------------------
    # Internals
    # ----------------------------
    def _common_list_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True, "includeItemsFromAllDrives": True}

    def _common_write_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _find_by_query(self, q: str, *, order_by: Optional[str] = None) -> list[DriveFile]:
        all_files: list[DriveFile] = []
        page_token: Optional[str] = None

        while True:
            kwargs: dict[str, Any] = dict(self._common_list_kwargs())
            if order_by:
                kwargs["orderBy"] = order_by
            req = self._service.files().list(
                q=q,
                fields=LIST_FIELDS,
                pageToken=page_token,
                **kwargs,
            )
            data = self._execute(req.execute)
            for f in data.get("files", []):
                all_files.append(_file_dict_to_drive_file(f))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return all_files

    def _execute(self, func: Callable[[], T], *, retry: bool = True) -> T:
        delay = self._retry_policy.initial_delay_sec
        max_retries = self._retry_policy.max_retries if retry else 0
        for attempt in range(max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < max_retries:
                    logger.debug("Retrying Drive request after %s (attempt %d)", mapped, attempt + 1)
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, RateLimitError):
            return True
        if isinstance(exc, NetworkError):
            return True
        if isinstance(exc, ApiError):
            status_code = getattr(exc, "details", {}).get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        from googleapiclient.errors import HttpError

        if isinstance(exc, HttpError):
            info = _http_error_to_info(exc)
            return map_http_error(info, cause=exc)

        if isinstance(exc, (OSError, TimeoutError)):
            return NetworkError("Network error", cause=exc)

        return ApiError("Drive API error", cause=exc)


def escape_query_value(value: str) -> str:
    """Escape a literal for use inside a single-quoted Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _file_dict_to_drive_file(data: dict[str, Any]) -> DriveFile:
    file_id = data.get("id")
    name = data.get("name", "")
    mime_type = data.get("mimeType", "")
    parents = data.get("parents", []) or []
    link = data.get("webViewLink")

    size = None
    if isinstance(data.get("size"), str) and data["size"].isdigit():
        size = int(data["size"])
    elif isinstance(data.get("size"), int):
        size = data["size"]

    return DriveFile(
        file_id=file_id if isinstance(file_id, str) else "",
        name=name if isinstance(name, str) else "",
        mime_type=mime_type if isinstance(mime_type, str) else "",
        parents=list(parents) if isinstance(parents, list) else [],
        web_view_link=link if isinstance(link, str) else None,
        created_time=parse_optional_rfc3339(data.get("createdTime")),
        modified_time=parse_optional_rfc3339(data.get("modifiedTime")),
        size=size,
    )


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        err = payload.get("error", {}) if isinstance(payload, dict) else {}
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                details["reason_detail"] = errors[0].get("reason")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
