"""Submission store backed by the document submission REST service."""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from obedrive.errors import FinalizationError, InvalidArgumentError, PersistenceError
from obedrive.models import (
    ArtifactMetadata,
    Category,
    CourseInfo,
    ItemStatus,
    OverallStatus,
    SubmissionRecord,
)

logger = logging.getLogger(__name__)

_BASE_PATH = "/documents/submissions"


class RestSubmissionStore:
    """
    HTTP client for the submission service.

    Every response uses the envelope `{"success": bool, "data": ..., "message": str}`.
    A non-2xx status or `success: false` raises PersistenceError, or
    FinalizationError for the submit route, with the server message as is.
    Only connection failures are retried by the transport.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url or not isinstance(base_url, str):
            raise InvalidArgumentError("base_url must be a non-empty string")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._session = session if session is not None else requests.Session()

        retry = Retry(total=3, connect=3, read=0, status=0, backoff_factor=0.5)
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def get_or_create(self, course_info: CourseInfo) -> SubmissionRecord:
        data = self._request(
            "GET",
            f"{_BASE_PATH}/current",
            params=course_info.to_dict(),
            error_cls=PersistenceError,
        )
        return SubmissionRecord.from_dict(data)

    def get(self, submission_id: str) -> SubmissionRecord:
        data = self._request(
            "GET",
            f"{_BASE_PATH}/{submission_id}",
            error_cls=PersistenceError,
        )
        return SubmissionRecord.from_dict(data)

    def update_item_status(
        self,
        submission_id: str,
        item_id: str,
        category: Category,
        status: Union[ItemStatus, str],
        uploaded_files: dict[str, ArtifactMetadata],
    ) -> SubmissionRecord:
        body = {
            "documentId": item_id,
            "status": ItemStatus(status).value,
            "category": Category(category).value,
            "uploadedFiles": {k: v.to_dict() for k, v in uploaded_files.items()},
        }
        data = self._request(
            "PATCH",
            f"{_BASE_PATH}/{submission_id}/documents",
            json=body,
            error_cls=PersistenceError,
        )
        return SubmissionRecord.from_dict(data)

    def update_folders(
        self,
        submission_id: str,
        theory_folder_id: Optional[str],
        lab_folder_id: Optional[str],
    ) -> SubmissionRecord:
        folders: dict[str, str] = {}
        if theory_folder_id:
            folders["theoryFolderId"] = theory_folder_id
        if lab_folder_id:
            folders["labFolderId"] = lab_folder_id
        data = self._request(
            "POST",
            _BASE_PATH,
            json={"submissionId": submission_id, "googleDriveFolders": folders},
            error_cls=PersistenceError,
        )
        return SubmissionRecord.from_dict(data)

    def finalize(self, submission_id: str) -> SubmissionRecord:
        data = self._request(
            "POST",
            f"{_BASE_PATH}/{submission_id}/submit",
            error_cls=FinalizationError,
        )
        return SubmissionRecord.from_dict(data)

    def review(
        self,
        submission_id: str,
        overall_status: Union[OverallStatus, str],
        comments: Optional[str] = None,
    ) -> SubmissionRecord:
        body: dict[str, Any] = {"overallStatus": OverallStatus(overall_status).value}
        if comments is not None:
            body["reviewComments"] = comments
        data = self._request(
            "PATCH",
            f"{_BASE_PATH}/{submission_id}/review",
            json=body,
            error_cls=PersistenceError,
        )
        return SubmissionRecord.from_dict(data)

    def close(self) -> None:
        self._session.close()

    # ----------------------------
    # Internals
    # ----------------------------
    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def _request(
        self,
        method: str,
        path: str,
        *,
        error_cls: type,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise error_cls(
                f"Could not reach submission service: {exc}",
                details={"method": method, "path": path},
                cause=exc,
            ) from exc

        return _unwrap(response, method, path, error_cls)


def _unwrap(
    response: requests.Response,
    method: str,
    path: str,
    error_cls: type,
) -> dict[str, Any]:
    details = {"method": method, "path": path, "status_code": response.status_code}
    try:
        payload = response.json()
    except ValueError:
        payload = None

    envelope = payload if isinstance(payload, dict) else {}
    message = envelope.get("message")
    ok = 200 <= response.status_code < 300 and envelope.get("success", True) is not False

    if not ok:
        logger.debug("Submission service rejected %s %s: %s", method, path, message)
        raise error_cls(
            message if isinstance(message, str) and message else f"HTTP {response.status_code}",
            details=details,
        )

    data = envelope.get("data")
    if not isinstance(data, dict):
        raise error_cls("Malformed response from submission service", details=details)
    return data
