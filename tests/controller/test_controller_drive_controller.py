import json
import unittest
from datetime import datetime, timezone
from unittest.mock import Mock, patch

from obedrive.controller.drive_controller import (
    GoogleDriveController,
    _file_dict_to_drive_file,
    escape_query_value,
)
from obedrive.errors import ApiError, NetworkError, NotFoundError, RateLimitError
from obedrive.util.mime import FOLDER_MIME
from obedrive.util.time import to_rfc3339


def _http_error(status: int, reason: str = "", message: str = ""):
    from googleapiclient.errors import HttpError

    resp = Mock()
    resp.status = status
    resp.reason = reason
    body = {"error": {"message": message, "errors": [{"reason": reason}]}}
    return HttpError(resp=resp, content=json.dumps(body).encode("utf-8"))


class TestDriveControllerHelpers(unittest.TestCase):
    def test_file_dict_to_drive_file_parses_times(self) -> None:
        dt = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        data = {
            "id": "F1",
            "name": "n",
            "mimeType": "application/pdf",
            "parents": ["P1"],
            "webViewLink": "https://drive.google.com/file/d/F1/view",
            "modifiedTime": to_rfc3339(dt),
            "createdTime": to_rfc3339(dt),
            "size": "123",
        }
        info = _file_dict_to_drive_file(data)
        self.assertEqual(info.file_id, "F1")
        self.assertEqual(info.parents, ["P1"])
        self.assertEqual(info.size, 123)
        self.assertEqual(info.web_view_link, "https://drive.google.com/file/d/F1/view")
        self.assertEqual(info.modified_time, dt)
        self.assertEqual(info.created_time, dt)

    def test_escape_query_value(self) -> None:
        self.assertEqual(escape_query_value("O'Brien"), "O\\'Brien")
        self.assertEqual(escape_query_value("a\\b"), "a\\\\b")


class TestDriveControllerMocked(unittest.TestCase):
    def _mock_service_with_list(self, files_payload, next_token=None):
        service = Mock()
        files_resource = Mock()
        request = Mock()

        service.files.return_value = files_resource
        request.execute.return_value = {
            "files": files_payload,
            "nextPageToken": next_token,
        }
        files_resource.list.return_value = request
        return service, files_resource, request

    def test_find_folder_builds_escaped_query(self) -> None:
        service, files_resource, _ = self._mock_service_with_list([])
        controller = GoogleDriveController.from_service(service, supports_all_drives=True)

        result = controller.find_folder("Spring'25", "P1")

        self.assertIsNone(result)
        kwargs = files_resource.list.call_args.kwargs
        self.assertTrue(kwargs.get("supportsAllDrives"))
        self.assertTrue(kwargs.get("includeItemsFromAllDrives"))
        self.assertEqual(kwargs.get("orderBy"), "createdTime")
        self.assertIn("name = 'Spring\\'25'", kwargs["q"])
        self.assertIn("'P1' in parents", kwargs["q"])
        self.assertIn(f"mimeType = '{FOLDER_MIME}'", kwargs["q"])
        self.assertIn("trashed = false", kwargs["q"])

    def test_find_folder_returns_oldest_match(self) -> None:
        service, _, _ = self._mock_service_with_list(
            [
                {"id": "OLD", "name": "Theory", "mimeType": FOLDER_MIME},
                {"id": "NEW", "name": "Theory", "mimeType": FOLDER_MIME},
            ]
        )
        controller = GoogleDriveController.from_service(service)

        found = controller.find_folder("Theory", "P1")

        self.assertEqual(found.file_id, "OLD")

    def test_find_folder_follows_pagination(self) -> None:
        service = Mock()
        files_resource = Mock()
        service.files.return_value = files_resource
        page1, page2 = Mock(), Mock()
        page1.execute.return_value = {"files": [], "nextPageToken": "T2"}
        page2.execute.return_value = {"files": [{"id": "F", "name": "x", "mimeType": FOLDER_MIME}]}
        files_resource.list.side_effect = [page1, page2]

        controller = GoogleDriveController.from_service(service)
        found = controller.find_folder("x", "P1")

        self.assertEqual(found.file_id, "F")
        self.assertEqual(files_resource.list.call_args_list[1].kwargs["pageToken"], "T2")

    def test_create_folder_sends_folder_body(self) -> None:
        service = Mock()
        files_resource = Mock()
        req = Mock()
        service.files.return_value = files_resource
        files_resource.create.return_value = req
        req.execute.return_value = {"id": "NEWF", "name": "Theory", "mimeType": FOLDER_MIME}

        controller = GoogleDriveController.from_service(service, supports_all_drives=False)
        info = controller.create_folder("Theory", "P1")

        self.assertEqual(info.file_id, "NEWF")
        kwargs = files_resource.create.call_args.kwargs
        self.assertEqual(
            kwargs["body"], {"name": "Theory", "mimeType": FOLDER_MIME, "parents": ["P1"]}
        )
        self.assertNotIn("supportsAllDrives", kwargs)

    def test_upload_bytes_reports_progress(self) -> None:
        service = Mock()
        files_resource = Mock()
        req = Mock()
        service.files.return_value = files_resource
        files_resource.create.return_value = req

        status = Mock()
        status.resumable_progress = 4
        req.next_chunk.side_effect = [
            (status, None),
            (None, {"id": "UP1", "name": "marginal_a.pdf", "mimeType": "application/pdf"}),
        ]

        controller = GoogleDriveController.from_service(service)
        seen = []
        info = controller.upload_bytes(
            b"12345678",
            "marginal_a.pdf",
            "P1",
            mime_type="application/pdf",
            on_progress=seen.append,
        )

        self.assertEqual(info.file_id, "UP1")
        self.assertEqual([(p.loaded, p.total) for p in seen], [(4, 8), (8, 8)])
        self.assertEqual(seen[-1].percentage, 100)
        kwargs = files_resource.create.call_args.kwargs
        self.assertEqual(kwargs["body"], {"name": "marginal_a.pdf", "parents": ["P1"]})
        self.assertIn("media_body", kwargs)

    def test_upload_bytes_is_not_retried(self) -> None:
        service = Mock()
        files_resource = Mock()
        req = Mock()
        service.files.return_value = files_resource
        files_resource.create.return_value = req
        req.next_chunk.side_effect = _http_error(503, "backendError", "unavailable")

        controller = GoogleDriveController.from_service(service)

        with patch("time.sleep", return_value=None) as sleep:
            with self.assertRaises(ApiError):
                controller.upload_bytes(b"data", "x.pdf", "P1")

        self.assertEqual(req.next_chunk.call_count, 1)
        sleep.assert_not_called()

    def test_create_folder_maps_http_404_to_not_found(self) -> None:
        service = Mock()
        files_resource = Mock()
        req = Mock()

        service.files.return_value = files_resource
        files_resource.create.return_value = req
        req.execute.side_effect = _http_error(404, "notFound", "File not found: P1")

        controller = GoogleDriveController.from_service(service)

        with self.assertRaises(NotFoundError):
            controller.create_folder("Theory", "P1")
        self.assertEqual(req.execute.call_count, 1)

    def test_create_folder_retries_on_429(self) -> None:
        service = Mock()
        files_resource = Mock()
        req = Mock()

        service.files.return_value = files_resource
        files_resource.create.return_value = req

        http_err = _http_error(429, "rateLimitExceeded", "rate limited")

        # Fail twice, then succeed.
        req.execute.side_effect = [
            http_err,
            http_err,
            {"id": "F1", "name": "Theory", "mimeType": FOLDER_MIME, "parents": ["P1"]},
        ]

        controller = GoogleDriveController.from_service(service)

        with patch("time.sleep", return_value=None):
            info = controller.create_folder("Theory", "P1")

        self.assertEqual(info.file_id, "F1")
        self.assertEqual(req.execute.call_count, 3)

    def test_find_folder_maps_429_to_rate_limit_error_after_retries(self) -> None:
        service = Mock()
        files_resource = Mock()
        req = Mock()

        service.files.return_value = files_resource
        files_resource.list.return_value = req
        req.execute.side_effect = _http_error(429, "rateLimitExceeded", "rate limited")

        controller = GoogleDriveController.from_service(service)

        with patch("time.sleep", return_value=None):
            with self.assertRaises(RateLimitError):
                controller.find_folder("Theory", "P1")
        self.assertEqual(req.execute.call_count, 4)

    def test_os_error_maps_to_network_error(self) -> None:
        service = Mock()
        files_resource = Mock()
        req = Mock()
        service.files.return_value = files_resource
        files_resource.create.return_value = req
        req.execute.side_effect = ConnectionResetError("reset")

        controller = GoogleDriveController.from_service(service)

        with patch("time.sleep", return_value=None):
            with self.assertRaises(NetworkError):
                controller.create_folder("Theory", "P1")


if __name__ == "__main__":
    unittest.main()
