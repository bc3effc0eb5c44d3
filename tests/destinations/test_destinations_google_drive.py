import unittest
from unittest.mock import Mock

from obedrive.config import EngineConfig
from obedrive.destinations import MY_DRIVE_ROOT_ID, GoogleDriveDestination
from obedrive.errors import InvalidArgumentError
from obedrive.models import DestinationKind, DriveFile


class TestGoogleDriveDestination(unittest.TestCase):
    def _destination(self, **kwargs) -> tuple[GoogleDriveDestination, Mock]:
        controller = Mock()
        dest = GoogleDriveDestination(
            controller,
            kind=kwargs.pop("kind", DestinationKind.PERSONAL),
            root_id=kwargs.pop("root_id", MY_DRIVE_ROOT_ID),
            **kwargs,
        )
        return dest, controller

    def test_find_maps_drive_file_to_folder_ref(self) -> None:
        dest, controller = self._destination()
        controller.find_folder.return_value = DriveFile(
            file_id="F1", name="Theory", mime_type="application/vnd.google-apps.folder"
        )

        ref = dest.find("Theory", "P1")

        self.assertEqual((ref.id, ref.name), ("F1", "Theory"))
        controller.find_folder.assert_called_once_with("Theory", "P1")

    def test_find_returns_none_when_missing(self) -> None:
        dest, controller = self._destination()
        controller.find_folder.return_value = None
        self.assertIsNone(dest.find("Theory", "P1"))

    def test_create_folder(self) -> None:
        dest, controller = self._destination()
        controller.create_folder.return_value = DriveFile(
            file_id="NEW", name="Lab", mime_type="application/vnd.google-apps.folder"
        )
        ref = dest.create("Lab", "P1")
        self.assertEqual(ref.id, "NEW")

    def test_upload_falls_back_to_view_url(self) -> None:
        dest, controller = self._destination()
        controller.upload_bytes.return_value = DriveFile(
            file_id="UP", name="doc_outline.doc", mime_type="application/msword"
        )

        ref = dest.upload(b"x", "doc_outline.doc", "P1", mime_type="application/msword")

        self.assertEqual(ref.view_url, "https://drive.google.com/file/d/UP/view")
        controller.upload_bytes.assert_called_once_with(
            b"x", "doc_outline.doc", "P1", mime_type="application/msword", on_progress=None
        )

    def test_upload_keeps_web_view_link(self) -> None:
        dest, controller = self._destination()
        controller.upload_bytes.return_value = DriveFile(
            file_id="UP", name="n", mime_type="x", web_view_link="https://example/view"
        )
        self.assertEqual(dest.upload(b"x", "n", "P1").view_url, "https://example/view")

    def test_is_usable_uses_callback(self) -> None:
        connected = {"value": False}
        dest, _ = self._destination(usable=lambda: connected["value"])
        self.assertFalse(dest.is_usable())
        connected["value"] = True
        self.assertTrue(dest.is_usable())

    def test_root_id_required(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self._destination(root_id="")

    def test_shared_requires_root_folder_id(self) -> None:
        from obedrive.auth import AuthInfo

        with self.assertRaises(InvalidArgumentError):
            GoogleDriveDestination.shared(AuthInfo.service_account("/tmp/sa.json"), EngineConfig())


if __name__ == "__main__":
    unittest.main()
