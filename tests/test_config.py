import os
import unittest
from unittest.mock import patch

from obedrive.config import EngineConfig, EngineSettings


class TestEngineConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = EngineConfig()
        self.assertEqual(cfg.org_root_folder, "smart-mark")
        self.assertIsNone(cfg.shared_root_folder_id)
        self.assertEqual(cfg.max_upload_workers, 4)
        self.assertEqual(cfg.upload_chunk_size, 5 * 1024 * 1024)
        self.assertFalse(cfg.provision_on_upload)
        self.assertTrue(cfg.supports_all_drives)

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            EngineConfig(org_root_folder=" ")
        with self.assertRaises(ValueError):
            EngineConfig(max_upload_workers=1)
        with self.assertRaises(ValueError):
            EngineConfig(upload_chunk_size=1000)
        with self.assertRaises(ValueError):
            EngineConfig(settle_timeout_sec=0)
        with self.assertRaises(ValueError):
            EngineConfig(settle_delay_sec=-1)
        with self.assertRaises(ValueError):
            EngineConfig(shared_root_folder_id="")

    def test_from_env(self) -> None:
        cfg = EngineConfig.from_env(
            {
                "OBEDRIVE_ORG_ROOT_FOLDER": "obe",
                "OBEDRIVE_SHARED_ROOT_FOLDER_ID": "SHARED123",
                "OBEDRIVE_MAX_UPLOAD_WORKERS": "8",
                "OBEDRIVE_UPLOAD_CHUNK_SIZE": str(256 * 1024),
                "OBEDRIVE_SETTLE_DELAY_SEC": "0",
                "OBEDRIVE_PROVISION_ON_UPLOAD": "true",
                "OBEDRIVE_SUPPORTS_ALL_DRIVES": "0",
            }
        )
        self.assertEqual(cfg.org_root_folder, "obe")
        self.assertEqual(cfg.shared_root_folder_id, "SHARED123")
        self.assertEqual(cfg.max_upload_workers, 8)
        self.assertEqual(cfg.upload_chunk_size, 256 * 1024)
        self.assertEqual(cfg.settle_delay_sec, 0.0)
        self.assertTrue(cfg.provision_on_upload)
        self.assertFalse(cfg.supports_all_drives)

    def test_from_env_empty_uses_defaults(self) -> None:
        self.assertEqual(EngineConfig.from_env({}), EngineConfig())

    def test_from_env_rejects_unparseable_bool(self) -> None:
        with self.assertRaises(ValueError):
            EngineConfig.from_env({"OBEDRIVE_SUPPORTS_ALL_DRIVES": "ture"})

    def test_from_env_rejects_non_numeric_workers(self) -> None:
        with self.assertRaises(ValueError):
            EngineConfig.from_env({"OBEDRIVE_MAX_UPLOAD_WORKERS": "many"})

    def test_from_env_ignores_blank_and_foreign_keys(self) -> None:
        cfg = EngineConfig.from_env(
            {
                "OBEDRIVE_SHARED_ROOT_FOLDER_ID": "  ",
                "HOME": "/root",
                "OBEDRIVE_ORG_ROOT_FOLDER": " obe ",
            }
        )
        self.assertIsNone(cfg.shared_root_folder_id)
        self.assertEqual(cfg.org_root_folder, "obe")

    def test_from_env_reads_process_environment(self) -> None:
        env = {"OBEDRIVE_SETTLE_TIMEOUT_SEC": "12.5", "OBEDRIVE_PROVISION_ON_UPLOAD": "yes"}
        with patch.dict(os.environ, env, clear=True):
            cfg = EngineConfig.from_env()
        self.assertEqual(cfg.settle_timeout_sec, 12.5)
        self.assertTrue(cfg.provision_on_upload)
        self.assertEqual(cfg.org_root_folder, "smart-mark")

    def test_settings_to_config_applies_config_validation(self) -> None:
        with self.assertRaises(ValueError):
            EngineSettings.model_validate({"max_upload_workers": "1"}).to_config()


if __name__ == "__main__":
    unittest.main()
