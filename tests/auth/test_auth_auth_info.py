import unittest

from obedrive.auth import AuthInfo


class TestAuthInfo(unittest.TestCase):
    def test_auth_info_valid_oauth(self) -> None:
        info = AuthInfo(
            kind="oauth",
            data={
                "client_secrets_file": "/tmp/client_secrets.json",
                "token_file": "/tmp/token.json",
            },
        )
        self.assertEqual(info.kind, "oauth")
        self.assertEqual(info.client_secrets_file, "/tmp/client_secrets.json")
        self.assertEqual(info.token_file, "/tmp/token.json")

    def test_auth_info_valid_service_account(self) -> None:
        info = AuthInfo.service_account("/tmp/sa.json")
        self.assertEqual(info.kind, "service_account")
        self.assertEqual(info.service_account_file, "/tmp/sa.json")

    def test_oauth_constructor(self) -> None:
        info = AuthInfo.oauth("/tmp/c.json", "/tmp/t.json")
        self.assertEqual(info.data["token_file"], "/tmp/t.json")

    def test_auth_info_invalid_kind(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="api_key", data={})

    def test_auth_info_missing_keys(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="oauth", data={"client_secrets_file": "x"})
        with self.assertRaises(ValueError):
            AuthInfo(kind="service_account", data={"service_account_file": "  "})

    def test_auth_info_data_must_be_dict(self) -> None:
        with self.assertRaises(TypeError):
            AuthInfo(kind="oauth", data=[])  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
