"""Tests for server and client settings validation."""

import unittest

from pydantic import ValidationError

from student_manager.client.config import ClientSettings
from student_manager.core.config import Settings


def make_settings(**overrides: object) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestDatabaseUrl(unittest.TestCase):
    def test_built_from_parts(self) -> None:
        url = make_settings(
            DB_HOST="db.internal", DB_PORT=6543, DB_USER="app", DB_PASSWORD="pw", DB_NAME="school"
        ).database_url
        self.assertEqual(url.drivername, "postgresql+psycopg2")
        self.assertEqual((url.host, url.port, url.username), ("db.internal", 6543, "app"))
        self.assertEqual(url.password, "pw")
        self.assertEqual(url.database, "school")
        self.assertNotIn("sslmode", url.query)

    def test_ssl_adds_sslmode(self) -> None:
        self.assertEqual(make_settings(DB_SSL=True).database_url.query["sslmode"], "require")

    def test_database_url_override_is_normalized(self) -> None:
        url = make_settings(DATABASE_URL="postgres://u:p@h:5432/d").database_url
        self.assertEqual(url.drivername, "postgresql+psycopg2")
        self.assertEqual(url.database, "d")

    def test_non_postgres_url_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            make_settings(DATABASE_URL="mysql://u:p@h/d")


class TestSettingsValidation(unittest.TestCase):
    def test_defaults(self) -> None:
        s = make_settings()
        self.assertEqual(s.API_PREFIX, "/api")
        self.assertEqual(s.PORT, 5000)
        self.assertEqual(s.JWT_EXPIRE_MINUTES, 1440)

    def test_rejects_bad_values(self) -> None:
        cases = {
            "DB_NAME": "bad-name;",
            "JWT_SECRET": " ",
            "JWT_EXPIRE_MINUTES": 0,
            "ADMIN_REGISTRATION_CODE": "",
            "PORT": 70000,
        }
        for field, value in cases.items():
            with self.subTest(field=field):
                with self.assertRaises(ValidationError):
                    make_settings(**{field: value})


class TestClientSettings(unittest.TestCase):
    def test_api_url_trailing_slash_stripped(self) -> None:
        s = ClientSettings(_env_file=None, API_URL="https://example.com/api/")
        self.assertEqual(s.API_URL, "https://example.com/api")

    def test_rejects_bad_values(self) -> None:
        for overrides in ({"API_URL": "ftp://example.com"}, {"TIMEOUT_SEC": 0}):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationError):
                    ClientSettings(_env_file=None, **overrides)


if __name__ == "__main__":
    unittest.main()
