"""API tests for /api/auth: register, login, logout and error rendering."""

import unittest

from db_support import admin_code, clear_overrides, make_api_client, make_session_factory
from student_manager.core.security import decode_access_token


class AuthApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.client = make_api_client(make_session_factory())

    def tearDown(self) -> None:
        clear_overrides()

    def register(self, **overrides: str):
        body = {
            "username": "alice_1",
            "email": "alice@test.com",
            "password": "Secret1",
            "adminCode": admin_code(),
        }
        body.update(overrides)
        return self.client.post("/api/auth/register", json=body)


class TestRegisterEndpoint(AuthApiTestCase):
    def test_register_returns_201_with_matching_token(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data["message"], "User registered successfully")
        self.assertEqual(data["user"]["username"], "alice_1")
        self.assertEqual(data["user"]["email"], "alice@test.com")
        self.assertNotIn("password", data["user"])
        self.assertNotIn("password_hash", data["user"])
        claims = decode_access_token(data["token"])
        self.assertEqual(
            (claims["id"], claims["email"], claims["username"]),
            (data["user"]["id"], "alice@test.com", "alice_1"),
        )

    def test_register_wrong_admin_code_is_403(self) -> None:
        resp = self.register(adminCode="WRONG_CODE")
        self.assertEqual(resp.status_code, 403)
        self.assertRegex(resp.json()["message"], "(?i)invalid admin registration code")

    def test_register_validation_failures_are_400(self) -> None:
        cases = {
            "username": {"username": ""},
            "email": {"email": "invalid-email"},
            "password": {"password": "12345"},
        }
        for field, overrides in cases.items():
            with self.subTest(field=field):
                resp = self.register(**overrides)
                self.assertEqual(resp.status_code, 400)
                self.assertIn(field, resp.json()["message"].lower())

    def test_register_duplicate_is_409(self) -> None:
        self.assertEqual(self.register().status_code, 201)
        resp = self.register(username="someone_else")
        self.assertEqual(resp.status_code, 409)
        self.assertRegex(resp.json()["message"], "(?i)email already registered")


class TestLoginEndpoint(AuthApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()

    def test_login_success(self) -> None:
        resp = self.client.post(
            "/api/auth/login", json={"email": "alice@test.com", "password": "Secret1"}
        )
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["message"], "Login successful")
        self.assertEqual(data["user"]["username"], "alice_1")
        self.assertEqual(decode_access_token(data["token"])["email"], "alice@test.com")

    def test_login_bad_credentials_is_401_without_token(self) -> None:
        for body in (
            {"email": "alice@test.com", "password": "wrong"},
            {"email": "unknown@test.com", "password": "Secret1"},
        ):
            with self.subTest(email=body["email"]):
                resp = self.client.post("/api/auth/login", json=body)
                self.assertEqual(resp.status_code, 401)
                self.assertNotIn("token", resp.json())

    def test_login_missing_fields_is_400(self) -> None:
        resp = self.client.post("/api/auth/login", json={"email": "alice@test.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Email and password are required")

    def test_logout(self) -> None:
        resp = self.client.post("/api/auth/logout")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Logout successful"})


class TestMiscEndpoints(AuthApiTestCase):
    def test_unknown_route_is_json_404(self) -> None:
        resp = self.client.get("/api/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Route not found: /api/nope")

    def test_root(self) -> None:
        self.assertIn("message", self.client.get("/").json())

    def test_health_reports_counts(self) -> None:
        self.register()
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "ok")
        self.assertTrue(data["database"]["connected"])
        self.assertEqual(data["database"]["tables"], 2)
        self.assertEqual(data["database"]["users"], 1)
        self.assertEqual(data["database"]["students"], 0)


if __name__ == "__main__":
    unittest.main()
