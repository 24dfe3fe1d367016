"""Tests for the user data-access layer and the admin script."""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from datetime import date
from unittest.mock import patch

from db_support import make_session_factory
from student_manager.core.exceptions import ValidationError
from student_manager.core.security import verify_password
from student_manager.schemas.student import StudentCreate
from student_manager.scripts import admin
from student_manager.services import students, users


class UsersServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.db = self.session_factory()

    def tearDown(self) -> None:
        self.db.close()

    def add_user(self, username: str = "alice_1", email: str = "alice@test.com"):
        return users.create_user(self.db, username=username, email=email, password_hash="x")


class TestUsersService(UsersServiceTestCase):
    def test_create_normalizes_email(self) -> None:
        user = self.add_user(email="Alice@Test.COM")
        self.assertEqual(user.email, "alice@test.com")
        self.assertIsNotNone(user.created_at)
        self.assertTrue(users.email_exists(self.db, "ALICE@test.com"))
        self.assertTrue(users.username_exists(self.db, "alice_1"))
        self.assertFalse(users.username_exists(self.db, "bob"))

    def test_update_user(self) -> None:
        user = self.add_user()
        self.assertTrue(users.update_user(self.db, user.id, email="New@Test.com", role="admin"))
        self.db.expire_all()
        self.assertEqual(users.get_by_id(self.db, user.id).email, "new@test.com")
        self.assertFalse(users.update_user(self.db, 999, username="ghost"))

    def test_update_user_without_fields(self) -> None:
        user = self.add_user()
        with self.assertRaises(ValidationError) as ctx:
            users.update_user(self.db, user.id, role="admin", username=None)
        self.assertEqual(ctx.exception.message, "No valid fields to update")

    def test_delete_and_count(self) -> None:
        first_id = self.add_user().id
        self.add_user(username="bob_2", email="bob@test.com")
        self.assertEqual(users.count_users(self.db), 2)
        self.assertTrue(users.delete_user(self.db, first_id))
        self.assertFalse(users.delete_user(self.db, first_id))
        self.assertEqual([u.username for u in users.list_users(self.db)], ["bob_2"])


class TestAdminScript(UsersServiceTestCase):
    def run_admin(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with patch.object(admin, "SessionLocal", self.session_factory):
            with redirect_stdout(out), redirect_stderr(err):
                code = admin.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_create_user(self) -> None:
        code, out, _ = self.run_admin("create-user", "carol", "Carol@Test.com", "Secret1")
        self.assertEqual(code, 0)
        self.assertIn("carol", out)
        user = users.get_by_username(self.db, "carol")
        self.assertEqual(user.email, "carol@test.com")
        self.assertTrue(verify_password("Secret1", user.password_hash))

    def test_create_user_rejects_bad_input(self) -> None:
        self.add_user()
        cases = [
            ("no-dash", "x@test.com", "Secret1"),
            ("carol", "bad-email", "Secret1"),
            ("carol", "x@test.com", "123"),
            ("alice_1", "x@test.com", "Secret1"),
            ("carol", "ALICE@test.com", "Secret1"),
        ]
        for username, email, password in cases:
            with self.subTest(username=username, email=email):
                code, _, err = self.run_admin("create-user", username, email, password)
                self.assertEqual(code, 1)
                self.assertTrue(err)
        self.assertEqual(users.count_users(self.db), 1)

    def test_list_and_delete_user(self) -> None:
        user_id = self.add_user().id
        code, out, _ = self.run_admin("list-users")
        self.assertEqual(code, 0)
        self.assertIn("alice@test.com", out)
        self.assertEqual(self.run_admin("delete-user", str(user_id))[0], 0)
        self.assertEqual(self.run_admin("delete-user", str(user_id))[0], 1)

    def test_purge_student_removes_row(self) -> None:
        student_id = students.create(
            self.db,
            StudentCreate(name="Bob", email="bob@test.com", enrolment_date=date(2024, 9, 1)),
        )
        students.soft_delete(self.db, student_id)
        code, out, _ = self.run_admin("purge-student", str(student_id))
        self.assertEqual(code, 0)
        self.assertIn("Permanently deleted", out)
        self.db.expire_all()
        self.assertIsNone(students.get_by_id(self.db, student_id))
        self.assertEqual(self.run_admin("purge-student", str(student_id))[0], 1)


if __name__ == "__main__":
    unittest.main()
