"""
Account and record administration that the API deliberately does not expose.
Run from project root:
  python -m student_manager.scripts.admin create-user USERNAME EMAIL PASSWORD
  python -m student_manager.scripts.admin delete-user USER_ID
  python -m student_manager.scripts.admin list-users
  python -m student_manager.scripts.admin purge-student STUDENT_ID
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from student_manager.core.database import SessionLocal
from student_manager.core.security import (
    PASSWORD_MIN_LEN,
    hash_password,
    is_valid_email,
    is_valid_username,
)
from student_manager.services import students, users

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def create_user(db: Session, args: argparse.Namespace) -> int:
    username = args.username.strip()
    if not is_valid_username(username):
        print("Username must be 3-50 letters, digits or underscores.", file=sys.stderr)
        return 1
    if not is_valid_email(args.email.strip().lower()):
        print("Invalid email format.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN:
        print(f"Password must be at least {PASSWORD_MIN_LEN} characters.", file=sys.stderr)
        return 1
    if users.username_exists(db, username):
        print(f"User '{username}' already exists.", file=sys.stderr)
        return 1
    if users.email_exists(db, args.email):
        print(f"Email '{args.email}' is already registered.", file=sys.stderr)
        return 1
    user = users.create_user(
        db,
        username=username,
        email=args.email,
        password_hash=hash_password(args.password),
    )
    print(f"Created user '{user.username}' <{user.email}> with id {user.id}.")
    return 0


def delete_user(db: Session, args: argparse.Namespace) -> int:
    if not users.delete_user(db, args.user_id):
        print(f"User {args.user_id} not found.", file=sys.stderr)
        return 1
    print(f"Deleted user {args.user_id}.")
    return 0


def list_users(db: Session, _args: argparse.Namespace) -> int:
    for user in users.list_users(db):
        print(f"{user.id}\t{user.username}\t{user.email}\t{user.created_at:%Y-%m-%d %H:%M}")
    return 0


def purge_student(db: Session, args: argparse.Namespace) -> int:
    if not students.hard_delete(db, args.student_id):
        print(f"Student {args.student_id} not found.", file=sys.stderr)
        return 1
    print(f"Permanently deleted student {args.student_id}.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Student Manager administration.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create-user", help="Create an account without the registration code")
    p.add_argument("username", help="Username (3-50 letters, digits, underscore)")
    p.add_argument("email")
    p.add_argument("password", help="Password (at least 6 chars)")
    p.set_defaults(handler=create_user)

    p = sub.add_parser("delete-user", help="Remove an account")
    p.add_argument("user_id", type=int)
    p.set_defaults(handler=delete_user)

    p = sub.add_parser("list-users", help="List accounts, newest first")
    p.set_defaults(handler=list_users)

    p = sub.add_parser("purge-student", help="Permanently delete a student row")
    p.add_argument("student_id", type=int)
    p.set_defaults(handler=purge_student)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    db = SessionLocal()
    try:
        return args.handler(db, args)
    except Exception as e:
        logger.exception("Command %s failed: %s", args.command, e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
