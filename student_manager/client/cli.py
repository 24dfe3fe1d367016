"""
Command-line client for the Student Manager API. Examples:

  student-manager login alice@test.com
  student-manager list --status all
  student-manager add "Bob" bob@test.com --course Physics
  student-manager delete 3 4 5
"""
import argparse
import getpass
import logging
import sys
from collections.abc import Callable
from typing import Any

from student_manager.client.api import ApiError, StudentManagerClient, UnauthorizedError
from student_manager.client.config import get_client_settings
from student_manager.client.credentials import CredentialStore
from student_manager.client.tokens import is_token_expiring_soon, time_until_expiry

STUDENT_FIELDS = ("name", "email", "phone", "course", "enrolment_date")


def _print_students(students: list[dict[str, Any]]) -> None:
    if not students:
        print("No students found.")
        return
    for s in students:
        state = "" if s.get("is_active", True) else " (inactive)"
        print(
            f"{s['id']}\t{s['name']}\t{s['email']}\t{s.get('phone') or '-'}\t"
            f"{s.get('course') or '-'}\t{s.get('enrolment_date') or '-'}{state}"
        )


def _student_fields(args: argparse.Namespace) -> dict[str, Any]:
    return {f: getattr(args, f) for f in STUDENT_FIELDS if getattr(args, f, None) is not None}


def cmd_login(client: StudentManagerClient, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    data = client.login(args.email.strip().lower(), password)
    print(f"Logged in as {data['user']['username']} <{data['user']['email']}>.")
    return 0


def cmd_register(client: StudentManagerClient, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    admin_code = args.admin_code or getpass.getpass("Admin registration code: ")
    data = client.register(args.username, args.email.strip().lower(), password, admin_code)
    print(f"Registered and logged in as {data['user']['username']}.")
    return 0


def cmd_logout(client: StudentManagerClient, _args: argparse.Namespace) -> int:
    print(client.logout()["message"])
    return 0


def cmd_whoami(client: StudentManagerClient, _args: argparse.Namespace) -> int:
    user = client.credentials.get_user() or {}
    token = client.credentials.get_token()
    minutes = int(time_until_expiry(token) // 60)
    print(f"{user.get('username')} <{user.get('email')}>, session expires in {minutes} min.")
    return 0


def cmd_list(client: StudentManagerClient, args: argparse.Namespace) -> int:
    _print_students(client.list_students(args.status))
    return 0


def cmd_show(client: StudentManagerClient, args: argparse.Namespace) -> int:
    _print_students([client.get_student(args.id)])
    return 0


def cmd_add(client: StudentManagerClient, args: argparse.Namespace) -> int:
    student = client.add_student(_student_fields(args))
    print(f"Student added with id {student['id']}.")
    return 0


def cmd_update(client: StudentManagerClient, args: argparse.Namespace) -> int:
    fields = _student_fields(args)
    if not fields:
        print("Nothing to update.", file=sys.stderr)
        return 1
    student = client.update_student(args.id, fields)
    _print_students([student])
    return 0


def cmd_delete(client: StudentManagerClient, args: argparse.Namespace) -> int:
    if len(args.ids) == 1:
        print(client.delete_student(args.ids[0]))
    else:
        print(f"{client.delete_students(args.ids)} students deleted.")
    return 0


def cmd_search(client: StudentManagerClient, args: argparse.Namespace) -> int:
    _print_students(client.search_students(args.query))
    return 0


def cmd_health(client: StudentManagerClient, _args: argparse.Namespace) -> int:
    data = client.health()
    db = data.get("database", {})
    print(
        f"status={data.get('status')} connected={db.get('connected')} "
        f"tables={db.get('tables')} users={db.get('users')} students={db.get('students')}"
    )
    return 0 if data.get("status") == "ok" else 1


# Commands that work without a stored session.
PUBLIC_COMMANDS = {"login", "register", "logout", "health"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="student-manager", description="Student Manager client.")
    sub = parser.add_subparsers(dest="command", required=True)

    def add(name: str, handler: Callable[..., int], help_text: str) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text)
        p.set_defaults(handler=handler)
        return p

    p = add("login", cmd_login, "Log in and store the session token")
    p.add_argument("email")
    p.add_argument("--password")

    p = add("register", cmd_register, "Create an account (needs the admin code)")
    p.add_argument("username")
    p.add_argument("email")
    p.add_argument("--password")
    p.add_argument("--admin-code")

    add("logout", cmd_logout, "Forget the stored session token")
    add("whoami", cmd_whoami, "Show the logged-in user")
    add("health", cmd_health, "Show API and database health")

    p = add("list", cmd_list, "List students")
    p.add_argument("--status", choices=["active", "inactive", "all"], default="active")

    p = add("show", cmd_show, "Show one student")
    p.add_argument("id", type=int)

    p = add("add", cmd_add, "Add a student")
    p.add_argument("name")
    p.add_argument("email")
    p.add_argument("--phone")
    p.add_argument("--course")
    p.add_argument("--enrolment-date", dest="enrolment_date", help="YYYY-MM-DD")

    p = add("update", cmd_update, "Update fields of a student")
    p.add_argument("id", type=int)
    p.add_argument("--name")
    p.add_argument("--email")
    p.add_argument("--phone")
    p.add_argument("--course")
    p.add_argument("--enrolment-date", dest="enrolment_date", help="YYYY-MM-DD")

    p = add("delete", cmd_delete, "Soft delete one or more students")
    p.add_argument("ids", type=int, nargs="+")

    p = add("search", cmd_search, "Search active students by name, email or course")
    p.add_argument("query")
    return parser


def main(argv: list[str] | None = None, client: StudentManagerClient | None = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s %(message)s")
    args = build_parser().parse_args(argv)

    if client is None:
        settings = get_client_settings()
        client = StudentManagerClient(
            settings.API_URL,
            CredentialStore(settings.CREDENTIALS_FILE),
            timeout=settings.TIMEOUT_SEC,
        )

    with client:
        if args.command not in PUBLIC_COMMANDS:
            if not client.credentials.is_authenticated():
                print(
                    "Not logged in or session expired. Run: student-manager login EMAIL",
                    file=sys.stderr,
                )
                return 2
            if is_token_expiring_soon(client.credentials.get_token()):
                print("Warning: session expires in less than 5 minutes.", file=sys.stderr)
        try:
            return args.handler(client, args)
        except UnauthorizedError as e:
            print(f"{e.message}. Run: student-manager login EMAIL", file=sys.stderr)
            return 2
        except ApiError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
