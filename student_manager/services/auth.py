"""Authentication: credential checks, registration and session token verification."""

import hmac
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from student_manager.core.exceptions import AuthError, ConflictError, ValidationError
from student_manager.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    create_access_token,
    decode_access_token,
    hash_password,
    is_valid_email,
    is_valid_username,
    normalize_email,
    verify_password,
)
from student_manager.models import User
from student_manager.schemas.auth import PublicUser, TokenIdentity
from student_manager.services import users

if TYPE_CHECKING:
    from student_manager.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """A freshly issued session token and the user it belongs to."""

    token: str
    user: PublicUser


def _issue(user: User) -> AuthResult:
    token = create_access_token(user_id=user.id, email=user.email, username=user.username)
    return AuthResult(token=token, user=PublicUser.model_validate(user))


def login(session: Session, email: str | None, password: str | None) -> AuthResult:
    """
    Authenticate by email and password.
    Raises ValidationError when a field is missing and AuthError (401) on bad credentials.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = users.get_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt for %s", normalize_email(email))
        raise AuthError("Invalid email or password", status_code=401)

    logger.info("User logged in: id=%s", user.id)
    return _issue(user)


def _require(fields: dict[str, str | None]) -> None:
    for label, value in fields.items():
        if value is None or not str(value).strip():
            raise ValidationError(f"{label} is required")


def register(
    session: Session,
    username: str | None,
    email: str | None,
    password: str | None,
    admin_code: str | None,
    settings: "Settings",
) -> AuthResult:
    """
    Create an account and log it in.

    Checks run in order: required fields, admin code (403), email format,
    username pattern, password length, then username/email uniqueness (409).
    """
    _require(
        {
            "Username": username,
            "Email": email,
            "Password": password,
            "Admin registration code": admin_code,
        }
    )
    expected_code = settings.ADMIN_REGISTRATION_CODE.get_secret_value()
    if not hmac.compare_digest(admin_code.encode("utf-8"), expected_code.encode("utf-8")):
        logger.warning("Registration rejected: invalid admin code")
        raise AuthError("Invalid admin registration code", status_code=403)

    username = username.strip()
    email = normalize_email(email)
    if not is_valid_email(email):
        raise ValidationError("Invalid email format")
    if not is_valid_username(username):
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters "
            "and contain only letters, numbers and underscores"
        )
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LEN} characters")
    if len(password) > PASSWORD_MAX_LEN:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_LEN} characters")

    if users.username_exists(session, username):
        raise ConflictError("Username already taken")
    if users.email_exists(session, email):
        raise ConflictError("Email already registered")

    try:
        user = users.create_user(
            session,
            username=username,
            email=email,
            password_hash=hash_password(password),
        )
    except IntegrityError as e:
        # Lost a race with a concurrent registration; the unique index decided.
        raise ConflictError("Username or email already registered") from e

    logger.info("User registered: id=%s username=%s", user.id, user.username)
    return _issue(user)


def verify_token(token: str | None) -> TokenIdentity:
    """
    Validate a bearer token and return the identity it carries.
    Raises AuthError 401 when no token is given and 403 when it is malformed, forged or expired.
    """
    if not token:
        raise AuthError("Access denied. No token provided.", status_code=401)
    try:
        payload = decode_access_token(token)
        return TokenIdentity(
            id=payload["id"],
            email=payload["email"],
            username=payload["username"],
        )
    except (jwt.PyJWTError, KeyError, ValueError):
        raise AuthError("Invalid or expired token.", status_code=403)
