"""Python client for the Student Manager API: token checks, credential storage, HTTP calls."""

from student_manager.client.api import ApiError, StudentManagerClient, UnauthorizedError
from student_manager.client.credentials import CredentialStore
from student_manager.client.tokens import (
    get_token_expiry,
    is_token_expired,
    is_token_expiring_soon,
    parse_token,
    time_until_expiry,
)

__all__ = [
    "ApiError",
    "CredentialStore",
    "StudentManagerClient",
    "UnauthorizedError",
    "get_token_expiry",
    "is_token_expired",
    "is_token_expiring_soon",
    "parse_token",
    "time_until_expiry",
]
