"""Application errors rendered by the API as JSON ``{"message": ...}`` responses."""


class AppError(Exception):
    """Base error carrying an HTTP status and a user-visible message."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400


class AuthError(AppError):
    """Bad credentials (401) or a rejected token / admin code (403)."""

    status_code = 401


class ConflictError(AppError):
    """A unique field (username, email) is already taken."""

    status_code = 409


class NotFoundError(AppError):
    status_code = 404
