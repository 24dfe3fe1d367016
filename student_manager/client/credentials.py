"""Persisted session credential (token plus the public user) for the CLI."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from student_manager.client.tokens import is_token_expired

logger = logging.getLogger(__name__)


class CredentialStore:
    """A JSON file holding ``{"token": ..., "user": {...}}``."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable credentials file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, token: str, user: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        # O_CREAT leaves the mode of an existing file alone.
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"token": token, "user": user}, f)

    def get_token(self) -> str | None:
        token = self._read().get("token")
        return token if isinstance(token, str) and token else None

    def get_user(self) -> dict[str, Any] | None:
        user = self._read().get("user")
        return user if isinstance(user, dict) else None

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def is_authenticated(self) -> bool:
        """
        True while a parsable, unexpired token is stored. A stale or broken
        token is removed so the next command starts from a clean login.
        """
        token = self.get_token()
        if token is None:
            return False
        if is_token_expired(token):
            self.clear()
            return False
        return True
