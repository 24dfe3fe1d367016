"""HTTP client for the Student Manager API with the stored session token attached."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from student_manager.client.credentials import CredentialStore

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when the API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnauthorizedError(ApiError):
    """The server rejected the session (401/403); stored credentials were cleared."""

    def __init__(self, status_code: int | None = None) -> None:
        super().__init__("Unauthorized - please login again", status_code)


def _message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {resp.status_code}"


class StudentManagerClient:
    """
    Thin wrapper over httpx.Client. Protected calls send ``Authorization: Bearer``;
    a 401/403 on any of them clears the credential store and raises UnauthorizedError.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialStore,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> StudentManagerClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = True,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {}
        if auth:
            token = self.credentials.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        try:
            resp = self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise ApiError(f"Could not reach API: {e!s}") from e

        if auth and resp.status_code in (401, 403):
            logger.info("Session rejected (%s); clearing stored credentials", resp.status_code)
            self.credentials.clear()
            raise UnauthorizedError(resp.status_code)
        if resp.status_code >= 400:
            raise ApiError(_message(resp), resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("API returned invalid JSON", resp.status_code) from e

    # Auth

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and store the returned token and user."""
        data = self._request(
            "POST", "/auth/login", auth=False, json={"email": email, "password": password}
        )
        self.credentials.save(data["token"], data["user"])
        return data

    def register(
        self, username: str, email: str, password: str, admin_code: str
    ) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/auth/register",
            auth=False,
            json={
                "username": username,
                "email": email,
                "password": password,
                "adminCode": admin_code,
            },
        )
        self.credentials.save(data["token"], data["user"])
        return data

    def logout(self) -> dict[str, Any]:
        """Discard the local token; the server call is informational only."""
        try:
            return self._request("POST", "/auth/logout", auth=False)
        finally:
            self.credentials.clear()

    # Students

    def list_students(self, status: str = "active") -> list[dict[str, Any]]:
        return self._request("GET", "/students", params={"status": status})["students"]

    def get_student(self, student_id: int) -> dict[str, Any]:
        return self._request("GET", f"/students/{student_id}")["student"]

    def add_student(self, fields: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/students", json=fields)["student"]

    def update_student(self, student_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"/students/{student_id}", json=fields)["student"]

    def delete_student(self, student_id: int) -> str:
        return self._request("DELETE", f"/students/{student_id}")["message"]

    def delete_students(self, student_ids: list[int]) -> int:
        return self._request("POST", "/students/delete-multiple", json={"ids": student_ids})[
            "count"
        ]

    def search_students(self, query: str) -> list[dict[str, Any]]:
        return self._request("GET", "/students/search", params={"query": query})["students"]

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health", auth=False)
