"""Client-side settings, read from STUDENT_MANAGER_* environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Where the API lives and where the session credential is kept."""

    model_config = SettingsConfigDict(
        env_prefix="STUDENT_MANAGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    API_URL: str = "http://localhost:5000/api"
    CREDENTIALS_FILE: Path = Path.home() / ".student_manager" / "credentials.json"
    TIMEOUT_SEC: float = 10.0

    @field_validator("API_URL")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        s = v.strip().rstrip("/")
        if not (s.lower().startswith("http://") or s.lower().startswith("https://")):
            raise ValueError("STUDENT_MANAGER_API_URL must use http or https")
        return s

    @field_validator("TIMEOUT_SEC")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0 or v > 120:
            raise ValueError("STUDENT_MANAGER_TIMEOUT_SEC must be greater than 0 and at most 120")
        return v


@lru_cache
def get_client_settings() -> ClientSettings:
    return ClientSettings()
