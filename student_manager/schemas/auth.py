"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login. Presence is checked by the auth service."""

    email: str | None = Field(default=None, description="Account email")
    password: str | None = Field(default=None, description="Password")


class RegisterRequest(BaseModel):
    """New account details plus the shared administrative registration code."""

    model_config = ConfigDict(populate_by_name=True)

    username: str | None = Field(default=None, description="3-50 chars, letters, digits, underscore")
    email: str | None = None
    password: str | None = Field(default=None, description="At least 6 characters")
    admin_code: str | None = Field(default=None, alias="adminCode")


class PublicUser(BaseModel):
    """User projection safe to return to clients (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str


class AuthResponse(BaseModel):
    """Returned by login and register."""

    message: str
    token: str = Field(..., description="JWT access token; send as Authorization: Bearer <token>")
    user: PublicUser


class MessageResponse(BaseModel):
    message: str


class TokenIdentity(BaseModel):
    """Identity decoded from a verified session token."""

    id: int
    email: str
    username: str
