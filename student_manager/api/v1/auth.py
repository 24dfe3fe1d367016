"""Login, registration and logout endpoints plus the bearer-token dependency."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from student_manager.core.config import Settings, get_settings
from student_manager.core.database import get_db
from student_manager.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenIdentity,
)
from student_manager.services import auth as auth_service

router = APIRouter()
security = HTTPBearer(auto_error=False)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT valid for 24 hours.
    Include the token in the Authorization header as: Bearer <token>
    """
    result = auth_service.login(db, body.email, body.password)
    return AuthResponse(message="Login successful", token=result.token, user=result.user)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthResponse:
    """Create an account (requires the admin registration code) and log it in."""
    result = auth_service.register(
        db,
        username=body.username,
        email=body.email,
        password=body.password,
        admin_code=body.admin_code,
        settings=settings,
    )
    return AuthResponse(
        message="User registered successfully", token=result.token, user=result.user
    )


@router.post("/logout", response_model=MessageResponse)
def logout() -> MessageResponse:
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logout successful")


def verify_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> TokenIdentity:
    """Dependency: require a valid Bearer JWT. 401 if missing, 403 if invalid or expired."""
    token = credentials.credentials if credentials is not None else None
    return auth_service.verify_token(token)
