"""Pydantic request/response schemas."""

from student_manager.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PublicUser,
    RegisterRequest,
    TokenIdentity,
)
from student_manager.schemas.health import DatabaseStatus, HealthResponse
from student_manager.schemas.student import (
    DeleteMultipleRequest,
    DeleteMultipleResponse,
    StudentCreate,
    StudentListResponse,
    StudentMutationResponse,
    StudentOut,
    StudentResponse,
    StudentSearchResponse,
    StudentUpdate,
)

__all__ = [
    "AuthResponse",
    "DatabaseStatus",
    "DeleteMultipleRequest",
    "DeleteMultipleResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "PublicUser",
    "RegisterRequest",
    "StudentCreate",
    "StudentListResponse",
    "StudentMutationResponse",
    "StudentOut",
    "StudentResponse",
    "StudentSearchResponse",
    "StudentUpdate",
    "TokenIdentity",
]
