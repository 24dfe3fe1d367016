"""Student management endpoints. Every route requires a valid bearer token."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from student_manager.api.v1.auth import verify_token
from student_manager.core.database import get_db
from student_manager.core.exceptions import ConflictError, NotFoundError, ValidationError
from student_manager.core.security import is_valid_email, normalize_email
from student_manager.models import Student
from student_manager.schemas.auth import MessageResponse
from student_manager.schemas.student import (
    DeleteMultipleRequest,
    DeleteMultipleResponse,
    StudentBase,
    StudentCreate,
    StudentListResponse,
    StudentMutationResponse,
    StudentOut,
    StudentResponse,
    StudentSearchResponse,
    StudentUpdate,
)
from student_manager.services import students as student_repo

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_token)])


def _get_or_404(db: Session, student_id: int) -> Student:
    student = student_repo.get_by_id(db, student_id)
    if student is None:
        raise NotFoundError("Student not found")
    return student


def _get_active_or_404(db: Session, student_id: int) -> Student:
    student = _get_or_404(db, student_id)
    if not student.is_active:
        raise NotFoundError("Student not found")
    return student


def _validate_fields(db: Session, data: StudentBase, student_id: int | None = None) -> None:
    """Server-side checks for add and update: required fields, email format, email unused."""
    if not data.name or not data.name.strip() or not data.email or not data.email.strip():
        raise ValidationError("Name and email are required")
    if not is_valid_email(normalize_email(data.email)):
        raise ValidationError("Invalid email format")
    owner_id = student_repo.find_by_email(db, data.email)
    if owner_id is not None and owner_id != student_id:
        raise ConflictError("Email already exists", status_code=400)


@router.get("", response_model=StudentListResponse)
def list_students(
    db: Annotated[Session, Depends(get_db)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> StudentListResponse:
    """List students by status: active (default), inactive or all. Newest first."""
    students = student_repo.list_by_status(db, status_filter)
    return StudentListResponse(students=[StudentOut.model_validate(s) for s in students])


@router.get("/search", response_model=StudentSearchResponse)
def search_students(
    db: Annotated[Session, Depends(get_db)],
    query: str | None = None,
) -> StudentSearchResponse:
    """Search active students by name, email or course (case-insensitive substring)."""
    if not query or not query.strip():
        raise ValidationError("Search query is required")
    students = student_repo.search(db, query.strip())
    return StudentSearchResponse(
        students=[StudentOut.model_validate(s) for s in students],
        count=len(students),
    )


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> StudentResponse:
    """Fetch one active student; soft-deleted records answer 404."""
    student = _get_active_or_404(db, student_id)
    return StudentResponse(student=StudentOut.model_validate(student))


@router.post("", response_model=StudentMutationResponse, status_code=status.HTTP_201_CREATED)
def add_student(
    body: StudentCreate,
    db: Annotated[Session, Depends(get_db)],
) -> StudentMutationResponse:
    """Add a student. name and email are required; email must be valid and unused."""
    _validate_fields(db, body)
    student_id = student_repo.create(db, body)
    student = _get_or_404(db, student_id)
    return StudentMutationResponse(
        message="Student added successfully",
        student=StudentOut.model_validate(student),
    )


@router.put("/{student_id}", response_model=StudentMutationResponse)
def update_student(
    student_id: int,
    body: StudentUpdate,
    db: Annotated[Session, Depends(get_db)],
) -> StudentMutationResponse:
    """
    Update a student. Fields sent in the body replace stored values; fields
    left out are kept. The merged record is validated like a new one.
    """
    existing = _get_or_404(db, student_id)
    current = StudentUpdate.model_validate(
        {field: getattr(existing, field) for field in student_repo.EDITABLE_FIELDS}
    )
    merged = current.model_copy(update=body.model_dump(exclude_unset=True))
    _validate_fields(db, merged, student_id=student_id)

    if student_repo.update(db, student_id, merged) == 0:
        raise NotFoundError("Student not found")
    db.expire_all()
    student = _get_or_404(db, student_id)
    return StudentMutationResponse(
        message="Student updated successfully",
        student=StudentOut.model_validate(student),
    )


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Soft delete: the record is kept and listed under status=inactive."""
    _get_or_404(db, student_id)
    student_repo.soft_delete(db, student_id)
    return MessageResponse(message="Student deleted successfully")


@router.post("/delete-multiple", response_model=DeleteMultipleResponse)
def delete_multiple_students(
    body: DeleteMultipleRequest,
    db: Annotated[Session, Depends(get_db)],
) -> DeleteMultipleResponse:
    """Soft delete several students. Unknown ids are skipped, not reported as errors."""
    if not body.ids:
        raise ValidationError("Invalid student IDs")
    deleted_count = student_repo.soft_delete_multiple(db, body.ids)
    return DeleteMultipleResponse(
        message=f"{deleted_count} students deleted successfully",
        count=deleted_count,
    )
