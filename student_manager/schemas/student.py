"""Request/response schemas for student endpoints."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentBase(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
    course: str | None = Field(default=None, max_length=100)
    enrolment_date: date | None = None

    @field_validator("phone", "course", "enrolment_date", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class StudentCreate(StudentBase):
    """Body for POST /students. name and email are checked by the handler."""


class StudentUpdate(StudentBase):
    """Body for PUT /students/{id}; fields left out keep their stored value."""


class StudentOut(BaseModel):
    """A student record as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None = None
    course: str | None = None
    enrolment_date: date | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentListResponse(BaseModel):
    students: list[StudentOut]


class StudentSearchResponse(BaseModel):
    students: list[StudentOut]
    count: int


class StudentResponse(BaseModel):
    student: StudentOut


class StudentMutationResponse(BaseModel):
    message: str
    student: StudentOut


class DeleteMultipleRequest(BaseModel):
    """Body for POST /students/delete-multiple. Checked for a non-empty list by the handler."""

    ids: list[int] | None = None


class DeleteMultipleResponse(BaseModel):
    message: str
    count: int
