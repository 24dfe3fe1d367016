"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class DatabaseStatus(BaseModel):
    """Database connectivity and row counts."""

    connected: bool
    name: str | None = None
    tables: int = 0
    users: int = 0
    students: int = 0


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok", "degraded"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: DatabaseStatus
