"""API v1 routes."""

from fastapi import APIRouter

from student_manager.api.v1 import auth, health, students

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(students.router, prefix="/students", tags=["students"])
