"""Health check endpoint with database connectivity and row counts."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from student_manager.core.config import settings
from student_manager.core.database import get_database_status, get_db
from student_manager.schemas.health import DatabaseStatus, HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health, database connectivity, table count and row counts.
    Used by load balancers and monitoring.
    """
    database = DatabaseStatus(**get_database_status(db))
    return HealthResponse(
        status="ok" if database.connected else "degraded",
        environment=settings.APP_ENV,
        database=database,
    )
