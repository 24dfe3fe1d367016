"""In-memory SQLite database and API client helpers shared by the tests."""

from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from student_manager.core.config import get_settings
from student_manager.core.database import get_db
from student_manager.core.security import create_access_token
from student_manager.models import Base


def make_engine() -> Engine:
    """One shared connection so every session sees the same in-memory database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


def make_session_factory(engine: Engine | None = None) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine or make_engine())


def make_api_client(session_factory: sessionmaker, **kwargs: object) -> TestClient:
    """TestClient for the app with get_db bound to session_factory. Lifespan does not run."""
    from student_manager.main import app

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app, **kwargs)


def clear_overrides() -> None:
    from student_manager.main import app

    app.dependency_overrides.clear()


def auth_header(user_id: int = 1, email: str = "admin@test.com", username: str = "admin") -> dict[str, str]:
    token = create_access_token(user_id=user_id, email=email, username=username)
    return {"Authorization": f"Bearer {token}"}


def admin_code() -> str:
    return get_settings().ADMIN_REGISTRATION_CODE.get_secret_value()
