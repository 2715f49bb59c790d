from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_file.as_posix()}")
    monkeypatch.setenv("AUTO_CREATE_ADMIN", "true")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_LOGIN", "admin")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD", "admin123")
    monkeypatch.setenv("JWT_SECRET", "test-secret")

    from academy import models  # noqa: F401
    from academy.core.config import clear_settings_cache
    from academy.db.base import Base
    from academy.db.session import get_engine, reset_engine

    clear_settings_cache()
    reset_engine()
    Base.metadata.create_all(bind=get_engine())

    yield get_engine()

    Base.metadata.drop_all(bind=get_engine())
    reset_engine()
    clear_settings_cache()


@pytest.fixture()
def db(database):
    from academy.db.session import get_session_factory

    with get_session_factory()() as session:
        yield session


@pytest.fixture()
def app_client(database):
    from academy.main import create_app

    app = create_app()
    with TestClient(app) as client:
        yield client


def create_student(db, name: str, *, student_id: str | None = None, is_active: bool = True):
    from academy.models.student import Student

    fields = {
        "name": name,
        "email": f"{(student_id or name).lower().replace(' ', '.')}@example.com",
        "is_active": is_active,
    }
    if student_id is not None:
        fields["id"] = student_id
    student = Student(**fields)
    db.add(student)
    db.commit()
    return student


def add_student(name: str, *, student_id: str | None = None, is_active: bool = True) -> str:
    """Create a student in its own short-lived session and return the id."""
    from academy.db.session import get_session_factory

    with get_session_factory()() as session:
        return create_student(session, name, student_id=student_id, is_active=is_active).id


def auth_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/auth/login", json={"login": "admin", "password": "admin123"})
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def student_headers(student_id: str) -> dict[str, str]:
    from academy.core.security import create_access_token

    token = create_access_token(subject=student_id, role="student")
    return {"Authorization": f"Bearer {token}"}
