from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# precisa vir antes de importar app.*: Settings() lê o ambiente no import
_TMP = Path(tempfile.mkdtemp(prefix="oficinas-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["AUTH_SECRET"] = "test-secret-key"
os.environ["CERTIFICATES_DIR"] = str(_TMP / "certificates")
os.environ["CERTIFICATE_WORKERS"] = "0"
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)
os.environ.pop("PUBLIC_BASE_URL", None)

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from app.core.config import settings
from app.core.security import create_access_token, hash_password
from app.db.base_all import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.models.user import ROLE_ADMIN, ROLE_PROFESSOR, ROLE_STUDENT, User

DEFAULT_PASSWORD = "senha123"


@pytest.fixture(autouse=True)
def fresh_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    monkeypatch.setattr(settings, "CERTIFICATES_DIR", tmp_path / "certificates")
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", None)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def make_user():
    def _make(role: str = ROLE_STUDENT, name: str | None = None, email: str | None = None,
              password: str = DEFAULT_PASSWORD, **extra) -> User:
        db = SessionLocal()
        try:
            count = db.scalar(select(func.count()).select_from(User)) + 1
            user = User(
                name=name or f"{role.title()} {count}",
                email=email or f"{role}{count}@example.com",
                password=hash_password(password),
                role=role,
                **extra,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            return user
        finally:
            db.close()

    return _make


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture()
def admin(make_user) -> User:
    return make_user(ROLE_ADMIN, name="Admin", email="admin@example.com")


@pytest.fixture()
def professor(make_user) -> User:
    return make_user(ROLE_PROFESSOR, name="Maria Prof", email="maria@example.com", ra="12345", curso="ADS")


@pytest.fixture()
def student(make_user) -> User:
    return make_user(ROLE_STUDENT, name="Ana Souza", email="ana@example.com")


@pytest.fixture()
def create_workshop(client):
    def _create(owner: User, name: str = "W1", **extra) -> dict:
        response = client.post("/workshops", json={"name": name, **extra}, headers=auth_headers(owner))
        assert response.status_code == 201, response.text
        return response.json()["workshop"]

    return _create


@pytest.fixture()
def enroll(client):
    def _enroll(owner: User, workshop_id: int, student_id: int):
        return client.post(
            "/workshops/students",
            json={"workshopId": workshop_id, "studentId": student_id},
            headers=auth_headers(owner),
        )

    return _enroll
