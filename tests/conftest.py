# tests/conftest.py
from __future__ import annotations

import os

# Settings se leen al importar app.*: fijar el entorno antes
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("SETUP_SERVICE_KEY", "test-service-key")
os.environ.setdefault("DEBUG", "false")

import uuid  # noqa: E402
from typing import Callable, Dict  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401  (registra todas las tablas en Base.metadata)
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.models.auth import AuthIdentity, User, UserRole  # noqa: E402
from app.security.jwt import create_access_token  # noqa: E402

# Una sola conexión en memoria compartida por el TestClient y la prueba
engine = create_engine(
    "sqlite+pysqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    future=True,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture(scope="function")
def db() -> Session:
    """
    Esquema nuevo por prueba: create_all al inicio, drop_all al final.
    Los endpoints hacen commit, así que no alcanza con un rollback.
    """
    Base.metadata.create_all(engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def _override_get_db(db: Session):
    """
    Override automático de la dependencia get_db de FastAPI para que
    todos los endpoints usen **la misma sesión** de la prueba en curso.
    """
    from app.main import app  # import tardío para evitar ciclos

    def _get_db():
        try:
            yield db
        finally:
            # mismo efecto que close() en get_db: descarta lo no confirmado
            db.rollback()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient
    from app.main import app

    return TestClient(app)


@pytest.fixture()
def make_user(db: Session) -> Callable[..., User]:
    def _make(role: UserRole = UserRole.editor, email: str | None = None) -> User:
        email = email or f"u-{uuid.uuid4().hex[:8]}@test.com"
        identity = AuthIdentity(email=email, hashed_password="x", email_confirmed=True)
        db.add(identity)
        db.flush()
        user = User(id=identity.id, email=email, role=role)
        db.add(user)
        db.commit()
        return user

    return _make


def bearer(user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def editor_headers(make_user) -> Dict[str, str]:
    return bearer(make_user(UserRole.editor).id)


@pytest.fixture()
def viewer_headers(make_user) -> Dict[str, str]:
    return bearer(make_user(UserRole.viewer).id)
