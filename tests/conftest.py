from typing import Generator
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from bytebros.auth import Claims, TokenSigner
from bytebros.config import Settings
from bytebros.db import Base, build_session_factory
from bytebros.main import create_app

TEST_SECRET = "test-secret"


@pytest.fixture(scope="function")
def db_engine():
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        jwt_secret=TEST_SECRET,
        token_ttl_seconds=60 * 60 * 24,
        email_conflict_policy="generic",
        log_level="WARNING",
    )


@pytest.fixture
def signer(settings):
    return TokenSigner(settings.jwt_secret, ttl_seconds=settings.token_ttl_seconds)


@pytest.fixture
def identity():
    return Claims(user_id=1, email="joao@x.com", is_admin=False, expires_at=0)


@pytest.fixture(scope="function")
def app(settings, db_engine):
    return create_app(settings, engine=db_engine)


@pytest.fixture(scope="function")
def client(app):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    def _register(email="joao@x.com", senha="senha123", nome="João Silva"):
        r = client.post("/api/auth/registrar", json={"nome_completo": nome, "email": email, "senha": senha})
        assert r.status_code == 201, r.text
        return r.json()
    return _register


@pytest.fixture
def auth_headers(register):
    token = register()["token"]
    return {"Authorization": f"Bearer {token}"}
