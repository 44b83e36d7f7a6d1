"""
Shared fixtures for the myblog API tests.
"""
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from myblog.core.recent_searches import (
    InMemoryBackend,
    RecentSearchStore,
    get_recent_search_store,
)
from myblog.database import Base, get_db
from myblog.main import app


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads for one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Create a database session."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def recent_store():
    """Recent search store backed by memory."""
    store = RecentSearchStore(InMemoryBackend())
    store.load()
    return store


@pytest.fixture
def client(engine, recent_store, tmp_path, monkeypatch):
    """Test client wired to the test database and in-memory stores."""
    from myblog.config import settings

    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(settings, "LOCAL_MEDIA_PATH", str(tmp_path / "media"))

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_recent_search_store] = lambda: recent_store

    yield TestClient(app)

    app.dependency_overrides.clear()


def register(client, email, nickname, password="password123"):
    response = client.post("/auth/register", json={
        "email": email,
        "password": password,
        "password_confirm": password,
        "nickname": nickname,
    })
    assert response.status_code == 201, response.text
    user_id = response.json()["user_id"]

    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]

    return user_id, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    """Registered user, returns (user_id, auth headers)."""
    return register(client, "alice@example.com", "alice")


@pytest.fixture
def bob(client):
    """Second registered user."""
    return register(client, "bob@example.com", "bobby")


@pytest.fixture
def post(client, alice):
    """A public post written by alice."""
    _, headers = alice
    response = client.post("/posts", headers=headers, json={
        "title": "Hello World",
        "content": "First post on the blog.",
        "tags": ["intro"],
    })
    assert response.status_code == 201, response.text
    return response.json()


def make_image(width, height, fmt="PNG"):
    """Encode a solid-colour image of the given size."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()
