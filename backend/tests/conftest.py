import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from sqlalchemy.orm import sessionmaker  # noqa: E402

from db import init_db, make_engine  # noqa: E402
from settings import settings  # noqa: E402

TEST_JWT_SECRET = "test-secret-for-signing-access-tokens"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", TEST_JWT_SECRET)
    return TEST_JWT_SECRET


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine, monkeypatch):
    """Point every module that opens sessions at the in-memory database."""
    from api import deps
    from api.routes import auth, gemini, places, wishlist

    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    for module in (deps, auth, gemini, places, wishlist):
        monkeypatch.setattr(module, "SessionLocal", factory)
    return factory


@pytest.fixture
def session(session_factory):
    with session_factory() as s:
        yield s


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient
    from api.main import app

    return TestClient(app)


@pytest.fixture
def make_place(session_factory):
    from repositories import PlacesRepository

    repo = PlacesRepository()

    def _make(**overrides):
        data = {
            "name": "Pantai Kuta",
            "description": "Pantai terkenal di Bali dengan pasir putih.",
            "location": "Kuta, Bali",
            "latitude": -8.7184,
            "longitude": 115.1686,
            "category": "Pantai",
            "rating": 4.5,
            "image_url": "https://example.com/kuta.jpg",
        }
        data.update(overrides)
        with session_factory() as s:
            return repo.create_place(s, **data)

    return _make


@pytest.fixture
def make_user(session_factory):
    from repositories import UsersRepository
    from services.security import hash_password

    repo = UsersRepository()

    def _make(email="traveler@example.com", password="secret123"):
        with session_factory() as s:
            return repo.create_user(s, email, hash_password(password) if password else None)

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def auth_headers(user):
    from services.security import sign_token

    return {"Authorization": f"Bearer {sign_token({'id': user.id})}"}
