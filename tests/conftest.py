# --- keep this shim at the very top ---
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# --------------------------------------

import pytest_asyncio
import httpx

from contextlib import asynccontextmanager


# Force an in-memory SQLite for unit tests so we never touch a real database.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.pop("DB_POOL_SIZE", None)
os.environ.pop("DB_MAX_OVERFLOW", None)
os.environ.pop("DB_WAIT_FOR_DB", None)

from character_api import db  # noqa: E402

db.configure_engine(os.environ["DATABASE_URL"])

import character_api.main as app_main  # noqa: E402

MORTY = {
    "name": "Morty Smith",
    "status": "Alive",
    "species": "Human",
    "gender": "Male",
    "origin": {"name": "Earth (C-137)", "url": ""},
    "location": {"name": "Citadel of Ricks", "url": ""},
    "image": "",
    "episode": [],
    "url": "",
}

SLUT_DRAGON = {
    "name": "Slut Dragon",
    "status": "Alive",
    "species": "Mythological Creature",
    "type": "Dragon",
    "gender": "Male",
    "origin": {
        "name": "Draygon",
        "url": "https://rickandmortyapi.com/api/location/94",
    },
    "location": {
        "name": "Draygon",
        "url": "https://rickandmortyapi.com/api/location/94",
    },
    "image": "https://rickandmortyapi.com/api/character/avatar/568.jpeg",
    "episode": ["https://rickandmortyapi.com/api/episode/35"],
    "url": "https://rickandmortyapi.com/api/character/568",
    "created": "2020-05-07T11:37:05.857Z",
}


@pytest_asyncio.fixture(autouse=True)
async def memory_db_and_overrides(monkeypatch):
    """
    Use a fresh in-memory SQLite DB for every test.
    - Ensure schema is created.
    - Make FastAPI dependencies pull sessions from this engine.
    - Replace app lifespan so TestClient startup only creates the schema.
    """
    db.configure_engine("sqlite+aiosqlite:///:memory:")
    await db.init_db()

    async def override_get_session():
        async with db.SessionLocal() as session:
            yield session

    app_main.app.dependency_overrides[app_main.get_session] = override_get_session

    @asynccontextmanager
    async def test_lifespan(_app):
        await db.init_db()
        yield

    monkeypatch.setattr(
        app_main.app.router, "lifespan_context", test_lifespan, raising=False
    )

    yield

    app_main.app.dependency_overrides.pop(app_main.get_session, None)


@pytest_asyncio.fixture
async def test_app():
    from character_api.main import app as _app

    yield _app


@pytest_asyncio.fixture
async def test_client(test_app):
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as c:
        yield c
