"""
Shared fixtures: a fresh SQLite database per test, fakeredis in place of
the Redis server, and an in-process API client.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("WEBHOOK_SECRET", "")
os.environ.setdefault("GOOGLE_SHEETS_API_KEY", "")
os.environ.setdefault("GOOGLE_SHEETS_ID", "")

import fakeredis.aioredis
import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from menuboard.core import redis_client
from menuboard.core.security import create_admin_token
from menuboard.db import menu_ops
from menuboard.db.database import Base, get_db, get_session_factory
from menuboard.main import app
from menuboard.schemas.menu import CategoryCreate, MenuItemCreate


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'menuboard.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(autouse=True)
async def fake_redis(monkeypatch):
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client, "_redis_client", client)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_admin_token()}"}


@pytest_asyncio.fixture
async def soup(db):
    """A category named 'soup' with sort order 1."""
    return await menu_ops.create_category(
        db, CategoryCreate(name="soup", display_name="Soups", sort_order=1)
    )


@pytest_asyncio.fixture
async def wonton(db, soup):
    return await menu_ops.create_menu_item(
        db, MenuItemCreate(name="Wonton Soup", price=450, category_id=soup.id, description="Pork wontons")
    )
