import os
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

os.environ.setdefault("MONGODB_DB_NAME", "student_points_test")
os.environ.setdefault("POINTS_FORCE_FALLBACK", "1000")


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test, with Beanie bound to it."""
    from app.db.init import init_db
    client = AsyncMongoMockClient()
    database = client["student_points_test"]
    await init_db(database)
    yield database


@pytest_asyncio.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    from app.main import app
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
