import os
from types import SimpleNamespace
from typing import Dict, Optional

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.models  # noqa: F401  registers every table on Base.metadata
from app.core.database import Base, get_db
from app.core.redis_client import get_redis
from app.models.user import User
from main import app as api_app


class InMemoryRedis:
    """Async stand-in for the handful of Redis calls the auth layer makes."""

    def __init__(self) -> None:
        self.store: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.store.pop(key, None)


@pytest.fixture()
def session_factory(tmp_path) -> async_sessionmaker:
    """Async sessions over a fresh SQLite file; NullPool keeps connections loop-local."""
    db_path = tmp_path / "notes.db"

    schema_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(schema_engine)
    schema_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    engine.sync_engine.dispose()


@pytest_asyncio.fixture()
async def db(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def accounts(db: AsyncSession) -> SimpleNamespace:
    """Three users: alice owns notes in most tests, bob and carol are others."""
    created = {}
    for name in ("alice", "bob", "carol"):
        user = User(email=f"{name}@example.com", hashed_password="unused")
        db.add(user)
        created[name] = user
    await db.commit()
    return SimpleNamespace(**created)


@pytest.fixture()
def redis_double() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture()
def client(session_factory, redis_double) -> TestClient:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return redis_double

    api_app.dependency_overrides[get_db] = override_get_db
    api_app.dependency_overrides[get_redis] = override_get_redis
    # Not entered as a context manager: the lifespan would dial a real Redis
    test_client = TestClient(api_app)
    try:
        yield test_client
    finally:
        api_app.dependency_overrides.clear()

