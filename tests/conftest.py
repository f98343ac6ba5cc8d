"""
Shared pytest fixtures for tournament engine tests.

Store and lifecycle tests run against an in-memory SQLite database
(aiosqlite); one connection is shared so every session sees the same data.
"""
import os
import sys

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from database import Base
from tournaments.permissions import PermissionChecker, User
from tournaments.service import TournamentManager
from tournaments.store import TournamentStore


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession,
                             expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session):
    return TournamentStore(session)


@pytest.fixture
def admin():
    return User(id="admin")


@pytest.fixture
def manager(store):
    return TournamentManager(store, PermissionChecker(admins={"admin"}))


@pytest.fixture
def players():
    """Eight player ids, enough for two doubles courts."""
    return [f"p{i}" for i in range(1, 9)]
