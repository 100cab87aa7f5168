"""
Review Pool - Test Fixtures
===========================

Shared pytest fixtures for all tests.
"""

import os
import random
from collections.abc import AsyncGenerator

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from reviewpool.api.deps import get_reviewer_selector
from reviewpool.api.main import app
from reviewpool.core.database import Base, enable_sqlite_foreign_keys, get_session_factory
from reviewpool.core.engine import (
    PullRequestEngine,
    ReviewerSelector,
    TeamEngine,
    TeamMember,
    UserEngine,
)
from reviewpool.core.engine import repository


# ==========================================================================
# Test Database Setup
# ==========================================================================

# Use in-memory SQLite for tests (fast)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(test_engine)

TestingSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


# ==========================================================================
# Database Fixtures
# ==========================================================================

@pytest_asyncio.fixture(scope="function")
async def sessions() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Provide a clean database for each test.

    Creates all tables before test, drops after.
    """
    from reviewpool.core import models  # noqa: F401

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield TestingSessionLocal

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ==========================================================================
# Engine Fixtures
# ==========================================================================

@pytest.fixture
def selector() -> ReviewerSelector:
    """Selector with a seeded source so runs are reproducible."""
    return ReviewerSelector(rng=random.Random(1234))


@pytest.fixture
def pr_engine(sessions, selector: ReviewerSelector) -> PullRequestEngine:
    return PullRequestEngine(sessions, selector)


@pytest.fixture
def team_engine(sessions, pr_engine: PullRequestEngine) -> TeamEngine:
    return TeamEngine(sessions, pr_engine)


@pytest.fixture
def user_engine(sessions) -> UserEngine:
    return UserEngine(sessions)


# ==========================================================================
# HTTP Client
# ==========================================================================

@pytest_asyncio.fixture(scope="function")
async def client(sessions, selector: ReviewerSelector) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide test HTTP client with the session factory overridden.
    """
    app.dependency_overrides[get_session_factory] = lambda: sessions
    app.dependency_overrides[get_reviewer_selector] = lambda: selector

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ==========================================================================
# Helper Functions
# ==========================================================================

def member(user_id: str, is_active: bool = True) -> TeamMember:
    """Team member whose username is derived from the id."""
    return TeamMember(user_id=user_id, username=f"name-{user_id}", is_active=is_active)


async def seed_team(team_engine: TeamEngine, team_name: str, *user_ids: str) -> None:
    """Create a team whose members are all active."""
    await team_engine.create_team(team_name, [member(uid) for uid in user_ids])


async def reviewers_of(sessions, pull_request_id: str) -> list[str]:
    async with sessions() as session:
        return await repository.get_reviewer_ids(session, pull_request_id)


async def user_is_active(sessions, user_id: str) -> bool:
    async with sessions() as session:
        user = await repository.get_user(session, user_id)
        return user.is_active


async def team_of(sessions, user_id: str) -> str:
    async with sessions() as session:
        user = await repository.get_user(session, user_id)
        return user.team_name


class StaleSelector(ReviewerSelector):
    """Always proposes a fixed user, as if the pool had been read before a change."""

    def __init__(self, user_id: str):
        super().__init__(rng=random.Random(0))
        self.user_id = user_id

    def select_initial_reviewers(self, pool):
        return [self.user_id]

    def select_replacement_candidates(self, pool, exclude_author, exclude_assigned):
        return [self.user_id]
