"""
Review Pool - API Dependencies
==============================

Shared dependencies for FastAPI endpoints.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reviewpool.core.config import settings
from reviewpool.core.database import get_session_factory
from reviewpool.core.engine import (
    PullRequestEngine,
    ReviewerSelector,
    TeamEngine,
    UserEngine,
)


# ==========================================================================
# Selection Policy
# ==========================================================================

@lru_cache
def get_reviewer_selector() -> ReviewerSelector:
    """Process-wide selector backed by the OS secure random source."""
    return ReviewerSelector(max_reviewers=settings.MAX_REVIEWERS)


# ==========================================================================
# Engines
# ==========================================================================

SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
Selector = Annotated[ReviewerSelector, Depends(get_reviewer_selector)]


def get_pull_request_engine(sessions: SessionFactory, selector: Selector) -> PullRequestEngine:
    return PullRequestEngine(sessions, selector)


def get_team_engine(
    sessions: SessionFactory,
    pull_requests: Annotated[PullRequestEngine, Depends(get_pull_request_engine)],
) -> TeamEngine:
    return TeamEngine(sessions, pull_requests)


def get_user_engine(sessions: SessionFactory) -> UserEngine:
    return UserEngine(sessions)


# ==========================================================================
# Type Aliases for Dependency Injection
# ==========================================================================

# Use these in endpoint signatures for cleaner code
PullRequests = Annotated[PullRequestEngine, Depends(get_pull_request_engine)]
Teams = Annotated[TeamEngine, Depends(get_team_engine)]
Users = Annotated[UserEngine, Depends(get_user_engine)]
