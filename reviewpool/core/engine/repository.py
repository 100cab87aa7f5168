"""
Data access helpers for the engines.

Every helper takes an ``AsyncSession`` as its executor. The session may be
used on its own (autobegin) or inside a caller's ``session.begin()`` block,
so the helpers never commit or roll back themselves.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, exists, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from reviewpool.core.engine.records import (
    PullRequestDetails,
    PullRequestShort,
    TeamMember,
)
from reviewpool.core.models import (
    PullRequest,
    PullRequestReviewer,
    PullRequestStatus,
    Team,
    User,
)


# ==========================================================================
# Users
# ==========================================================================

async def get_user(session: AsyncSession, user_id: str) -> Optional[User]:
    result = await session.execute(
        select(User)
        .where(User.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_active_teammates(session: AsyncSession, user_id: str) -> list[User]:
    """Active users of ``user_id``'s current team, excluding the user."""
    me = aliased(User)
    result = await session.execute(
        select(User)
        .join(me, me.team_name == User.team_name)
        .where(
            me.user_id == user_id,
            User.user_id != user_id,
            User.is_active.is_(True),
        )
        .order_by(User.user_id)
    )
    return list(result.scalars().all())


async def get_active_by_team(session: AsyncSession, team_name: str) -> list[User]:
    result = await session.execute(
        select(User)
        .where(User.team_name == team_name, User.is_active.is_(True))
        .order_by(User.user_id)
    )
    return list(result.scalars().all())


async def get_inactive_user_ids(
    session: AsyncSession, user_ids: Sequence[str]
) -> list[str]:
    """Subset of ``user_ids`` whose account is currently inactive."""
    if not user_ids:
        return []
    result = await session.execute(
        select(User.user_id).where(
            User.user_id.in_(list(user_ids)),
            User.is_active.is_(False),
        )
    )
    return list(result.scalars().all())


async def set_user_active(
    session: AsyncSession, user_id: str, is_active: bool
) -> Optional[User]:
    result = await session.execute(
        update(User)
        .where(User.user_id == user_id)
        .values(is_active=is_active)
    )
    if result.rowcount == 0:
        return None
    return await get_user(session, user_id)


# ==========================================================================
# Teams
# ==========================================================================

async def team_exists(session: AsyncSession, team_name: str) -> bool:
    result = await session.execute(
        select(exists().where(Team.team_name == team_name))
    )
    return bool(result.scalar())


async def get_team_members(session: AsyncSession, team_name: str) -> list[TeamMember]:
    result = await session.execute(
        select(User.user_id, User.username, User.is_active)
        .where(User.team_name == team_name)
        .order_by(User.user_id)
    )
    return [
        TeamMember(user_id=row.user_id, username=row.username, is_active=row.is_active)
        for row in result
    ]


async def deactivate_team_users(session: AsyncSession, team_name: str) -> int:
    result = await session.execute(
        update(User)
        .where(User.team_name == team_name)
        .values(is_active=False)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


# ==========================================================================
# Pull Requests
# ==========================================================================

async def get_pull_request(session: AsyncSession, pull_request_id: str) -> Optional[PullRequest]:
    result = await session.execute(
        select(PullRequest)
        .where(PullRequest.pull_request_id == pull_request_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_pull_request_status(
    session: AsyncSession, pull_request_id: str
) -> Optional[PullRequestStatus]:
    result = await session.execute(
        select(PullRequest.status).where(PullRequest.pull_request_id == pull_request_id)
    )
    return result.scalar_one_or_none()


async def get_reviewer_ids(session: AsyncSession, pull_request_id: str) -> list[str]:
    result = await session.execute(
        select(PullRequestReviewer.user_id)
        .where(PullRequestReviewer.pull_request_id == pull_request_id)
        .order_by(PullRequestReviewer.id)
    )
    return list(result.scalars().all())


async def load_pull_request(
    session: AsyncSession, pull_request_id: str
) -> Optional[PullRequestDetails]:
    """Pull request row plus its reviewer ids, or None."""
    pull_request = await get_pull_request(session, pull_request_id)
    if pull_request is None:
        return None
    return PullRequestDetails(
        pull_request_id=pull_request.pull_request_id,
        pull_request_name=pull_request.pull_request_name,
        author_id=pull_request.author_id,
        team_name=pull_request.team_name,
        status=pull_request.status,
        assigned_reviewers=await get_reviewer_ids(session, pull_request_id),
        created_at=pull_request.created_at,
        merged_at=pull_request.merged_at,
    )


async def insert_reviewer(session: AsyncSession, pull_request_id: str, user_id: str) -> None:
    await session.execute(
        insert(PullRequestReviewer).values(
            pull_request_id=pull_request_id,
            user_id=user_id,
        )
    )


async def delete_reviewer(session: AsyncSession, pull_request_id: str, user_id: str) -> int:
    """Remove one assignment. Returns the number of rows deleted (0 or 1)."""
    result = await session.execute(
        delete(PullRequestReviewer)
        .where(
            PullRequestReviewer.pull_request_id == pull_request_id,
            PullRequestReviewer.user_id == user_id,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def mark_merged(session: AsyncSession, pull_request_id: str, merged_at: datetime) -> int:
    """
    Conditional OPEN -> MERGED transition.

    Returns the number of rows updated; 0 means the PR was already merged
    (or does not exist).
    """
    result = await session.execute(
        update(PullRequest)
        .where(
            PullRequest.pull_request_id == pull_request_id,
            PullRequest.status == PullRequestStatus.OPEN,
        )
        .values(status=PullRequestStatus.MERGED, merged_at=merged_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def get_open_pull_requests_reviewed_by_team(
    session: AsyncSession, team_name: str
) -> dict[str, tuple[str, list[str]]]:
    """
    OPEN pull requests with at least one reviewer from ``team_name``.

    Returns:
        pull_request_id -> (owning team, reviewer ids belonging to team_name)
    """
    result = await session.execute(
        select(
            PullRequest.pull_request_id,
            PullRequest.team_name,
            PullRequestReviewer.user_id,
        )
        .join(
            PullRequestReviewer,
            PullRequestReviewer.pull_request_id == PullRequest.pull_request_id,
        )
        .join(User, User.user_id == PullRequestReviewer.user_id)
        .where(
            PullRequest.status == PullRequestStatus.OPEN,
            User.team_name == team_name,
        )
        .order_by(PullRequest.pull_request_id, PullRequestReviewer.id)
    )
    by_pull_request: dict[str, tuple[str, list[str]]] = {}
    for row in result:
        _, reviewers = by_pull_request.setdefault(
            row.pull_request_id, (row.team_name, [])
        )
        reviewers.append(row.user_id)
    return by_pull_request


async def get_open_reviews_for_user(
    session: AsyncSession, user_id: str
) -> list[PullRequestShort]:
    result = await session.execute(
        select(
            PullRequest.pull_request_id,
            PullRequest.pull_request_name,
            PullRequest.author_id,
            PullRequest.team_name,
            PullRequest.status,
        )
        .join(
            PullRequestReviewer,
            PullRequestReviewer.pull_request_id == PullRequest.pull_request_id,
        )
        .where(
            PullRequestReviewer.user_id == user_id,
            PullRequest.status == PullRequestStatus.OPEN,
        )
        .order_by(PullRequest.created_at.desc(), PullRequest.pull_request_id)
    )
    return [
        PullRequestShort(
            pull_request_id=row.pull_request_id,
            pull_request_name=row.pull_request_name,
            author_id=row.author_id,
            team_name=row.team_name,
            status=row.status,
        )
        for row in result
    ]
