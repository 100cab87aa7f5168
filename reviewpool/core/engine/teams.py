"""
Team Lifecycle Engine.

Team creation with member upsert, lookup, and deactivation. Deactivation
cascades into open pull requests reviewed by the team.
"""

from collections.abc import Sequence

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reviewpool.core.database import is_unique_violation
from reviewpool.core.engine import repository
from reviewpool.core.engine.pull_requests import PullRequestEngine
from reviewpool.core.engine.records import TeamDetails, TeamMember
from reviewpool.core.errors import TeamExistsError, TeamNotFoundError
from reviewpool.core.models import Team, User

logger = structlog.get_logger()


class TeamEngine:
    """Team operations. Each mutating call is one transaction."""

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        pull_requests: PullRequestEngine,
    ):
        self._sessions = sessions
        self._pull_requests = pull_requests

    async def create_team(self, team_name: str, members: Sequence[TeamMember]) -> None:
        """
        Create a team and upsert its members.

        A member whose user_id already exists is updated in place, which
        moves them into this team.

        Raises:
            TeamExistsError: If the team name is taken
        """
        try:
            async with self._sessions() as session, session.begin():
                if await repository.team_exists(session, team_name):
                    raise TeamExistsError(team_name)

                session.add(Team(team_name=team_name))
                await session.flush()

                for member in members:
                    await session.merge(
                        User(
                            user_id=member.user_id,
                            username=member.username,
                            team_name=team_name,
                            is_active=member.is_active,
                        )
                    )
                await session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise TeamExistsError(team_name) from exc
            raise

        logger.info("team_created", team_name=team_name, members=len(members))

    async def get_team(self, team_name: str) -> TeamDetails:
        """
        Raises:
            TeamNotFoundError: If the team row does not exist
        """
        async with self._sessions() as session:
            if not await repository.team_exists(session, team_name):
                raise TeamNotFoundError(team_name)
            members = await repository.get_team_members(session, team_name)
        return TeamDetails(team_name=team_name, members=members)

    async def deactivate_team(self, team_name: str) -> None:
        """
        Deactivate every member and pull them off open reviews.

        Pull requests owned by another team are refilled from their own
        team. Pull requests owned by the deactivated team are left short:
        their only pool is now inactive.

        Raises:
            TeamNotFoundError: If the team does not exist
        """
        async with self._sessions() as session, session.begin():
            if not await repository.team_exists(session, team_name):
                raise TeamNotFoundError(team_name)

            deactivated = await repository.deactivate_team_users(session, team_name)
            affected = await repository.get_open_pull_requests_reviewed_by_team(
                session, team_name
            )

            for pull_request_id, (owning_team, reviewer_ids) in affected.items():
                for reviewer_id in reviewer_ids:
                    await repository.delete_reviewer(session, pull_request_id, reviewer_id)
                if owning_team != team_name:
                    await self._pull_requests.replenish_reviewers(session, pull_request_id)

        logger.info(
            "team_deactivated",
            team_name=team_name,
            users=deactivated,
            pull_requests=len(affected),
        )
