"""User activity toggle and review lookup."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reviewpool.core.engine import repository
from reviewpool.core.engine.records import PullRequestShort, UserDetails
from reviewpool.core.errors import UserNotFoundError

logger = structlog.get_logger()


class UserEngine:

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    async def set_is_active(self, user_id: str, is_active: bool) -> UserDetails:
        """
        Flip a user's active flag.

        Existing assignments are left alone; only team deactivation
        cascades into reviews.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        async with self._sessions() as session, session.begin():
            user = await repository.set_user_active(session, user_id, is_active)
            if user is None:
                raise UserNotFoundError(user_id)
            details = UserDetails(
                user_id=user.user_id,
                username=user.username,
                team_name=user.team_name,
                is_active=user.is_active,
            )

        logger.info("user_activity_changed", user_id=user_id, is_active=is_active)
        return details

    async def get_user_reviews(self, user_id: str) -> list[PullRequestShort]:
        """OPEN pull requests the user reviews, newest first."""
        async with self._sessions() as session:
            return await repository.get_open_reviews_for_user(session, user_id)
