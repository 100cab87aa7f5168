"""
Pull Request Lifecycle Engine.

Create, merge, reassign and replenish. Candidate pools are read in a short
session before the write transaction; every choice is checked again inside
the transaction (status, assignment, active flag) before commit. A stale
choice therefore rejects the operation instead of corrupting state.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reviewpool.core.database import is_foreign_key_violation, is_unique_violation
from reviewpool.core.engine import repository
from reviewpool.core.engine.records import PullRequestDetails
from reviewpool.core.engine.selection import ReviewerSelector
from reviewpool.core.errors import (
    AuthorNotFoundError,
    InactiveReviewerError,
    NoCandidateError,
    PullRequestExistsError,
    PullRequestMergedError,
    PullRequestNotFoundError,
    ReviewerAlreadyAssignedError,
    ReviewerNotAssignedError,
    UserNotFoundError,
)
from reviewpool.core.models import PullRequest, PullRequestStatus

logger = structlog.get_logger()


class PullRequestEngine:
    """
    Orchestrates the pull request state machine.

    OPEN --merge--> MERGED (terminal). Reviewer mutations are only valid
    while OPEN.
    """

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        selector: Optional[ReviewerSelector] = None,
    ):
        self._sessions = sessions
        self._selector = selector or ReviewerSelector()

    @property
    def max_reviewers(self) -> int:
        return self._selector.max_reviewers

    # ==========================================================================
    # Create
    # ==========================================================================

    async def create_pull_request(
        self,
        pull_request_id: str,
        pull_request_name: str,
        author_id: str,
    ) -> PullRequestDetails:
        """
        Create an OPEN pull request with up to two reviewers from the author's team.

        Raises:
            AuthorNotFoundError: If the author does not exist
            PullRequestExistsError: If the id is already taken
            InactiveReviewerError: If a chosen reviewer was deactivated meanwhile
        """
        async with self._sessions() as session:
            author = await repository.get_user(session, author_id)
            if author is None:
                raise AuthorNotFoundError(author_id)
            owning_team = author.team_name
            teammates = await repository.get_active_teammates(session, author_id)

        reviewers = self._selector.select_initial_reviewers(teammates)

        try:
            async with self._sessions() as session, session.begin():
                session.add(
                    PullRequest(
                        pull_request_id=pull_request_id,
                        pull_request_name=pull_request_name,
                        author_id=author_id,
                        team_name=owning_team,
                        status=PullRequestStatus.OPEN,
                    )
                )
                await session.flush()

                for reviewer_id in reviewers:
                    await repository.insert_reviewer(session, pull_request_id, reviewer_id)

                inactive = await repository.get_inactive_user_ids(session, reviewers)
                if inactive:
                    raise InactiveReviewerError(inactive[0])

                created = await repository.load_pull_request(session, pull_request_id)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise PullRequestExistsError(pull_request_id) from exc
            if is_foreign_key_violation(exc):
                raise AuthorNotFoundError(author_id) from exc
            raise

        logger.info(
            "pull_request_created",
            pull_request_id=pull_request_id,
            author_id=author_id,
            team_name=owning_team,
            reviewers=reviewers,
        )
        return created

    # ==========================================================================
    # Merge
    # ==========================================================================

    async def merge_pull_request(self, pull_request_id: str) -> PullRequestDetails:
        """
        Mark a pull request MERGED. Merging a merged PR returns it unchanged.

        Raises:
            PullRequestNotFoundError: If the PR does not exist
        """
        async with self._sessions() as session, session.begin():
            current = await repository.load_pull_request(session, pull_request_id)
            if current is None:
                raise PullRequestNotFoundError(pull_request_id)
            if current.status == PullRequestStatus.MERGED:
                return current

            # Conditional on OPEN; a concurrent merge leaves nothing to update.
            updated = await repository.mark_merged(
                session, pull_request_id, datetime.now(timezone.utc)
            )
            merged = await repository.load_pull_request(session, pull_request_id)

        if updated:
            logger.info("pull_request_merged", pull_request_id=pull_request_id)
        return merged

    # ==========================================================================
    # Reassign
    # ==========================================================================

    async def reassign_reviewer(
        self,
        pull_request_id: str,
        old_reviewer_id: str,
    ) -> tuple[PullRequestDetails, str]:
        """
        Replace one reviewer with a random active member of the owning team.

        Returns:
            Updated pull request and the id of the new reviewer

        Raises:
            PullRequestNotFoundError: If the PR does not exist
            NoCandidateError: If nobody eligible is left in the owning team
            PullRequestMergedError: If the PR is no longer OPEN
            ReviewerNotAssignedError: If old_reviewer_id is not a reviewer
            InactiveReviewerError: If the new reviewer was deactivated meanwhile
            ReviewerAlreadyAssignedError: If a concurrent reassign took the same replacement
        """
        async with self._sessions() as session:
            current = await repository.load_pull_request(session, pull_request_id)
            if current is None:
                raise PullRequestNotFoundError(pull_request_id)
            pool = await repository.get_active_by_team(session, current.team_name)

        candidates = self._selector.select_replacement_candidates(
            pool,
            exclude_author=current.author_id,
            exclude_assigned=current.assigned_reviewers,
        )
        new_reviewer_id = candidates[0]

        try:
            async with self._sessions() as session, session.begin():
                status = await repository.get_pull_request_status(session, pull_request_id)
                if status is None:
                    raise PullRequestNotFoundError(pull_request_id)
                if status != PullRequestStatus.OPEN:
                    raise PullRequestMergedError(pull_request_id)

                # The delete's row count is the assignment check.
                removed = await repository.delete_reviewer(
                    session, pull_request_id, old_reviewer_id
                )
                if removed != 1:
                    raise ReviewerNotAssignedError(pull_request_id, old_reviewer_id)
                await repository.insert_reviewer(session, pull_request_id, new_reviewer_id)

                if await repository.get_inactive_user_ids(session, [new_reviewer_id]):
                    raise InactiveReviewerError(new_reviewer_id)

                updated = await repository.load_pull_request(session, pull_request_id)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ReviewerAlreadyAssignedError(pull_request_id, new_reviewer_id) from exc
            if is_foreign_key_violation(exc):
                raise UserNotFoundError(new_reviewer_id) from exc
            raise

        logger.info(
            "reviewer_reassigned",
            pull_request_id=pull_request_id,
            old_reviewer_id=old_reviewer_id,
            new_reviewer_id=new_reviewer_id,
        )
        return updated, new_reviewer_id

    # ==========================================================================
    # Replenish
    # ==========================================================================

    async def replenish_reviewers(self, session: AsyncSession, pull_request_id: str) -> list[str]:
        """
        Top up an OPEN pull request toward the reviewer target.

        Runs on the caller's session so it joins the caller's transaction.
        Draws only from the PR's owning team. Missing PRs, merged PRs, full
        PRs and empty pools are all no-ops.

        Returns:
            Ids of the reviewers added
        """
        current = await repository.load_pull_request(session, pull_request_id)
        if current is None or not current.is_open:
            return []

        missing = self.max_reviewers - len(current.assigned_reviewers)
        if missing <= 0:
            return []

        pool = await repository.get_active_by_team(session, current.team_name)
        try:
            candidates = self._selector.select_replacement_candidates(
                pool,
                exclude_author=current.author_id,
                exclude_assigned=current.assigned_reviewers,
            )
        except NoCandidateError:
            return []

        added = candidates[:missing]
        for reviewer_id in added:
            await repository.insert_reviewer(session, pull_request_id, reviewer_id)

        logger.info(
            "reviewers_replenished",
            pull_request_id=pull_request_id,
            team_name=current.team_name,
            added=added,
        )
        return added
