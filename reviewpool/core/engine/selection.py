"""
Reviewer Selection Policy.

Pure functions over candidate pools. No I/O; the only side effect is
consuming entropy from the injected random source.
"""

import random
import secrets
from collections.abc import Iterable
from typing import Optional, Protocol

from reviewpool.core.errors import NoCandidateError

MAX_REVIEWERS = 2


class Candidate(Protocol):
    user_id: str


class ReviewerSelector:
    """
    Chooses reviewers uniformly at random from a pool.

    Production uses ``secrets.SystemRandom``. Tests pass a seeded
    ``random.Random`` to get reproducible picks.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        max_reviewers: int = MAX_REVIEWERS,
    ):
        self._rng = rng if rng is not None else secrets.SystemRandom()
        self.max_reviewers = max_reviewers

    def select_initial_reviewers(self, pool: Iterable[Candidate]) -> list[str]:
        """
        Pick up to ``max_reviewers`` distinct user ids from the pool.

        Args:
            pool: Active teammates of the author, author excluded

        Returns:
            All ids if the pool is small enough, otherwise a random subset.
            An empty pool gives an empty list.
        """
        user_ids = _unique_ids(pool)
        if len(user_ids) <= self.max_reviewers:
            return user_ids

        # Rejection sampling: redraw until the index is new.
        chosen: set[int] = set()
        reviewers: list[str] = []
        while len(reviewers) < self.max_reviewers:
            idx = self._rng.randrange(len(user_ids))
            if idx in chosen:
                continue
            chosen.add(idx)
            reviewers.append(user_ids[idx])
        return reviewers

    def select_replacement_candidates(
        self,
        pool: Iterable[Candidate],
        exclude_author: str,
        exclude_assigned: Iterable[str],
    ) -> list[str]:
        """
        Pick up to ``max_reviewers`` candidates not yet on the pull request.

        Raises:
            NoCandidateError: If nobody is left after exclusions
        """
        excluded = {exclude_author, *exclude_assigned}
        candidates = [c for c in pool if c.user_id not in excluded]
        if not candidates:
            raise NoCandidateError()
        return self.select_initial_reviewers(candidates)


def _unique_ids(pool: Iterable[Candidate]) -> list[str]:
    seen: set[str] = set()
    user_ids: list[str] = []
    for candidate in pool:
        if candidate.user_id not in seen:
            seen.add(candidate.user_id)
            user_ids.append(candidate.user_id)
    return user_ids
