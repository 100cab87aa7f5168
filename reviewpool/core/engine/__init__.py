"""
Review Pool - Reviewer Assignment Engine
========================================

Components:
- ReviewerSelector: Random reviewer choice with exclusion rules
- PullRequestEngine: Create, merge, reassign, replenish
- TeamEngine: Team creation, lookup, deactivation cascade
- UserEngine: Activity toggle and review lookup
"""

from reviewpool.core.engine.pull_requests import PullRequestEngine
from reviewpool.core.engine.records import (
    PullRequestDetails,
    PullRequestShort,
    TeamDetails,
    TeamMember,
    UserDetails,
)
from reviewpool.core.engine.selection import MAX_REVIEWERS, ReviewerSelector
from reviewpool.core.engine.teams import TeamEngine
from reviewpool.core.engine.users import UserEngine

__all__ = [
    "MAX_REVIEWERS",
    "PullRequestDetails",
    "PullRequestEngine",
    "PullRequestShort",
    "ReviewerSelector",
    "TeamDetails",
    "TeamEngine",
    "TeamMember",
    "UserDetails",
    "UserEngine",
]
