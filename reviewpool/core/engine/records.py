"""
Plain data returned by the engines.

ORM rows stay inside the session that loaded them; callers get these.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from reviewpool.core.models import PullRequestStatus


@dataclass
class TeamMember:
    """Member of a team as listed on team creation and lookup."""
    user_id: str
    username: str
    is_active: bool = True


@dataclass
class TeamDetails:
    """Team with its current members."""
    team_name: str
    members: list[TeamMember] = field(default_factory=list)


@dataclass
class UserDetails:
    user_id: str
    username: str
    team_name: str
    is_active: bool


@dataclass
class PullRequestDetails:
    """Pull request with its reviewer set."""
    pull_request_id: str
    pull_request_name: str
    author_id: str
    team_name: str
    status: PullRequestStatus
    assigned_reviewers: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status == PullRequestStatus.OPEN


@dataclass
class PullRequestShort:
    pull_request_id: str
    pull_request_name: str
    author_id: str
    team_name: str
    status: PullRequestStatus
