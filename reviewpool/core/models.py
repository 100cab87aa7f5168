"""
Review Pool - Database Models
=============================

SQLAlchemy models for teams, users, pull requests and reviewer assignments.
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from reviewpool.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always comes back in UTC.

    SQLite keeps no offset, so values are stored as UTC wall time and
    tagged with UTC on load.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        return as_utc(value)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        return as_utc(value)


# ==========================================================================
# Enums
# ==========================================================================

class PullRequestStatus(str, enum.Enum):
    """Pull request lifecycle. OPEN -> MERGED only."""
    OPEN = "OPEN"
    MERGED = "MERGED"


# ==========================================================================
# Models
# ==========================================================================

class Team(Base):
    """A named set of users. Membership is derived from users.team_name."""

    __tablename__ = "teams"

    team_name: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )

    def __repr__(self) -> str:
        return f"<Team {self.team_name}>"


class User(Base):
    """Team member and potential reviewer."""

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_team_name_is_active", "team_name", "is_active"),
    )

    user_id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    team_name: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("teams.team_name", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=true(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.user_id} team={self.team_name}>"


class PullRequest(Base):
    """
    Pull request.

    team_name is the author's team at creation time and never changes.
    merged_at is set iff status is MERGED.
    """

    __tablename__ = "pull_requests"

    pull_request_id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    pull_request_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    team_name: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("teams.team_name", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[PullRequestStatus] = mapped_column(
        Enum(PullRequestStatus, native_enum=False, length=10),
        default=PullRequestStatus.OPEN,
        server_default=PullRequestStatus.OPEN.value,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    merged_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<PullRequest {self.pull_request_id} {self.status.value}>"


class PullRequestReviewer(Base):
    """Reviewer assignment. Unique per (pull request, user)."""

    __tablename__ = "pr_reviewers"
    __table_args__ = (
        UniqueConstraint("pull_request_id", "user_id", name="uq_pr_reviewers_pr_user"),
    )

    id: Mapped[int] = mapped_column(
        "pr_reviewers_id",
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    pull_request_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("pull_requests.pull_request_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<PullRequestReviewer {self.pull_request_id} -> {self.user_id}>"
