"""
Review Pool - Pydantic Schemas
==============================

Request and response schemas for API validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from reviewpool.core.models import PullRequestStatus


# ==========================================================================
# Base Schemas
# ==========================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ==========================================================================
# Team Schemas
# ==========================================================================

class TeamMemberSchema(BaseSchema):
    """Team member in requests and responses."""

    user_id: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=255)
    is_active: bool = True


class TeamCreate(BaseSchema):
    """Schema for POST /team/add."""

    team_name: str = Field(min_length=1, max_length=255)
    members: list[TeamMemberSchema]


class TeamResponse(BaseSchema):
    team_name: str
    members: list[TeamMemberSchema]


class TeamEnvelope(BaseSchema):
    team: TeamResponse


class TeamDeactivateRequest(BaseSchema):
    team_name: str = Field(min_length=1, max_length=255)


# ==========================================================================
# User Schemas
# ==========================================================================

class SetIsActiveRequest(BaseSchema):
    user_id: str = Field(min_length=1, max_length=255)
    is_active: bool


class UserResponse(BaseSchema):
    user_id: str
    username: str
    team_name: str
    is_active: bool


class UserEnvelope(BaseSchema):
    user: UserResponse


# ==========================================================================
# Pull Request Schemas
# ==========================================================================

class PullRequestCreate(BaseSchema):
    """Schema for POST /pullRequest/create."""

    pull_request_id: str = Field(min_length=1, max_length=255)
    pull_request_name: str = Field(min_length=1, max_length=255)
    author_id: str = Field(min_length=1, max_length=255)


class PullRequestMerge(BaseSchema):
    pull_request_id: str = Field(min_length=1, max_length=255)


class PullRequestReassign(BaseSchema):
    pull_request_id: str = Field(min_length=1, max_length=255)
    old_user_id: str = Field(min_length=1, max_length=255)


class PullRequestResponse(BaseSchema):
    """Full pull request. Timestamps are RFC 3339 strings."""

    pull_request_id: str
    pull_request_name: str
    author_id: str
    team_name: str
    status: PullRequestStatus
    assigned_reviewers: list[str]
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    merged_at: Optional[datetime] = Field(default=None, serialization_alias="mergedAt")

    @field_serializer("created_at", "merged_at")
    def _rfc3339(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return value.isoformat()


class PullRequestShortResponse(BaseSchema):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    team_name: str
    status: PullRequestStatus


class PullRequestEnvelope(BaseSchema):
    pr: PullRequestResponse


class ReassignResponse(BaseSchema):
    pr: PullRequestResponse
    replaced_by: str


class UserReviewsResponse(BaseSchema):
    user_id: str
    pull_requests: list[PullRequestShortResponse]


# ==========================================================================
# Common Schemas
# ==========================================================================

class MessageResponse(BaseSchema):
    """Simple message response."""

    message: str


class ErrorDetail(BaseSchema):
    code: str
    message: str


class ErrorResponse(BaseSchema):
    """Error response schema."""

    error: ErrorDetail


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str
    version: str
    environment: str
    database: str
