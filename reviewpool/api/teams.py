"""
Review Pool - Team API
======================

Team creation, lookup and deactivation endpoints.
"""

from fastapi import APIRouter, Query, status

from reviewpool.api.deps import Teams
from reviewpool.core.engine import TeamDetails, TeamMember
from reviewpool.core.schemas import (
    MessageResponse,
    TeamCreate,
    TeamDeactivateRequest,
    TeamEnvelope,
    TeamResponse,
)

router = APIRouter(prefix="/team", tags=["Teams"])


def to_team_response(team: TeamDetails) -> TeamResponse:
    return TeamResponse.model_validate(team)


@router.post(
    "/add",
    response_model=TeamEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create team",
    responses={
        201: {"description": "Team created with its members"},
        400: {"description": "Team already exists or invalid body"},
    },
)
async def add_team(data: TeamCreate, teams: Teams) -> TeamEnvelope:
    """
    Create a team and create or update its members.
    """
    members = [
        TeamMember(user_id=m.user_id, username=m.username, is_active=m.is_active)
        for m in data.members
    ]
    await teams.create_team(data.team_name, members)

    team = await teams.get_team(data.team_name)
    return TeamEnvelope(team=to_team_response(team))


@router.get(
    "/get",
    response_model=TeamResponse,
    summary="Get team",
    responses={
        200: {"description": "Team with members"},
        404: {"description": "Team not found"},
    },
)
async def get_team(
    teams: Teams,
    team_name: str = Query(..., min_length=1),
) -> TeamResponse:
    """
    Get a team and its current members.
    """
    team = await teams.get_team(team_name)
    return to_team_response(team)


@router.post(
    "/deactivate",
    response_model=MessageResponse,
    summary="Deactivate team",
    responses={
        200: {"description": "Team deactivated"},
        404: {"description": "Team not found"},
    },
)
async def deactivate_team(data: TeamDeactivateRequest, teams: Teams) -> MessageResponse:
    """
    Deactivate all members and pull them off open reviews.
    """
    await teams.deactivate_team(data.team_name)
    return MessageResponse(message="team deactivated successfully")
