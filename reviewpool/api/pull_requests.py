"""
Review Pool - Pull Request API
==============================

Create, merge and reassign endpoints.
"""

from fastapi import APIRouter, status

from reviewpool.api.deps import PullRequests
from reviewpool.core.schemas import (
    PullRequestCreate,
    PullRequestEnvelope,
    PullRequestMerge,
    PullRequestReassign,
    PullRequestResponse,
    ReassignResponse,
)

router = APIRouter(prefix="/pullRequest", tags=["Pull Requests"])


@router.post(
    "/create",
    response_model=PullRequestEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create pull request",
    responses={
        201: {"description": "Pull request created with reviewers"},
        404: {"description": "Author not found"},
        409: {"description": "Pull request id already exists"},
    },
)
async def create_pull_request(
    data: PullRequestCreate,
    pull_requests: PullRequests,
) -> PullRequestEnvelope:
    """
    Create a pull request and assign up to two reviewers from the author's team.
    """
    created = await pull_requests.create_pull_request(
        data.pull_request_id,
        data.pull_request_name,
        data.author_id,
    )
    return PullRequestEnvelope(pr=PullRequestResponse.model_validate(created))


@router.post(
    "/merge",
    response_model=PullRequestEnvelope,
    summary="Merge pull request",
    responses={
        200: {"description": "Pull request merged (idempotent)"},
        404: {"description": "Pull request not found"},
    },
)
async def merge_pull_request(
    data: PullRequestMerge,
    pull_requests: PullRequests,
) -> PullRequestEnvelope:
    merged = await pull_requests.merge_pull_request(data.pull_request_id)
    return PullRequestEnvelope(pr=PullRequestResponse.model_validate(merged))


@router.post(
    "/reassign",
    response_model=ReassignResponse,
    summary="Reassign reviewer",
    responses={
        200: {"description": "Reviewer replaced"},
        404: {"description": "Pull request or user not found"},
        409: {"description": "Merged, not assigned, or no candidate"},
    },
)
async def reassign_reviewer(
    data: PullRequestReassign,
    pull_requests: PullRequests,
) -> ReassignResponse:
    """
    Replace one reviewer with a random active member of the PR's team.
    """
    updated, replaced_by = await pull_requests.reassign_reviewer(
        data.pull_request_id,
        data.old_user_id,
    )
    return ReassignResponse(
        pr=PullRequestResponse.model_validate(updated),
        replaced_by=replaced_by,
    )
