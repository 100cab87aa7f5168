"""
Review Pool - User API
======================
"""

from fastapi import APIRouter, Query

from reviewpool.api.deps import Users
from reviewpool.core.schemas import (
    PullRequestShortResponse,
    SetIsActiveRequest,
    UserEnvelope,
    UserResponse,
    UserReviewsResponse,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/setIsActive",
    response_model=UserEnvelope,
    summary="Set user activity",
    responses={404: {"description": "User not found"}},
)
async def set_is_active(data: SetIsActiveRequest, users: Users) -> UserEnvelope:
    user = await users.set_is_active(data.user_id, data.is_active)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.get(
    "/getReview",
    response_model=UserReviewsResponse,
    summary="Open pull requests assigned to a user",
)
async def get_review(
    users: Users,
    user_id: str = Query(..., min_length=1),
) -> UserReviewsResponse:
    reviews = await users.get_user_reviews(user_id)
    return UserReviewsResponse(
        user_id=user_id,
        pull_requests=[PullRequestShortResponse.model_validate(pr) for pr in reviews],
    )
