"""
Review Pool - Engine Errors
===========================

Typed failures raised by the reviewer-assignment engine.
Each error carries a stable ``code`` the HTTP layer maps to a status.
"""


class ReviewPoolError(Exception):
    """Base exception for all engine errors."""

    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ==========================================================================
# Not Found
# ==========================================================================

class NotFoundError(ReviewPoolError):
    """Raised when a team, user or pull request does not exist."""

    code = "NOT_FOUND"


class TeamNotFoundError(NotFoundError):
    def __init__(self, team_name: str) -> None:
        super().__init__("team not found", details={"team_name": team_name})


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__("user not found", details={"user_id": user_id})


class AuthorNotFoundError(NotFoundError):
    def __init__(self, author_id: str) -> None:
        super().__init__("author not found", details={"author_id": author_id})


class PullRequestNotFoundError(NotFoundError):
    def __init__(self, pull_request_id: str) -> None:
        super().__init__(
            "pull request not found",
            details={"pull_request_id": pull_request_id},
        )


# ==========================================================================
# Already Exists
# ==========================================================================

class AlreadyExistsError(ReviewPoolError):
    """Raised on a duplicate team name or pull request id."""


class TeamExistsError(AlreadyExistsError):
    code = "TEAM_EXISTS"

    def __init__(self, team_name: str) -> None:
        super().__init__("team_name already exists", details={"team_name": team_name})


class PullRequestExistsError(AlreadyExistsError):
    code = "PR_EXISTS"

    def __init__(self, pull_request_id: str) -> None:
        super().__init__(
            "PR id already exists",
            details={"pull_request_id": pull_request_id},
        )


# ==========================================================================
# Reviewer Assignment
# ==========================================================================

class PullRequestMergedError(ReviewPoolError):
    """Raised when reviewers of a merged pull request would be mutated."""

    code = "PR_MERGED"

    def __init__(self, pull_request_id: str) -> None:
        super().__init__(
            "cannot reassign on merged PR",
            details={"pull_request_id": pull_request_id},
        )


class ReviewerNotAssignedError(ReviewPoolError):
    code = "NOT_ASSIGNED"

    def __init__(self, pull_request_id: str, user_id: str) -> None:
        super().__init__(
            "reviewer is not assigned to this PR",
            details={"pull_request_id": pull_request_id, "user_id": user_id},
        )


class ReviewerAlreadyAssignedError(ReviewPoolError):
    """Raised when the chosen replacement was assigned by a concurrent request."""

    code = "ALREADY_ASSIGNED"

    def __init__(self, pull_request_id: str, user_id: str) -> None:
        super().__init__(
            "reviewer is already assigned to this PR",
            details={"pull_request_id": pull_request_id, "user_id": user_id},
        )


class NoCandidateError(ReviewPoolError):
    code = "NO_CANDIDATE"

    def __init__(self, message: str = "no active replacement candidate in team") -> None:
        super().__init__(message)


class InactiveReviewerError(ReviewPoolError):
    """Raised when a selected reviewer turned out inactive before commit."""

    code = "INACTIVE_REVIEWER"

    def __init__(self, user_id: str) -> None:
        super().__init__(f"reviewer {user_id} is not active", details={"user_id": user_id})
