"""
HTTP API tests.

Status codes, envelopes and error bodies for every route.
"""

from httpx import AsyncClient

from reviewpool.api.deps import get_reviewer_selector
from reviewpool.api.main import app

from tests.conftest import StaleSelector


async def add_team(client: AsyncClient, team_name: str, *user_ids: str):
    return await client.post(
        "/team/add",
        json={
            "team_name": team_name,
            "members": [
                {"user_id": uid, "username": f"name-{uid}", "is_active": True}
                for uid in user_ids
            ],
        },
    )


async def create_pr(client: AsyncClient, pull_request_id: str, author_id: str):
    return await client.post(
        "/pullRequest/create",
        json={
            "pull_request_id": pull_request_id,
            "pull_request_name": f"PR {pull_request_id}",
            "author_id": author_id,
        },
    )


def assert_error(response, status_code: int, code: str, message: str | None = None):
    assert response.status_code == status_code
    body = response.json()
    assert body["error"]["code"] == code
    if message is not None:
        assert body["error"]["message"] == message


# ==========================================================================
# Health
# ==========================================================================

class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data


# ==========================================================================
# Teams
# ==========================================================================

class TestTeamRoutes:
    """Tests for /team endpoints."""

    async def test_add_team(self, client: AsyncClient):
        response = await add_team(client, "backend", "u2", "u1")

        assert response.status_code == 201
        team = response.json()["team"]
        assert team["team_name"] == "backend"
        assert [m["user_id"] for m in team["members"]] == ["u1", "u2"]
        assert team["members"][0] == {"user_id": "u1", "username": "name-u1", "is_active": True}

    async def test_add_duplicate_team(self, client: AsyncClient):
        await add_team(client, "backend", "u1")

        response = await add_team(client, "backend", "u2")

        assert_error(response, 400, "TEAM_EXISTS", "team_name already exists")

    async def test_add_team_invalid_body(self, client: AsyncClient):
        response = await client.post("/team/add", json={"members": []})

        assert_error(response, 400, "", "invalid request body")

    async def test_get_team(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2")

        response = await client.get("/team/get", params={"team_name": "backend"})

        assert response.status_code == 200
        data = response.json()
        assert data["team_name"] == "backend"
        assert len(data["members"]) == 2

    async def test_get_unknown_team(self, client: AsyncClient):
        response = await client.get("/team/get", params={"team_name": "nope"})

        assert_error(response, 404, "NOT_FOUND", "team not found")

    async def test_get_team_without_param(self, client: AsyncClient):
        response = await client.get("/team/get")

        assert_error(response, 400, "", "team_name parameter is required")

    async def test_deactivate_team(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2")

        response = await client.post("/team/deactivate", json={"team_name": "backend"})

        assert response.status_code == 200
        assert response.json() == {"message": "team deactivated successfully"}
        members = (await client.get("/team/get", params={"team_name": "backend"})).json()["members"]
        assert all(m["is_active"] is False for m in members)

    async def test_deactivate_unknown_team(self, client: AsyncClient):
        response = await client.post("/team/deactivate", json={"team_name": "nope"})

        assert_error(response, 404, "NOT_FOUND")


# ==========================================================================
# Users
# ==========================================================================

class TestUserRoutes:
    """Tests for /users endpoints."""

    async def test_set_is_active(self, client: AsyncClient):
        await add_team(client, "backend", "u1")

        response = await client.post(
            "/users/setIsActive", json={"user_id": "u1", "is_active": False}
        )

        assert response.status_code == 200
        assert response.json()["user"] == {
            "user_id": "u1",
            "username": "name-u1",
            "team_name": "backend",
            "is_active": False,
        }

    async def test_set_is_active_unknown(self, client: AsyncClient):
        response = await client.post(
            "/users/setIsActive", json={"user_id": "ghost", "is_active": True}
        )

        assert_error(response, 404, "NOT_FOUND", "user not found")

    async def test_get_review(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2")
        await create_pr(client, "p1", "u1")

        response = await client.get("/users/getReview", params={"user_id": "u2"})

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "u2"
        assert data["pull_requests"] == [
            {
                "pull_request_id": "p1",
                "pull_request_name": "PR p1",
                "author_id": "u1",
                "team_name": "backend",
                "status": "OPEN",
            }
        ]

    async def test_get_review_without_param(self, client: AsyncClient):
        response = await client.get("/users/getReview")

        assert_error(response, 400, "", "user_id parameter is required")


# ==========================================================================
# Pull Requests
# ==========================================================================

class TestPullRequestRoutes:
    """Tests for /pullRequest endpoints."""

    async def test_create(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2", "u3")

        response = await create_pr(client, "p1", "u1")

        assert response.status_code == 201
        pr = response.json()["pr"]
        assert pr["pull_request_id"] == "p1"
        assert pr["status"] == "OPEN"
        assert pr["team_name"] == "backend"
        assert sorted(pr["assigned_reviewers"]) == ["u2", "u3"]
        assert pr["createdAt"].endswith("+00:00")
        assert pr["mergedAt"] is None

    async def test_create_duplicate(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2")
        await create_pr(client, "p1", "u1")

        response = await create_pr(client, "p1", "u2")

        assert_error(response, 409, "PR_EXISTS", "PR id already exists")

    async def test_create_unknown_author(self, client: AsyncClient):
        response = await create_pr(client, "p1", "ghost")

        assert_error(response, 404, "NOT_FOUND", "author not found")

    async def test_merge_is_idempotent(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2")
        await create_pr(client, "p1", "u1")

        first = await client.post("/pullRequest/merge", json={"pull_request_id": "p1"})
        second = await client.post("/pullRequest/merge", json={"pull_request_id": "p1"})

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["pr"]["status"] == "MERGED"
        assert first.json()["pr"]["mergedAt"].endswith("+00:00")
        assert second.json()["pr"]["mergedAt"] == first.json()["pr"]["mergedAt"]

    async def test_merge_unknown(self, client: AsyncClient):
        response = await client.post("/pullRequest/merge", json={"pull_request_id": "nope"})

        assert_error(response, 404, "NOT_FOUND", "pull request not found")

    async def test_reassign(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2", "u3", "u4")
        created = (await create_pr(client, "p1", "u1")).json()["pr"]
        old, kept = created["assigned_reviewers"]

        response = await client.post(
            "/pullRequest/reassign", json={"pull_request_id": "p1", "old_user_id": old}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["replaced_by"] not in {"u1", old, kept}
        assert sorted(data["pr"]["assigned_reviewers"]) == sorted([kept, data["replaced_by"]])

    async def test_reassign_no_candidate(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2", "u3")
        await create_pr(client, "p1", "u1")

        response = await client.post(
            "/pullRequest/reassign", json={"pull_request_id": "p1", "old_user_id": "u2"}
        )

        assert_error(response, 409, "NO_CANDIDATE")

    async def test_reassign_merged(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2", "u3", "u4")
        created = (await create_pr(client, "p1", "u1")).json()["pr"]
        await client.post("/pullRequest/merge", json={"pull_request_id": "p1"})

        response = await client.post(
            "/pullRequest/reassign",
            json={"pull_request_id": "p1", "old_user_id": created["assigned_reviewers"][0]},
        )

        assert_error(response, 409, "PR_MERGED", "cannot reassign on merged PR")

    async def test_reassign_not_assigned(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2", "u3", "u4")
        created = (await create_pr(client, "p1", "u1")).json()["pr"]
        outsider = ({"u2", "u3", "u4"} - set(created["assigned_reviewers"])).pop()

        response = await client.post(
            "/pullRequest/reassign", json={"pull_request_id": "p1", "old_user_id": outsider}
        )

        assert_error(response, 409, "NOT_ASSIGNED")

    async def test_reassign_unknown(self, client: AsyncClient):
        response = await client.post(
            "/pullRequest/reassign", json={"pull_request_id": "nope", "old_user_id": "u2"}
        )

        assert_error(response, 404, "NOT_FOUND")

    async def test_reassign_invalid_body(self, client: AsyncClient):
        response = await client.post("/pullRequest/reassign", json={"pull_request_id": "p1"})

        assert_error(response, 400, "", "invalid request body")

    async def test_create_with_inactive_reviewer(self, client: AsyncClient):
        await client.post(
            "/team/add",
            json={
                "team_name": "backend",
                "members": [
                    {"user_id": "u1", "username": "name-u1", "is_active": True},
                    {"user_id": "u2", "username": "name-u2", "is_active": False},
                ],
            },
        )
        app.dependency_overrides[get_reviewer_selector] = lambda: StaleSelector("u2")

        response = await create_pr(client, "p1", "u1")

        assert_error(response, 400, "", "reviewer u2 is not active")

    async def test_reassign_replacement_taken(self, client: AsyncClient):
        await add_team(client, "backend", "u1", "u2", "u3")
        await create_pr(client, "p1", "u1")
        app.dependency_overrides[get_reviewer_selector] = lambda: StaleSelector("u3")

        response = await client.post(
            "/pullRequest/reassign", json={"pull_request_id": "p1", "old_user_id": "u2"}
        )

        assert_error(response, 409, "ALREADY_ASSIGNED")
