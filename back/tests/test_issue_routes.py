"""API tests for the issue, vote, comment, admin and profile endpoints."""

# Standard library imports
from datetime import timedelta

# Third-party imports
import pytest

# Local application imports
from civiclink.schemas.issues import IssueCategory
from civiclink.schemas.users import Viewer
from civiclink.services.auth import create_access_token
from conftest import auth_headers

API = "/api/v1"

VALID_ISSUE = {
    "title": "Overflowing bin at the bus stop",
    "description": "The bin has not been emptied for a week and garbage is spilling on the road.",
    "category": IssueCategory.GARBAGE_DUMP.value,
    "location": "Paud Road, Kothrud",
    "image_ref": "data:image/jpeg;base64,/9j/4AAQ",
}


def create_issue(client, viewer: Viewer, **overrides) -> dict:
    response = client.post(f"{API}/issues", json={**VALID_ISSUE, **overrides}, headers=auth_headers(viewer))
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["storage"] == "memory"


class TestCreateIssue:
    def test_create_issue(self, client, citizen):
        issue = create_issue(client, citizen)

        assert issue["status"] == "Open"
        assert issue["priority"] == "High"
        assert issue["votes"] == {"up": 0, "down": 0, "net": 0}
        assert issue["reporter"]["id"] == citizen.id
        assert issue["location"] == {"address": "Paud Road, Kothrud", "lat": 18.52, "lng": 73.85}

    def test_requires_authentication(self, client):
        response = client.post(f"{API}/issues", json=VALID_ISSUE)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["ok"] is False
        assert response.json()["error"]["code"] == "unauthorized"

    def test_rejects_invalid_token(self, client):
        response = client.post(f"{API}/issues", json=VALID_ISSUE, headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_rejects_expired_token(self, client, citizen):
        token = create_access_token(citizen, expires_delta=timedelta(minutes=-5))

        response = client.post(f"{API}/issues", json=VALID_ISSUE, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert "expired" in response.json()["error"]["message"]

    def test_field_errors(self, client, citizen):
        response = client.post(
            f"{API}/issues",
            json={**VALID_ISSUE, "title": "Bin", "category": "Volcano"},
            headers=auth_headers(citizen),
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "bad_request"
        assert set(error["details"]) == {"title", "category"}
        assert error["details"]["category"] == "Please select a valid category."


class TestListAndGet:
    def test_list_filters_and_paginates(self, client, citizen, admin):
        pothole = create_issue(
            client, citizen, title="Pothole outside school", category=IssueCategory.POTHOLES.value
        )
        create_issue(client, citizen, title="Garbage near temple")
        create_issue(client, admin, title="Another pothole on the bridge", category=IssueCategory.POTHOLES.value)

        everything = client.get(f"{API}/issues").json()
        potholes = client.get(
            f"{API}/issues", params={"search": "POTHOLE", "reporter_id": citizen.id}
        ).json()
        first_page = client.get(f"{API}/issues", params={"limit": 2, "offset": 0}).json()
        second_page = client.get(f"{API}/issues", params={"limit": 2, "offset": 2}).json()

        assert everything["meta"]["total_items"] == 3
        assert [issue["id"] for issue in potholes["data"]] == [pothole["id"]]
        assert len(first_page["data"]) == 2
        assert len(second_page["data"]) == 1
        assert first_page["meta"]["has_more"] is True
        assert second_page["meta"] == {"limit": 2, "offset": 2, "total_items": 3, "has_more": False}

    def test_list_by_status(self, client, citizen):
        create_issue(client, citizen)

        assert client.get(f"{API}/issues", params={"status": "Open"}).json()["meta"]["total_items"] == 1
        assert client.get(f"{API}/issues", params={"status": "Resolved"}).json()["meta"]["total_items"] == 0

    def test_unknown_status_filter_is_bad_request(self, client):
        response = client.get(f"{API}/issues", params={"status": "Archived"})

        assert response.status_code == 400
        assert "status" in response.json()["error"]["details"]

    def test_get_issue_anonymously(self, client, citizen):
        issue = create_issue(client, citizen)

        response = client.get(f"{API}/issues/{issue['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["issue"]["id"] == issue["id"]
        assert response.json()["data"]["my_vote"] is None

    def test_get_unknown_issue(self, client):
        response = client.get(f"{API}/issues/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"


class TestVotes:
    def test_vote_toggle_and_replace(self, client, citizen, admin):
        issue = create_issue(client, admin)
        url = f"{API}/issues/{issue['id']}/votes"
        headers = auth_headers(citizen)

        up = client.post(url, json={"direction": "up"}, headers=headers).json()["data"]
        down = client.post(url, json={"direction": "down"}, headers=headers).json()["data"]
        withdrawn = client.post(url, json={"direction": "down"}, headers=headers).json()["data"]

        assert (up["my_vote"], up["issue"]["votes"]["up"]) == ("up", 1)
        assert (down["my_vote"], down["issue"]["votes"]) == ("down", {"up": 0, "down": 1, "net": -1})
        assert withdrawn["my_vote"] is None
        assert withdrawn["issue"]["net_score"] == 0

    def test_my_vote_on_detail(self, client, citizen):
        issue = create_issue(client, citizen)
        client.post(f"{API}/issues/{issue['id']}/votes", json={"direction": "up"}, headers=auth_headers(citizen))

        detail = client.get(f"{API}/issues/{issue['id']}", headers=auth_headers(citizen)).json()["data"]

        assert detail["my_vote"] == "up"

    def test_ten_downvotes_reject(self, client, citizen):
        issue = create_issue(client, citizen)
        for i in range(10):
            response = client.post(
                f"{API}/issues/{issue['id']}/votes",
                json={"direction": "down"},
                headers=auth_headers(Viewer(id=f"neighbour-{i}")),
            )

        rejected = response.json()["data"]["issue"]
        assert rejected["status"] == "Rejected"
        assert rejected["rejection_reason"] == "ThresholdAuto"

    def test_vote_requires_authentication(self, client, citizen):
        issue = create_issue(client, citizen)

        response = client.post(f"{API}/issues/{issue['id']}/votes", json={"direction": "up"})

        assert response.status_code == 401

    def test_unknown_direction(self, client, citizen):
        issue = create_issue(client, citizen)

        response = client.post(
            f"{API}/issues/{issue['id']}/votes", json={"direction": "sideways"}, headers=auth_headers(citizen)
        )

        assert response.status_code == 400
        assert "direction" in response.json()["error"]["details"]


class TestComments:
    def test_add_comment(self, client, citizen, admin):
        issue = create_issue(client, citizen)

        response = client.post(
            f"{API}/issues/{issue['id']}/comments",
            json={"text": "The ward office has been informed."},
            headers=auth_headers(admin),
        )

        assert response.status_code == 201
        comments = response.json()["data"]["comments"]
        assert [c["text"] for c in comments] == ["The ward office has been informed."]
        assert comments[0]["author"]["id"] == admin.id

    def test_blank_comment(self, client, citizen):
        issue = create_issue(client, citizen)

        response = client.post(
            f"{API}/issues/{issue['id']}/comments", json={"text": "   "}, headers=auth_headers(citizen)
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"text": "Comment cannot be empty."}


class TestAdmin:
    def test_admin_changes_status(self, client, citizen, admin):
        issue = create_issue(client, citizen)

        response = client.patch(
            f"{API}/admin/issues/{issue['id']}/status", json={"status": "In Progress"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "In Progress"

    def test_citizen_cannot_change_status(self, client, citizen):
        issue = create_issue(client, citizen)

        response = client.patch(
            f"{API}/admin/issues/{issue['id']}/status", json={"status": "Resolved"}, headers=auth_headers(citizen)
        )

        assert response.status_code == 403
        assert client.get(f"{API}/issues/{issue['id']}").json()["data"]["issue"]["status"] == "Open"

    def test_admin_rejection_survives_upvotes(self, client, citizen, admin):
        issue = create_issue(client, citizen)
        client.patch(
            f"{API}/admin/issues/{issue['id']}/status", json={"status": "Rejected"}, headers=auth_headers(admin)
        )

        response = client.post(
            f"{API}/issues/{issue['id']}/votes", json={"direction": "up"}, headers=auth_headers(citizen)
        )

        assert response.json()["data"]["issue"]["status"] == "Rejected"
        assert response.json()["data"]["issue"]["rejection_reason"] == "AdminOverride"

    def test_dashboard_stats(self, client, citizen, admin):
        first = create_issue(client, citizen)
        create_issue(client, citizen)
        client.patch(
            f"{API}/admin/issues/{first['id']}/status", json={"status": "Resolved"}, headers=auth_headers(admin)
        )

        stats = client.get(f"{API}/admin/stats", headers=auth_headers(admin)).json()["data"]

        assert stats == {"total": 2, "open": 1, "in_progress": 0, "resolved": 1, "rejected": 0}

    @pytest.mark.parametrize("path", ["/admin/stats", "/admin/gap-analysis", "/admin/users"])
    def test_admin_views_are_forbidden_to_citizens(self, client, citizen, path):
        assert client.get(f"{API}{path}", headers=auth_headers(citizen)).status_code == 403
        assert client.get(f"{API}{path}").status_code == 401

    def test_gap_analysis(self, client, citizen, admin, enrichment):
        for _ in range(5):
            create_issue(client, citizen)

        assessed = client.get(f"{API}/admin/gap-analysis", headers=auth_headers(admin)).json()["data"]
        enrichment.fail = True
        unassessed = client.get(f"{API}/admin/gap-analysis", headers=auth_headers(admin)).json()["data"]

        assert assessed == {"assessed": True, "gap_reports": []}
        assert unassessed["assessed"] is False

    def test_leaderboard(self, client, citizen, admin):
        create_issue(client, citizen)
        liked = create_issue(client, admin)
        client.post(f"{API}/issues/{liked['id']}/votes", json={"direction": "up"}, headers=auth_headers(citizen))

        board = client.get(f"{API}/admin/users", headers=auth_headers(admin)).json()["data"]

        assert [(row["user"]["id"], row["civic_score"]) for row in board] == [(admin.id, 11), (citizen.id, 10)]


class TestProfile:
    def test_profile(self, client, citizen):
        issue = create_issue(client, citizen)
        client.post(
            f"{API}/issues/{issue['id']}/votes", json={"direction": "up"}, headers=auth_headers(Viewer(id="fan"))
        )

        profile = client.get(f"{API}/users/{citizen.id}/profile").json()["data"]

        assert profile["stats"]["issues_authored"] == 1
        assert profile["stats"]["karma"] == 1
        assert profile["stats"]["civic_score"] == 11
        assert [i["id"] for i in profile["issues"]] == [issue["id"]]

    def test_unknown_user_has_empty_profile(self, client):
        profile = client.get(f"{API}/users/nobody/profile").json()["data"]

        assert profile["stats"]["civic_score"] == 0
        assert profile["issues"] == []


class TestCategorizeImage:
    def test_suggestion(self, client, citizen):
        response = client.post(
            f"{API}/issues/categorize-image",
            json={"image_ref": "data:image/png;base64,iVBORw0KGgo="},
            headers=auth_headers(citizen),
        )

        assert response.json()["data"]["assessed"] is True
        assert response.json()["data"]["category"] == IssueCategory.POTHOLES.value

    def test_non_data_uri(self, client, citizen):
        response = client.post(
            f"{API}/issues/categorize-image",
            json={"image_ref": "https://example.com/a.png"},
            headers=auth_headers(citizen),
        )

        assert response.status_code == 400
