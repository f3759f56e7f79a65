"""HTTP tests for opportunity endpoints, status changes in particular."""

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.models.enums import OpportunityStatus
from app.models.opportunity import Opportunity, OpportunityStatusHistory

OS = OpportunityStatus
OPPORTUNITY_PAYLOAD = {
    "title": "Bamboo Workshop Assistant",
    "description": "Help run weekend bamboo weaving classes.",
    "short_description": "Bamboo crafts",
    "opportunity_type": "CREATIVE",
    "city": "Yilan",
    "work_hours_per_week": 25,
}


def history_count(session: Session, opportunity_id: int) -> int:
    return len(
        session.exec(
            select(OpportunityStatusHistory).where(
                OpportunityStatusHistory.id_opportunity == opportunity_id
            )
        ).all()
    )


class TestCreateAndRead:
    def test_host_creates_draft(self, client: TestClient, host_user, auth_headers):
        response = client.post(
            "/opportunities/", json=OPPORTUNITY_PAYLOAD, headers=auth_headers(host_user)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "DRAFT"
        assert data["slug"] == "bamboo-workshop-assistant"
        assert data["host"]["id_host"] == host_user.host_profile.id_host
        assert [h["status"] for h in data["status_history"]] == ["DRAFT"]

    def test_volunteer_cannot_create(self, client: TestClient, volunteer, auth_headers):
        response = client.post(
            "/opportunities/", json=OPPORTUNITY_PAYLOAD, headers=auth_headers(volunteer)
        )
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_draft_is_hidden_from_anonymous(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.DRAFT)

        assert client.get(f"/opportunities/{opportunity.id_opportunity}").status_code == 404
        owner_view = client.get(
            f"/opportunities/{opportunity.slug}", headers=auth_headers(host_user)
        )
        assert owner_view.status_code == 200

    def test_search_lists_active_only(
        self, client: TestClient, host_user, make_opportunity
    ):
        make_opportunity(host_user, OS.ACTIVE, title="Beach cleanup", city="Kenting")
        make_opportunity(host_user, OS.PENDING, title="Beach bar", city="Kenting")

        response = client.get("/opportunities/", params={"city": "Kenting"})
        assert response.status_code == 200
        assert [o["title"] for o in response.json()] == ["Beach cleanup"]


class TestChangeStatus:
    def test_requires_authentication(self, client: TestClient, host_user, make_opportunity):
        opportunity = make_opportunity(host_user, OS.DRAFT)
        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}/status",
            json={"status": "PENDING"},
        )
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_unknown_opportunity(self, client: TestClient, host_user, auth_headers):
        response = client.patch(
            "/opportunities/9999/status",
            json={"status": "PENDING"},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 404

    def test_host_cannot_admin_pause(
        self,
        client: TestClient,
        session: Session,
        host_user,
        make_opportunity,
        auth_headers,
    ):
        opportunity = make_opportunity(host_user, OS.ACTIVE)

        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}/status",
            json={"status": "ADMIN_PAUSED", "reason": "self-report"},
            headers=auth_headers(host_user),
        )

        assert response.status_code == 403
        session.refresh(opportunity)
        assert opportunity.status == OS.ACTIVE
        assert history_count(session, opportunity.id_opportunity) == 1

    def test_pause_without_reason(
        self,
        client: TestClient,
        session: Session,
        host_user,
        make_opportunity,
        auth_headers,
    ):
        opportunity = make_opportunity(host_user, OS.ACTIVE)

        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}/status",
            json={"status": "PAUSED"},
            headers=auth_headers(host_user),
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["field"] == "reason"
        assert body["currentStatus"] == "ACTIVE"
        assert body["requestedStatus"] == "PAUSED"
        assert history_count(session, opportunity.id_opportunity) == 1

    def test_illegal_transition(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.DRAFT)
        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}/status",
            json={"status": "ARCHIVED"},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 400

    def test_unknown_status_value(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.DRAFT)
        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}/status",
            json={"status": "LIVE"},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 400
        assert response.json()["requestedStatus"] == "LIVE"

    def test_missing_status_value(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.DRAFT)
        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}/status",
            json={},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 400
        assert response.json()["requestedStatus"] == "(missing)"

    def test_resubmit_rejected(
        self,
        client: TestClient,
        session: Session,
        host_user,
        make_opportunity,
        auth_headers,
    ):
        opportunity = make_opportunity(host_user, OS.REJECTED)

        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}/status",
            json={"status": "PENDING"},
            headers=auth_headers(host_user),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["opportunity"]["status"] == "PENDING"
        assert body["opportunity"]["status_history"][-1]["changed_by"] == host_user.id_user
        assert history_count(session, opportunity.id_opportunity) == 2

        # Reloading returns the persisted status
        reloaded = client.get(
            f"/opportunities/{opportunity.id_opportunity}",
            headers=auth_headers(host_user),
        )
        assert reloaded.json()["status"] == "PENDING"

    def test_pause_with_reason_sets_status_note(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.ACTIVE)
        response = client.patch(
            f"/opportunities/{opportunity.slug}/status",
            json={"status": "PAUSED", "reason": "Harvest finished"},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 200
        assert response.json()["opportunity"]["status_note"] == "Harvest finished"


class TestStatusActions:
    def test_owner_actions_for_active(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.ACTIVE)
        response = client.get(
            f"/opportunities/{opportunity.id_opportunity}/status/actions",
            headers=auth_headers(host_user),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["editable"] == "limited"
        assert data["next_allowed"] == ["PAUSED", "ADMIN_PAUSED", "EXPIRED", "FILLED", "ARCHIVED"]
        assert [a["target_status"] for a in data["actions"]] == [None, "PAUSED", "ARCHIVED"]

    def test_history_requires_management(
        self, client: TestClient, host_user, volunteer, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.ACTIVE)
        response = client.get(
            f"/opportunities/{opportunity.id_opportunity}/status/history",
            headers=auth_headers(volunteer),
        )
        assert response.status_code == 403


class TestEditAndDelete:
    def test_limited_edit_rejects_title(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.ACTIVE)
        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}",
            json={"title": "New name"},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 422
        assert response.json()["field"] == "title"

    def test_null_title_is_rejected(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.DRAFT)
        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}",
            json={"title": None},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 422
        assert response.json()["field"] == "title"

    def test_null_max_applications_removes_the_cap(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OS.DRAFT, max_applications=5)
        response = client.patch(
            f"/opportunities/{opportunity.id_opportunity}",
            json={"max_applications": None},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 200
        assert response.json()["max_applications"] is None

    def test_delete_draft(
        self,
        client: TestClient,
        session: Session,
        host_user,
        make_opportunity,
        auth_headers,
    ):
        opportunity = make_opportunity(host_user, OS.DRAFT)
        response = client.delete(
            f"/opportunities/{opportunity.id_opportunity}",
            headers=auth_headers(host_user),
        )
        assert response.status_code == 200
        assert response.json()["opportunity"]["status"] == "DELETED"
        assert session.get(Opportunity, opportunity.id_opportunity) is not None
