from fastapi.testclient import TestClient

from app.models.enums import OpportunityStatus


class TestBookmarks:
    def test_toggle_and_list(
        self, client: TestClient, volunteer, host_user, make_opportunity, auth_headers
    ):
        opportunity = make_opportunity(host_user, OpportunityStatus.ACTIVE)
        headers = auth_headers(volunteer)

        toggled = client.post(f"/bookmarks/{opportunity.slug}", headers=headers)
        assert toggled.status_code == 200
        assert toggled.json() == {
            "id_opportunity": opportunity.id_opportunity,
            "is_bookmarked": True,
        }

        state = client.get(f"/bookmarks/{opportunity.id_opportunity}", headers=headers)
        assert state.json()["is_bookmarked"] is True

        listed = client.get("/bookmarks/", headers=headers)
        assert [o["id_opportunity"] for o in listed.json()] == [opportunity.id_opportunity]

    def test_draft_is_not_found(
        self, client: TestClient, volunteer, host_user, make_opportunity, auth_headers
    ):
        draft = make_opportunity(host_user, OpportunityStatus.DRAFT)
        response = client.post(
            f"/bookmarks/{draft.id_opportunity}", headers=auth_headers(volunteer)
        )
        assert response.status_code == 404

    def test_requires_authentication(self, client: TestClient):
        assert client.get("/bookmarks/").status_code == 401
