from fastapi.testclient import TestClient

from app.models.enums import OpportunityStatus


class TestHosts:
    def test_create_host_promotes_user(
        self, client: TestClient, volunteer, auth_headers
    ):
        response = client.post(
            "/hosts/",
            json={"name": "Alishan Tea House", "city": "Chiayi", "host_type": "FARM"},
            headers=auth_headers(volunteer),
        )
        assert response.status_code == 201
        assert response.json()["status"] == "PENDING"

        me = client.get("/users/me", headers=auth_headers(volunteer))
        assert me.json()["role"] == "HOST"

    def test_second_host_conflicts(self, client: TestClient, host_user, auth_headers):
        response = client.post(
            "/hosts/",
            json={"name": "Another", "city": "Taipei"},
            headers=auth_headers(host_user),
        )
        assert response.status_code == 409

    def test_pending_host_hidden_from_public(
        self, client: TestClient, volunteer, auth_headers
    ):
        created = client.post(
            "/hosts/",
            json={"name": "Hidden Valley", "city": "Hualien"},
            headers=auth_headers(volunteer),
        )
        host_id = created.json()["id_host"]

        assert client.get(f"/hosts/{host_id}").status_code == 404
        assert (
            client.get(f"/hosts/{host_id}", headers=auth_headers(volunteer)).status_code
            == 200
        )

    def test_public_opportunity_listing(
        self, client: TestClient, host_user, make_opportunity, auth_headers
    ):
        make_opportunity(host_user, OpportunityStatus.ACTIVE, title="Open")
        make_opportunity(host_user, OpportunityStatus.DRAFT, title="Private")
        host_id = host_user.host_profile.id_host

        public = client.get(f"/hosts/{host_id}/opportunities")
        owner = client.get(
            f"/hosts/{host_id}/opportunities", headers=auth_headers(host_user)
        )

        assert [o["title"] for o in public.json()] == ["Open"]
        assert {o["title"] for o in owner.json()} == {"Open", "Private"}

    def test_applications_forbidden_to_other_host(
        self, client: TestClient, host_user, other_host_user, auth_headers
    ):
        response = client.get(
            f"/hosts/{host_user.host_profile.id_host}/applications",
            headers=auth_headers(other_host_user),
        )
        assert response.status_code == 403

    def test_stats_for_owner_only(
        self,
        client: TestClient,
        host_user,
        other_host_user,
        make_opportunity,
        auth_headers,
    ):
        make_opportunity(host_user, OpportunityStatus.ACTIVE)
        url = f"/hosts/{host_user.host_profile.id_host}/stats"

        own = client.get(url, headers=auth_headers(host_user))
        assert own.status_code == 200
        assert own.json()["published_opportunity_count"] == 1
        assert client.get(url, headers=auth_headers(other_host_user)).status_code == 403

    def test_reapply_after_rejection(
        self, client: TestClient, volunteer, admin_user, auth_headers
    ):
        created = client.post(
            "/hosts/",
            json={"name": "Lugang Lantern Studio", "city": "Changhua"},
            headers=auth_headers(volunteer),
        )
        client.put(
            f"/admin/hosts/{created.json()['id_host']}/status",
            json={"status": "REJECTED", "status_note": "Missing address"},
            headers=auth_headers(admin_user),
        )

        response = client.post("/hosts/me/reapply", headers=auth_headers(volunteer))

        assert response.status_code == 200
        assert response.json()["status"] == "PENDING"

    def test_reapply_while_active(self, client: TestClient, host_user, auth_headers):
        response = client.post("/hosts/me/reapply", headers=auth_headers(host_user))
        assert response.status_code == 422
        assert response.json()["field"] == "status"
