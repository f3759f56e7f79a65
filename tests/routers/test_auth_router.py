from unittest.mock import patch

import jwt
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.core.security import create_refresh_token
from app.services import user as user_service

REGISTER_PAYLOAD = {
    "username": "newcomer",
    "email": "newcomer@example.com",
    "name": "New Comer",
    "password": "Sup3rSecret!",
}


def decode(token: str) -> dict:
    settings = get_settings()
    return jwt.decode(
        token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM]
    )


class TestRegister:
    def test_register_creates_user_role(self, client: TestClient):
        response = client.post("/auth/register", json=REGISTER_PAYLOAD)

        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "USER"
        assert "hashed_password" not in data

    def test_duplicate_username(self, client: TestClient, volunteer):
        response = client.post(
            "/auth/register",
            json={**REGISTER_PAYLOAD, "username": volunteer.username},
        )
        assert response.status_code == 409

    def test_short_password(self, client: TestClient):
        response = client.post(
            "/auth/register", json={**REGISTER_PAYLOAD, "password": "short"}
        )
        assert response.status_code == 422
        assert response.json()["field"] == "password"


class TestLogin:
    def test_login_returns_token_pair(self, client: TestClient, host_user, password):
        response = client.post(
            "/auth/token",
            data={"username": host_user.username, "password": password},
        )

        assert response.status_code == 200
        data = response.json()
        access = decode(data["access_token"])
        assert access["sub"] == host_user.username
        assert access["role"] == "HOST"
        assert access["type"] == "access"
        assert decode(data["refresh_token"])["type"] == "refresh"

    def test_wrong_password(self, client: TestClient, volunteer):
        response = client.post(
            "/auth/token",
            data={"username": volunteer.username, "password": "wrong-password"},
        )
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_inactive_user_cannot_login(self, client: TestClient, make_user, password):
        user = make_user("sleeper", is_active=False)
        response = client.post(
            "/auth/token", data={"username": user.username, "password": password}
        )
        assert response.status_code == 401


class TestRefresh:
    def test_refresh_issues_access_token(self, client: TestClient, volunteer):
        refresh = create_refresh_token({"sub": volunteer.username})
        response = client.post("/auth/refresh", json={"refresh_token": refresh})

        assert response.status_code == 200
        assert decode(response.json()["access_token"])["sub"] == volunteer.username
        assert response.json()["refresh_token"] == refresh

    def test_access_token_is_not_a_refresh_token(
        self, client: TestClient, volunteer, auth_headers
    ):
        access = auth_headers(volunteer)["Authorization"].removeprefix("Bearer ")
        response = client.post("/auth/refresh", json={"refresh_token": access})
        assert response.status_code == 401

    def test_inactive_user_cannot_refresh(self, client: TestClient, make_user):
        user = make_user("dormant", is_active=False)
        refresh = create_refresh_token({"sub": user.username})
        response = client.post("/auth/refresh", json={"refresh_token": refresh})
        assert response.status_code == 401

    def test_garbage_token(self, client: TestClient):
        response = client.post("/auth/refresh", json={"refresh_token": "not-a-jwt"})
        assert response.status_code == 401


class TestPasswordReset:
    def test_request_answers_the_same_for_unknown_email(
        self, client: TestClient, volunteer, email_sender
    ):
        known = client.post(
            "/auth/password-reset/request", json={"email": volunteer.email}
        )
        unknown = client.post(
            "/auth/password-reset/request", json={"email": "ghost@example.com"}
        )

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        email_sender.assert_awaited_once()

    def test_validate_then_confirm(self, client: TestClient, volunteer):
        token = "k" * 64
        with patch.object(user_service, "generate_reset_token", return_value=token):
            client.post("/auth/password-reset/request", json={"email": volunteer.email})

        validated = client.get("/auth/password-reset/validate", params={"token": token})
        assert validated.status_code == 200

        confirmed = client.post(
            "/auth/password-reset/confirm",
            json={"token": token, "new_password": "Mountain-Tea-88"},
        )
        assert confirmed.status_code == 200

        login = client.post(
            "/auth/token",
            data={"username": volunteer.username, "password": "Mountain-Tea-88"},
        )
        assert login.status_code == 200

    def test_unknown_token_is_unauthorized(self, client: TestClient):
        response = client.post(
            "/auth/password-reset/confirm",
            json={"token": "z" * 64, "new_password": "Mountain-Tea-88"},
        )
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_malformed_token(self, client: TestClient):
        response = client.get("/auth/password-reset/validate", params={"token": "short"})
        assert response.status_code == 422
