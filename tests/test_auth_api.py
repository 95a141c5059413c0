"""
Tests for the authentication endpoints: register, login, refresh, logout.
"""
import pytest

from app.config import settings
from app.services.sessions import INVALID_CREDENTIALS, REUSED_REFRESH_TOKEN
from tests.conftest import API, TEST_PASSWORD, fake, fake_email

AUTH = f"{API}/auth"


def register_payload(**overrides):
    payload = {"name": fake.name(), "email": fake_email(), "password": TEST_PASSWORD}
    payload.update(overrides)
    return payload


class TestRegister:
    def test_register_success(self, client):
        payload = register_payload(email="New.User@TaskFlow.io")

        response = client.post(f"{AUTH}/register", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "new.user@taskflow.io"
        assert "password_hash" not in data
        assert "password" not in data

    def test_register_duplicate_email(self, client, make_user):
        user = make_user()

        response = client.post(f"{AUTH}/register", json=register_payload(email=user.email))

        assert response.status_code == 409

    @pytest.mark.parametrize("password", ["short1!", "nouppercase1!", "NOLOWERCASE1!", "NoDigits!!", "NoSpecial123"])
    def test_register_weak_password(self, client, password):
        response = client.post(f"{AUTH}/register", json=register_payload(password=password))

        assert response.status_code == 422

    def test_register_invalid_email(self, client):
        response = client.post(f"{AUTH}/register", json=register_payload(email="not-an-email"))

        assert response.status_code == 422

    def test_register_missing_fields(self, client):
        response = client.post(f"{AUTH}/register", json={})

        assert response.status_code == 422

    def test_registered_user_can_log_in(self, client):
        payload = register_payload()
        client.post(f"{AUTH}/register", json=payload)

        response = client.post(f"{AUTH}/login", json={"email": payload["email"], "password": TEST_PASSWORD})

        assert response.status_code == 200


class TestLogin:
    def test_login_sets_refresh_cookie(self, client, make_user):
        user = make_user()

        response = client.post(f"{AUTH}/login", json={"email": user.email, "password": TEST_PASSWORD})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        assert data["user"]["id"] == user.id
        assert "refresh_token" not in data

        set_cookie = response.headers["set-cookie"]
        assert f"{settings.REFRESH_COOKIE_NAME}=" in set_cookie
        assert "HttpOnly" in set_cookie
        assert f"Path={settings.REFRESH_COOKIE_PATH}" in set_cookie
        assert "samesite=strict" in set_cookie.lower()

    def test_login_errors_are_uniform(self, client, make_user):
        user = make_user()

        wrong_password = client.post(f"{AUTH}/login", json={"email": user.email, "password": "Wrong123!"})
        unknown_email = client.post(f"{AUTH}/login", json={"email": fake_email(), "password": TEST_PASSWORD})

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {"detail": INVALID_CREDENTIALS}

    def test_login_missing_fields(self, client):
        response = client.post(f"{AUTH}/login", json={"email": fake_email()})

        assert response.status_code == 422


class TestMe:
    def test_me_returns_current_user(self, client, owner, owner_headers):
        response = client.get(f"{AUTH}/me", headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["email"] == owner.email

    def test_me_without_token(self, client):
        response = client.get(f"{AUTH}/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_me_with_invalid_token(self, client):
        response = client.get(f"{AUTH}/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json() == {"detail": "invalid access token"}


class TestRefresh:
    def test_refresh_without_token(self, client):
        response = client.post(f"{AUTH}/refresh")

        assert response.status_code == 401
        assert response.json() == {"detail": "refresh token not found"}

    def test_refresh_with_cookie_rotates_token(self, client, make_user):
        user = make_user()
        login = client.post(f"{AUTH}/login", json={"email": user.email, "password": TEST_PASSWORD})
        first_token = login.cookies[settings.REFRESH_COOKIE_NAME]

        response = client.post(f"{AUTH}/refresh")

        assert response.status_code == 200
        assert response.json()["user"]["id"] == user.id
        assert response.cookies[settings.REFRESH_COOKIE_NAME] != first_token

    def test_refresh_with_body(self, client, make_user):
        user = make_user()
        login = client.post(f"{AUTH}/login", json={"email": user.email, "password": TEST_PASSWORD})
        token = login.cookies[settings.REFRESH_COOKIE_NAME]
        client.cookies.clear()

        response = client.post(f"{AUTH}/refresh", json={"refresh_token": token})

        assert response.status_code == 200
        assert "access_token" in response.json()

    def test_refresh_with_unknown_token(self, client):
        response = client.post(f"{AUTH}/refresh", json={"refresh_token": "unknown"})

        assert response.status_code == 401
        assert response.json() == {"detail": "invalid refresh token"}

    def test_reused_token_terminates_family(self, client, make_user):
        """Replaying an already rotated token kills the rotated token as well."""
        user = make_user()
        login = client.post(f"{AUTH}/login", json={"email": user.email, "password": TEST_PASSWORD})
        t0 = login.cookies[settings.REFRESH_COOKIE_NAME]
        t1 = client.post(f"{AUTH}/refresh").cookies[settings.REFRESH_COOKIE_NAME]
        client.cookies.clear()

        replay = client.post(f"{AUTH}/refresh", json={"refresh_token": t0})
        after = client.post(f"{AUTH}/refresh", json={"refresh_token": t1})

        assert replay.status_code == 401
        assert replay.json() == {"detail": REUSED_REFRESH_TOKEN}
        assert after.status_code == 401
        assert after.json() == {"detail": REUSED_REFRESH_TOKEN}


class TestLogout:
    def test_logout_clears_cookie_and_revokes_session(self, client, make_user):
        user = make_user()
        login = client.post(f"{AUTH}/login", json={"email": user.email, "password": TEST_PASSWORD})
        token = login.cookies[settings.REFRESH_COOKIE_NAME]

        response = client.post(f"{AUTH}/logout")

        assert response.status_code == 200
        assert response.json() == {"message": "logged out"}
        assert f"{settings.REFRESH_COOKIE_NAME}=" in response.headers["set-cookie"]

        client.cookies.clear()
        refresh = client.post(f"{AUTH}/refresh", json={"refresh_token": token})
        assert refresh.status_code == 401

    def test_logout_without_token(self, client):
        response = client.post(f"{AUTH}/logout")

        assert response.status_code == 200

    def test_logout_all(self, client, make_user, login):
        user = make_user()
        first = client.post(f"{AUTH}/login", json={"email": user.email, "password": TEST_PASSWORD})
        first_token = first.cookies[settings.REFRESH_COOKIE_NAME]
        headers = login(user)
        client.cookies.clear()

        response = client.post(f"{AUTH}/logout-all", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "all sessions terminated"}
        refresh = client.post(f"{AUTH}/refresh", json={"refresh_token": first_token})
        assert refresh.status_code == 401

    def test_logout_all_requires_access_token(self, client):
        response = client.post(f"{AUTH}/logout-all")

        assert response.status_code == 401


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
