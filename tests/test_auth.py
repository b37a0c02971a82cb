"""
Auth unit and integration tests.

Tests cover:
  - Password hashing (bcrypt)
  - User service: safe records, email validation, password change
  - JWT issuing / verification / expiry / token type
  - Refresh-token sessions: rotation, logout, pruning
  - Auth API: register, login, refresh, logout, me, change-password
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from bumasys.core.exceptions import AuthenticationError, ConflictError, ValidationError
from bumasys.services.auth_service import AuthService
from bumasys.utils.crypto import hash_password, verify_password

PASSWORD = "S3cret-pass"
TEST_JWT_SECRET = "testing-jwt-secret-0123456789abcdef"


@pytest.fixture()
def user(services):
    return services.users.create({"email": "grace@example.com", "password": PASSWORD,
                                  "first_name": "Grace"})


# ═══════════════════════════════════════════════════════════════
# Crypto
# ═══════════════════════════════════════════════════════════════

class TestCrypto:
    def test_hash_and_verify(self):
        hashed = hash_password("hunter2", rounds=4)
        assert hashed.startswith("$2b$")
        assert verify_password("hunter2", hashed)
        assert not verify_password("hunter3", hashed)

    def test_empty_or_malformed_inputs(self):
        assert not verify_password("", "$2b$04$abc")
        assert not verify_password("hunter2", None)
        assert not verify_password("hunter2", "not-a-bcrypt-hash")


# ═══════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════

class TestUserService:
    def test_hash_never_returned(self, services, user):
        assert "password_hash" not in user
        assert "password_hash" not in services.users.find_by_id(user["id"])
        assert all("password_hash" not in u for u in services.users.get_all())
        assert services.users.find_by_email("grace@example.com")["password_hash"]
        assert services.users.get_safe_by_id(user["id"])["email"] == "grace@example.com"
        assert services.users.get_safe_by_id("ghost") is None

    def test_password_required(self, services):
        with pytest.raises(ValidationError, match="password is required"):
            services.users.create({"email": "x@example.com"})

    def test_invalid_email(self, services):
        with pytest.raises(ValidationError, match="Invalid email"):
            services.users.create({"email": "not-an-email", "password": PASSWORD})

    def test_duplicate_email(self, services, user):
        with pytest.raises(ConflictError, match="Email in use"):
            services.users.create({"email": "grace@example.com", "password": PASSWORD})

    def test_change_password(self, services, user):
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            services.users.change_password(user["id"], "wrong", "new-pass-1")
        services.users.change_password(user["id"], PASSWORD, "new-pass-1")
        stored = services.users.find_by_email("grace@example.com")
        assert verify_password("new-pass-1", stored["password_hash"])

    def test_update_rehashes_password(self, services, user):
        services.users.update({"id": user["id"], "password": "rotated-1", "last_name": "Hopper"})
        stored = services.users.find_by_email("grace@example.com")
        assert verify_password("rotated-1", stored["password_hash"])
        assert stored["last_name"] == "Hopper"

    def test_delete_drops_sessions(self, services, store, user):
        services.auth.authenticate("grace@example.com", PASSWORD)
        assert store.get("sessions")
        assert services.users.delete(user["id"]) is True
        assert store.get("sessions") == []


# ═══════════════════════════════════════════════════════════════
# Tokens & sessions
# ═══════════════════════════════════════════════════════════════

class TestTokens:
    def test_login_returns_pair(self, services, user):
        result = services.auth.authenticate("grace@example.com", PASSWORD)
        assert result["token_type"] == "Bearer"
        assert result["expires_in"] == 3600
        assert result["user"]["id"] == user["id"]
        payload = jwt.decode(result["token"], TEST_JWT_SECRET, algorithms=["HS256"])
        assert payload["sub"] == user["id"]
        assert payload["type"] == "access"

    def test_bad_credentials(self, services, user):
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            services.auth.authenticate("grace@example.com", "wrong")
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            services.auth.authenticate("nobody@example.com", PASSWORD)

    def test_refresh_token_is_not_an_access_token(self, services, user):
        result = services.auth.authenticate("grace@example.com", PASSWORD)
        with pytest.raises(AuthenticationError):
            services.auth.verify_token(result["refresh_token"])

    def test_expired_access_token(self, store, services, user):
        short = AuthService(store, services.users, TEST_JWT_SECRET, access_expires=-1)
        with pytest.raises(AuthenticationError, match="Not authenticated"):
            short.current_user(short.sign_token(user["id"]))

    def test_wrong_secret(self, store, services, user):
        other = AuthService(store, services.users, "another-secret-0123456789abcdef")
        with pytest.raises(AuthenticationError):
            services.auth.verify_token(other.sign_token(user["id"]))

    def test_refresh_rotates_session(self, services, store, user):
        first = services.auth.authenticate("grace@example.com", PASSWORD)
        second = services.auth.refresh_access_token(first["refresh_token"])
        assert second["refresh_token"] != first["refresh_token"]
        with pytest.raises(AuthenticationError, match="Invalid refresh token"):
            services.auth.refresh_access_token(first["refresh_token"])
        assert [s["token"] for s in store.get("sessions")] == [second["refresh_token"]]

    def test_logout_drops_all_sessions_of_user(self, services, store, user):
        one = services.auth.authenticate("grace@example.com", PASSWORD)
        services.auth.authenticate("grace@example.com", PASSWORD)
        assert services.auth.logout(one["refresh_token"]) is True
        assert store.get("sessions") == []

    def test_prune_expired_sessions(self, services, store, user):
        services.auth.authenticate("grace@example.com", PASSWORD)
        old = (datetime.now(timezone.utc) - timedelta(days=30)).isoformat()
        store.get("sessions").append({"token": "stale", "user_id": user["id"], "created_at": old})
        store.get("sessions").append({"token": "undated", "user_id": user["id"]})
        assert services.auth.prune_expired_sessions() == 2
        assert len(store.get("sessions")) == 1


# ═══════════════════════════════════════════════════════════════
# Auth API
# ═══════════════════════════════════════════════════════════════

class TestAuthAPI:
    def test_register_and_me(self, client):
        res = client.post("/api/v1/auth/register", json={"email": "new@example.com",
                                                         "password": PASSWORD})
        assert res.status_code == 201
        token = res.get_json()["token"]
        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.get_json()["email"] == "new@example.com"
        assert "password_hash" not in me.get_json()

    def test_me_requires_token(self, client):
        res = client.get("/api/v1/auth/me")
        assert res.status_code == 401
        assert res.get_json()["code"] == "ERR_UNAUTHENTICATED"

    def test_garbage_token(self, client):
        res = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
        assert res.status_code == 401

    def test_login_missing_fields(self, client):
        res = client.post("/api/v1/auth/login", json={"email": "x@example.com"})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_login_wrong_password(self, client, auth_headers):
        res = client.post("/api/v1/auth/login", json={"email": "admin@example.com",
                                                      "password": "wrong"})
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid credentials"

    def test_refresh_and_logout(self, client, auth_headers):
        login = client.post("/api/v1/auth/login", json={"email": "admin@example.com",
                                                        "password": "S3cret-pass"}).get_json()
        refreshed = client.post("/api/v1/auth/refresh",
                                json={"refresh_token": login["refresh_token"]})
        assert refreshed.status_code == 200
        new_refresh = refreshed.get_json()["refresh_token"]
        out = client.post("/api/v1/auth/logout", json={"refresh_token": new_refresh})
        assert out.status_code == 200
        again = client.post("/api/v1/auth/refresh", json={"refresh_token": new_refresh})
        assert again.status_code == 401

    def test_change_password(self, client, auth_headers):
        res = client.post("/api/v1/auth/change-password", headers=auth_headers,
                          json={"old_password": "S3cret-pass", "new_password": "N3w-pass"})
        assert res.status_code == 200
        login = client.post("/api/v1/auth/login", json={"email": "admin@example.com",
                                                        "password": "N3w-pass"})
        assert login.status_code == 200
