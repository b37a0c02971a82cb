"""
Auth Service: login, token issuance, refresh-token sessions.

Access token:  60 minutes (JWT_ACCESS_EXPIRES)
Refresh token: 7 days     (JWT_REFRESH_EXPIRES)
Algorithm:     HS256

Token payload:
{
    "sub": <user_id>,
    "type": "access" | "refresh",
    "iat": <issued_at>,
    "exp": <expires_at>,
    "jti": <unique_id>
}

Every issued refresh token is stored verbatim as a session
``{token, user_id, created_at}`` in the auth store. A refresh token is only
honoured while its session exists; refreshing rotates it.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from bumasys.core.exceptions import AuthenticationError
from bumasys.services.helpers.references import find_by_id
from bumasys.services.user_service import UserService, to_safe_user
from bumasys.store.base import SESSIONS, USERS, Store
from bumasys.utils.crypto import verify_password
from bumasys.utils.helpers import parse_timestamp, utc_now_iso

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# ─── Defaults ────────────────────────────────────────────────
DEFAULT_ACCESS_EXPIRES = 3600      # 60 minutes
DEFAULT_REFRESH_EXPIRES = 604800   # 7 days
ALGORITHM = "HS256"


def _created_at(session: dict) -> datetime:
    return parse_timestamp(session.get("created_at"), "created_at") or _EPOCH


class AuthService:
    def __init__(
        self,
        store: Store,
        users: UserService,
        secret: str,
        access_expires: int = DEFAULT_ACCESS_EXPIRES,
        refresh_expires: int = DEFAULT_REFRESH_EXPIRES,
    ):
        self.store = store
        self.users = users
        self.secret = secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires

    def _sessions(self) -> list[dict]:
        return self.store.get(SESSIONS)

    # ═══════════════════════════════════════════════════════════════
    # Token Generation
    # ═══════════════════════════════════════════════════════════════

    def _encode(self, user_id: str, token_type: str, lifetime: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "type": token_type,
            "iat": now,
            "exp": now + timedelta(seconds=lifetime),
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def sign_token(self, user_id: str) -> str:
        """Short-lived access token."""
        return self._encode(user_id, "access", self.access_expires)

    def sign_refresh_token(self, user_id: str) -> str:
        """Long-lived refresh token, recorded as a session."""
        token = self._encode(user_id, "refresh", self.refresh_expires)
        self._sessions().append({"token": token, "user_id": user_id, "created_at": utc_now_iso()})
        self.store.persist()
        return token

    def _token_pair(self, user: dict) -> dict:
        return {
            "token": self.sign_token(user["id"]),
            "refresh_token": self.sign_refresh_token(user["id"]),
            "token_type": "Bearer",
            "expires_in": self.access_expires,
            "user": to_safe_user(user),
        }

    # ═══════════════════════════════════════════════════════════════
    # Token Verification
    # ═══════════════════════════════════════════════════════════════

    def _decode(self, token: str, expected_type: str, message: str) -> dict:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError(message) from exc
        if payload.get("type") != expected_type:
            raise AuthenticationError(message)
        return payload

    def verify_token(self, token: str) -> dict:
        """Decode an access token; AuthenticationError when invalid or expired."""
        return self._decode(token, "access", "Not authenticated")

    def verify_refresh_token(self, token: str) -> dict:
        if not any(s["token"] == token for s in self._sessions()):
            raise AuthenticationError("Invalid refresh token")
        return self._decode(token, "refresh", "Invalid refresh token")

    # ═══════════════════════════════════════════════════════════════
    # Flows
    # ═══════════════════════════════════════════════════════════════

    def register(self, data: dict) -> dict:
        safe_user = self.users.create(data)
        logger.info("User registered", extra={"operation": "register", "user_id": safe_user["id"]})
        return self._token_pair(find_by_id(self.store.get(USERS), safe_user["id"]))

    def authenticate(self, email: str, password: str) -> dict:
        user = self.users.find_by_email(email)
        if user is None or not verify_password(password, user.get("password_hash")):
            logger.warning("Login failed", extra={"operation": "login"})
            raise AuthenticationError("Invalid credentials")
        logger.info("User logged in", extra={"operation": "login", "user_id": user["id"]})
        return self._token_pair(user)

    def refresh_access_token(self, refresh_token: str) -> dict:
        payload = self.verify_refresh_token(refresh_token)
        self.invalidate_refresh_token(refresh_token)
        user = find_by_id(self.store.get(USERS), payload["sub"])
        if user is None:
            raise AuthenticationError("Invalid refresh token")
        return self._token_pair(user)

    def invalidate_refresh_token(self, token: str) -> bool:
        sessions = self._sessions()
        for session in sessions:
            if session["token"] == token:
                sessions.remove(session)
                self.store.persist()
                return True
        return False

    def invalidate_all_user_tokens(self, user_id: str) -> int:
        sessions = self._sessions()
        kept = [s for s in sessions if s.get("user_id") != user_id]
        removed = len(sessions) - len(kept)
        if removed:
            sessions[:] = kept
            self.store.persist()
        return removed

    def logout(self, refresh_token: str) -> bool:
        """Drop every session of the token's owner."""
        payload = self.verify_refresh_token(refresh_token)
        self.invalidate_all_user_tokens(payload["sub"])
        logger.info("User logged out", extra={"operation": "logout", "user_id": payload["sub"]})
        return True

    def current_user(self, token: str) -> dict:
        """Safe user record behind an access token."""
        payload = self.verify_token(token)
        user = self.users.get_safe_by_id(payload.get("sub"))
        if user is None:
            raise AuthenticationError("Not authenticated")
        return user

    def prune_expired_sessions(self, max_age_seconds: int | None = None) -> int:
        """Remove sessions older than the refresh lifetime; return how many went."""
        max_age = self.refresh_expires if max_age_seconds is None else max_age_seconds
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=max_age)
        sessions = self._sessions()
        kept = [s for s in sessions if _created_at(s) >= cutoff]
        removed = len(sessions) - len(kept)
        if removed:
            sessions[:] = kept
            self.store.persist()
            logger.info("Expired sessions pruned",
                        extra={"operation": "prune_sessions", "removed": removed})
        return removed
