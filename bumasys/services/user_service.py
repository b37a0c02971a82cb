"""
User Service: login identities, kept apart from staff records.

Password hashes never leave this service: every public method returns a
"safe" copy with ``password_hash`` stripped.
"""

import logging

from email_validator import EmailNotValidError, validate_email

from bumasys.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from bumasys.services.base import EntityService
from bumasys.services.helpers.uniqueness import ensure_unique
from bumasys.store.base import SESSIONS, USERS
from bumasys.utils.crypto import hash_password, verify_password

logger = logging.getLogger(__name__)


def to_safe_user(user: dict) -> dict:
    return {key: value for key, value in user.items() if key != "password_hash"}


def check_email(email) -> None:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError(f"Invalid email: {exc}", details={"email": email}) from exc


class UserService(EntityService):
    collection = USERS
    entity = "User"
    fields = ("email", "first_name", "last_name", "note")
    required = ("email",)

    def __init__(self, store, bcrypt_rounds: int = 12):
        super().__init__(store)
        self.bcrypt_rounds = bcrypt_rounds

    def find_by_email(self, email: str) -> dict | None:
        """Raw user record (hash included) for credential checks."""
        for user in self._records():
            if user.get("email") == email:
                return user
        return None

    def find_by_id(self, record_id) -> dict | None:
        return self.get_safe_by_id(record_id)

    def get_safe_by_id(self, user_id) -> dict | None:
        user = self._get(user_id)
        return to_safe_user(user) if user is not None else None

    def get_all(self, **filters) -> list[dict]:
        return [to_safe_user(user) for user in super().get_all(**filters)]

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        if not data.get("password"):
            raise ValidationError("password is required", details={"password": "required"})
        check_email(record["email"])
        ensure_unique(self._records(), "email", record["email"], case_sensitive=True,
                      message="Email in use")
        record["password_hash"] = hash_password(data["password"], self.bcrypt_rounds)
        return to_safe_user(self._insert(record))

    def update(self, data: dict) -> dict:
        user = self._require(data.get("id"))
        changes = self._changes(data)
        if "email" in changes:
            check_email(changes["email"])
            ensure_unique(self._records(), "email", changes["email"], case_sensitive=True,
                          message="Email in use", exclude_id=user["id"])
        if data.get("password"):
            changes["password_hash"] = hash_password(data["password"], self.bcrypt_rounds)
        return to_safe_user(self._save(user, changes))

    def _on_delete(self, record: dict) -> None:
        sessions = self._records(SESSIONS)
        sessions[:] = [s for s in sessions if s.get("user_id") != record["id"]]

    def change_password(self, user_id: str, old_password: str, new_password: str) -> bool:
        user = self._get(user_id)
        if user is None:
            raise NotFoundError("User not found", details={"id": user_id})
        if not verify_password(old_password, user.get("password_hash")):
            raise AuthenticationError("Invalid credentials")
        if not new_password:
            raise ValidationError("password is required", details={"password": "required"})
        user["password_hash"] = hash_password(new_password, self.bcrypt_rounds)
        self.store.persist()
        logger.info("User password changed",
                    extra={"operation": "change_password", "entity_id": user_id})
        return True
