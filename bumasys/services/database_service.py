"""
Database Service: data-tag switching, backups and collection stats.

Tags select which ``db-<tag>.json`` file holds the business data. A tag is
letters, digits and hyphens only; a few names are reserved for internal
files.
"""

import re

from bumasys.core.exceptions import ValidationError
from bumasys.store.base import Store
from bumasys.store.manager import DatabaseManager

TAG_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
RESERVED_TAGS = frozenset({"auth", "sessions", "system"})


def validate_tag(tag) -> str:
    if not isinstance(tag, str) or not TAG_PATTERN.fullmatch(tag):
        raise ValidationError(
            "Invalid tag format. Only alphanumeric characters and hyphens are allowed."
        )
    if tag.lower() in RESERVED_TAGS:
        raise ValidationError("Tag name is reserved and cannot be used.")
    return tag


class DatabaseService:
    def __init__(self, store: Store):
        self.store = store

    def _manager(self) -> DatabaseManager:
        if not isinstance(self.store, DatabaseManager):
            raise ValidationError("Data tags and backups require the file-backed store")
        return self.store

    @property
    def current_tag(self) -> str | None:
        if isinstance(self.store, DatabaseManager):
            return self.store.current_tag
        return None

    def switch_tag(self, tag: str) -> str:
        validate_tag(tag)
        self._manager().switch_to_tag(tag)
        return tag

    def create_backup(self) -> str:
        return self._manager().create_backup()

    def stats(self) -> dict:
        return {"tag": self.current_tag, "collections": self.store.counts()}
