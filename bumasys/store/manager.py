"""
Tagged two-file database manager.

Authentication data (users, sessions) lives in one file that never changes;
business data lives in ``db-<tag>.json`` next to it, and the active tag can
be switched at runtime to work on an independent data set.

Layout under ``data_dir``::

    auth.json
    db-default.json
    db-<tag>.json
    backups/backup-<tag>-<timestamp>.json
"""

import logging
import os
from datetime import datetime, timezone

from bumasys.store.base import AUTH_COLLECTIONS, DATA_COLLECTIONS, Store
from bumasys.store.json_store import JsonFileStore, write_json_atomic

logger = logging.getLogger(__name__)

BACKUP_FORMAT_VERSION = "1.0"


class DatabaseManager(Store):
    """Routes auth collections to the auth file and the rest to the tagged file."""

    def __init__(self, data_dir: str, auth_file: str = "auth.json", tag: str = "default"):
        self.data_dir = os.path.abspath(data_dir)
        self.auth = JsonFileStore(os.path.join(self.data_dir, auth_file), AUTH_COLLECTIONS)
        self.current_tag = tag
        self.data = JsonFileStore(self._data_path(tag), DATA_COLLECTIONS)
        logger.info("Database manager initialized",
                    extra={"operation": "init_database", "tag": tag, "path": self.data_dir})

    def _data_path(self, tag: str) -> str:
        return os.path.join(self.data_dir, f"db-{tag}.json")

    def get(self, collection: str) -> list[dict]:
        if collection in AUTH_COLLECTIONS:
            return self.auth.get(collection)
        return self.data.get(collection)

    def persist(self) -> None:
        self.auth.persist()
        self.data.persist()

    def switch_to_tag(self, tag: str) -> None:
        """Load (or create) ``db-<tag>.json`` and make it the active data file.

        Services hold the store, not its lists, so they see the new data on
        their next call.
        """
        old_tag = self.current_tag
        old_count = len(self.data.get("organizations"))
        self.data = JsonFileStore(self._data_path(tag), DATA_COLLECTIONS)
        self.current_tag = tag
        logger.info(
            "Database tag switched",
            extra={
                "operation": "switch_tag",
                "old_tag": old_tag,
                "tag": tag,
                "old_organization_count": old_count,
                "organization_count": len(self.data.get("organizations")),
            },
        )

    def create_backup(self) -> str:
        """Write auth + active data to ``backups/`` and return the path relative to ``data_dir``."""
        now = datetime.now(timezone.utc)
        stamp = now.isoformat().replace(":", "-").replace(".", "-").replace("+", "_")
        file_name = f"backup-{self.current_tag}-{stamp}.json"
        backup_path = os.path.join(self.data_dir, "backups", file_name)
        payload = {
            "timestamp": now.isoformat(),
            "version": BACKUP_FORMAT_VERSION,
            "tag": self.current_tag,
            "auth": self.auth.data,
            "data": self.data.data,
        }
        try:
            write_json_atomic(backup_path, payload)
        except OSError:
            logger.exception("Failed to create database backup",
                             extra={"operation": "create_backup", "tag": self.current_tag})
            raise
        relative = os.path.relpath(backup_path, self.data_dir)
        logger.info("Database backup created",
                    extra={"operation": "create_backup", "tag": self.current_tag, "path": relative})
        return relative
