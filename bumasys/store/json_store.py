"""
Single-file JSON store.

The file holds one top-level object mapping collection name to a list of
records. A missing file (and its directory) is created with empty
collections; collections missing from an older file are filled in on load.
Writes are atomic: the payload goes to a temp file in the same directory
which then replaces the target with ``os.replace``.
"""

import json
import logging
import os
import tempfile

from bumasys.store.base import ALL_COLLECTIONS, Store, empty_collections

logger = logging.getLogger(__name__)


def write_json_atomic(path: str, payload: dict) -> None:
    """Serialize ``payload`` to ``path`` via temp file + rename."""
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def load_json_collections(path: str, collections) -> dict[str, list]:
    """Load ``path`` (creating it when missing) and ensure every collection exists."""
    if not os.path.exists(path):
        logger.info("Database file does not exist, creating new one",
                    extra={"operation": "create_database", "path": path})
        data = empty_collections(collections)
        write_json_atomic(path, data)
        return data

    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    for name in collections:
        data.setdefault(name, [])
    logger.debug("Loaded database file",
                 extra={"operation": "load_database", "path": path})
    return data


class JsonFileStore(Store):
    """Store backed by one JSON document on disk."""

    def __init__(self, path: str, collections=ALL_COLLECTIONS):
        self.path = os.path.abspath(path)
        self.collections = tuple(collections)
        self.data = load_json_collections(self.path, self.collections)

    def get(self, collection: str) -> list[dict]:
        if collection not in self.collections:
            raise KeyError(collection)
        return self.data[collection]

    def persist(self) -> None:
        write_json_atomic(self.path, self.data)
        logger.debug("Database written",
                     extra={"operation": "write_database", "path": self.path})
