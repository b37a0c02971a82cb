"""
Shared CRUD plumbing for entity services.

Each concrete service names its collection, its writable fields and which of
them are required, then implements ``create`` / ``update`` with its own guard
sequence. This base supplies the parts that are identical everywhere:

    find_by_id / get_all     return copies, never the live store records
    _changes                 partial-update merge (absent key = unchanged)
    _insert / _save          append or merge, persist, log
    delete                   idempotent: False for an unknown id

Partial-update contract:
    key absent from input          → field unchanged
    key present with None          → optional field cleared, required field ignored
    key present with a value       → validated against the merged record, then set
"""

import logging

from bumasys.core.exceptions import NotFoundError, ValidationError
from bumasys.services.helpers.dependencies import DependencyGuard
from bumasys.services.helpers.references import find_by_id
from bumasys.store.base import Store
from bumasys.utils.helpers import is_blank, new_id

logger = logging.getLogger(__name__)


class EntityService:
    """Base class for services owning one collection."""

    collection: str = ""
    entity: str = "Record"
    fields: tuple = ()
    update_fields: tuple | None = None
    required: tuple = ()

    def __init__(self, store: Store):
        self.store = store
        self.guard = DependencyGuard(store)

    # ── Reads ────────────────────────────────────────────────────────────

    def _records(self, collection: str | None = None) -> list[dict]:
        return self.store.get(collection or self.collection)

    def _get(self, record_id) -> dict | None:
        return find_by_id(self._records(), record_id)

    def _require(self, record_id) -> dict:
        record = self._get(record_id)
        if record is None:
            raise NotFoundError(f"{self.entity} not found", details={"id": record_id})
        return record

    def find_by_id(self, record_id) -> dict | None:
        record = self._get(record_id)
        return dict(record) if record is not None else None

    def get_all(self, **filters) -> list[dict]:
        """All records, optionally filtered by exact field values (None = no filter)."""
        active = {key: value for key, value in filters.items() if value is not None}
        return [
            dict(record)
            for record in self._records()
            if all(record.get(key) == value for key, value in active.items())
        ]

    # ── Input handling ───────────────────────────────────────────────────

    def _check_required(self, values: dict, fields=None) -> None:
        for field in fields if fields is not None else self.required:
            if is_blank(values.get(field)):
                raise ValidationError(f"{field} is required", details={field: "required"})

    def _new_record(self, data: dict) -> dict:
        self._check_required(data)
        record = {"id": new_id()}
        for field in self.fields:
            record[field] = data.get(field)
        return record

    def _changes(self, data: dict) -> dict:
        changes = {}
        for field in self.update_fields or self.fields:
            if field not in data:
                continue
            value = data[field]
            if value is None and field in self.required:
                continue
            changes[field] = value
        self._check_required(changes, [f for f in self.required if f in changes])
        return changes

    # ── Writes ───────────────────────────────────────────────────────────

    def _insert(self, record: dict) -> dict:
        self._records().append(record)
        self.store.persist()
        logger.info(
            "%s created", self.entity,
            extra={"operation": "create", "entity": self.collection, "entity_id": record["id"]},
        )
        return dict(record)

    def _save(self, record: dict, changes: dict) -> dict:
        record.update(changes)
        self.store.persist()
        logger.info(
            "%s updated", self.entity,
            extra={"operation": "update", "entity": self.collection,
                   "entity_id": record["id"], "fields": sorted(changes)},
        )
        return dict(record)

    def _ensure_deletable(self, record: dict) -> None:
        """Raise DependencyExistsError when live dependents block the delete."""

    def _on_delete(self, record: dict) -> None:
        """Cascades and soft-reference clears that run once the delete is allowed."""

    def delete(self, record_id) -> bool:
        record = self._get(record_id)
        if record is None:
            return False
        self._ensure_deletable(record)
        self._on_delete(record)
        self._records().remove(record)
        self.store.persist()
        logger.info(
            "%s deleted", self.entity,
            extra={"operation": "delete", "entity": self.collection, "entity_id": record_id},
        )
        return True
