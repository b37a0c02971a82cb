"""
Reference data services: task statuses, priorities and complexities.

All three are a bare ``name`` that is unique case-insensitively inside its
own collection ("Low" and "low" collide) and cannot be deleted while any
task still points at it.
"""

from bumasys.services.base import EntityService
from bumasys.services.helpers.uniqueness import ensure_unique
from bumasys.store.base import COMPLEXITIES, PRIORITIES, STATUSES


class ReferenceDataService(EntityService):
    """Shared behaviour; subclasses set ``collection``, ``entity`` and ``kind``."""

    kind = ""
    fields = ("name",)
    required = ("name",)

    def find_by_name(self, name: str) -> dict | None:
        wanted = name.casefold()
        for record in self._records():
            if record.get("name", "").casefold() == wanted:
                return dict(record)
        return None

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        ensure_unique(self._records(), "name", record["name"], case_sensitive=False,
                      message=f"{self.entity} name already exists")
        return self._insert(record)

    def update(self, data: dict) -> dict:
        record = self._require(data.get("id"))
        changes = self._changes(data)
        if "name" in changes:
            ensure_unique(self._records(), "name", changes["name"], case_sensitive=False,
                          message=f"{self.entity} name already exists",
                          exclude_id=record["id"])
        return self._save(record, changes)

    def _ensure_deletable(self, record: dict) -> None:
        self.guard.ensure_reference_data_deletable(self.kind, record["id"])


class StatusService(ReferenceDataService):
    collection = STATUSES
    entity = "Status"
    kind = "status"


class PriorityService(ReferenceDataService):
    collection = PRIORITIES
    entity = "Priority"
    kind = "priority"


class ComplexityService(ReferenceDataService):
    collection = COMPLEXITIES
    entity = "Complexity"
    kind = "complexity"
