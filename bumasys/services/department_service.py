"""
Department Service: the per-organization department tree.

Rules:
    - organization_id is required, must exist, and is fixed after creation
    - parent_department_id must exist, belong to the same organization,
      differ from the department itself and never close a loop
    - manager_id must be a staff member of the same organization
    - deletion is blocked by child departments or staff; a successful
      delete clears any organization's root_department_id pointing here
"""

from bumasys.core.exceptions import InvalidReferenceError
from bumasys.services.base import EntityService
from bumasys.services.helpers.hierarchy import check_no_cycle
from bumasys.services.helpers.references import (
    belongs_to_organization,
    find_by_id,
    require_reference,
)
from bumasys.store.base import DEPARTMENTS, ORGANIZATIONS, STAFF


class DepartmentService(EntityService):
    collection = DEPARTMENTS
    entity = "Department"
    fields = ("name", "description", "organization_id", "parent_department_id", "manager_id")
    update_fields = ("name", "description", "parent_department_id", "manager_id")
    required = ("name", "organization_id")

    def get_by_organization(self, organization_id: str) -> list[dict]:
        return self.get_all(organization_id=organization_id)

    def get_children(self, parent_department_id: str) -> list[dict]:
        return self.get_all(parent_department_id=parent_department_id)

    def _check_parent(self, department_id: str | None, organization_id: str, parent_id) -> None:
        if parent_id is None:
            return
        parent = require_reference(self._records(), parent_id, "Parent department not found")
        if not belongs_to_organization(parent, organization_id):
            raise InvalidReferenceError("Parent department must belong to the same organization")
        if department_id is not None:
            check_no_cycle(
                self._records(), department_id, parent_id, "parent_department_id",
                self_message="Department cannot be its own parent",
                cycle_message="Update would create circular reference in department hierarchy",
            )

    def _check_manager(self, organization_id: str, manager_id) -> None:
        if manager_id is None:
            return
        manager = find_by_id(self._records(STAFF), manager_id)
        if not belongs_to_organization(manager, organization_id):
            raise InvalidReferenceError("Manager not found or does not belong to this organization")

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        require_reference(self._records(ORGANIZATIONS), record["organization_id"],
                          "Organization not found")
        # A new department has no descendants, so only existence and scope apply.
        self._check_parent(None, record["organization_id"], record["parent_department_id"])
        self._check_manager(record["organization_id"], record["manager_id"])
        return self._insert(record)

    def update(self, data: dict) -> dict:
        department = self._require(data.get("id"))
        changes = self._changes(data)
        organization_id = department["organization_id"]
        if "parent_department_id" in changes:
            self._check_parent(department["id"], organization_id, changes["parent_department_id"])
        if "manager_id" in changes:
            self._check_manager(organization_id, changes["manager_id"])
        return self._save(department, changes)

    def _ensure_deletable(self, record: dict) -> None:
        self.guard.ensure_department_deletable(record["id"])

    def _on_delete(self, record: dict) -> None:
        self.guard.clear_root_department(record["id"])

    def get_with_stats(self, organization_id: str | None = None) -> list[dict]:
        staff = self._records(STAFF)
        departments = self._records()
        result = []
        for department in self.get_all(organization_id=organization_id):
            department["staff_count"] = sum(
                1 for s in staff if s.get("department_id") == department["id"])
            department["child_department_count"] = sum(
                1 for d in departments if d.get("parent_department_id") == department["id"])
            result.append(department)
        return result
