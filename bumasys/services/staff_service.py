"""
Staff Service: people inside an organization and their supervision tree.

Rules:
    - email is unique among staff, compared case-sensitively
    - organization_id must exist and is fixed after creation
    - department_id must belong to the staff member's organization
    - supervisor_id must be staff of the same organization, not the member
      itself, and must not close a supervision loop
    - deletion is blocked by subordinates or managed departments; a
      successful delete clears any organization's root_staff_id pointing here
"""

from bumasys.core.exceptions import InvalidReferenceError
from bumasys.services.base import EntityService
from bumasys.services.helpers.hierarchy import check_no_cycle
from bumasys.services.helpers.references import (
    belongs_to_organization,
    find_by_id,
    require_reference,
)
from bumasys.services.helpers.uniqueness import ensure_unique
from bumasys.store.base import DEPARTMENTS, ORGANIZATIONS, STAFF


class StaffService(EntityService):
    collection = STAFF
    entity = "Staff member"
    fields = (
        "first_name", "last_name", "email", "phone", "role",
        "organization_id", "department_id", "supervisor_id",
    )
    update_fields = (
        "first_name", "last_name", "email", "phone", "role",
        "department_id", "supervisor_id",
    )
    required = ("first_name", "last_name", "email", "role", "organization_id", "department_id")

    def find_by_email(self, email: str) -> dict | None:
        for staff in self._records():
            if staff.get("email") == email:
                return dict(staff)
        return None

    def get_by_organization(self, organization_id: str) -> list[dict]:
        return self.get_all(organization_id=organization_id)

    def get_by_department(self, department_id: str) -> list[dict]:
        return self.get_all(department_id=department_id)

    def get_subordinates(self, supervisor_id: str) -> list[dict]:
        return self.get_all(supervisor_id=supervisor_id)

    def _check_supervisor(self, organization_id: str, staff_id: str | None, supervisor_id) -> None:
        if supervisor_id is None:
            return
        supervisor = find_by_id(self._records(), supervisor_id)
        if not belongs_to_organization(supervisor, organization_id):
            raise InvalidReferenceError(
                "Supervisor not found or does not belong to the same organization"
            )
        if staff_id is not None:
            check_no_cycle(
                self._records(), staff_id, supervisor_id, "supervisor_id",
                self_message="Staff member cannot supervise themselves",
                cycle_message="Update would create circular supervision hierarchy",
            )

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        ensure_unique(self._records(), "email", record["email"], case_sensitive=True,
                      message="Email already in use")
        require_reference(self._records(ORGANIZATIONS), record["organization_id"],
                          "Organization not found")
        department = find_by_id(self._records(DEPARTMENTS), record["department_id"])
        if not belongs_to_organization(department, record["organization_id"]):
            raise InvalidReferenceError(
                "Department not found or does not belong to the specified organization"
            )
        self._check_supervisor(record["organization_id"], None, record["supervisor_id"])
        return self._insert(record)

    def update(self, data: dict) -> dict:
        staff = self._require(data.get("id"))
        changes = self._changes(data)
        if "email" in changes:
            ensure_unique(self._records(), "email", changes["email"], case_sensitive=True,
                          message="Email already in use", exclude_id=staff["id"])
        organization_id = staff["organization_id"]
        if "department_id" in changes:
            department = find_by_id(self._records(DEPARTMENTS), changes["department_id"])
            if not belongs_to_organization(department, organization_id):
                raise InvalidReferenceError(
                    "Department not found or does not belong to the same organization"
                )
        if "supervisor_id" in changes:
            self._check_supervisor(organization_id, staff["id"], changes["supervisor_id"])
        return self._save(staff, changes)

    def _ensure_deletable(self, record: dict) -> None:
        self.guard.ensure_staff_deletable(record["id"])

    def _on_delete(self, record: dict) -> None:
        self.guard.clear_root_staff(record["id"])

    def get_with_stats(self, organization_id: str | None = None,
                       department_id: str | None = None) -> list[dict]:
        staff = self._records()
        result = []
        for member in self.get_all(organization_id=organization_id, department_id=department_id):
            member["subordinate_count"] = sum(
                1 for s in staff if s.get("supervisor_id") == member["id"])
            result.append(member)
        return result
