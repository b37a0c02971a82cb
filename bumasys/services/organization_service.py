"""
Organization Service: top-level tenant of departments and staff.

Rules:
    - name is unique (case-sensitive)
    - root_department_id / root_staff_id must point into this organization;
      they are soft references, cleared when the target is deleted
    - deletion is blocked while any department or staff member belongs to it
"""

from bumasys.core.exceptions import InvalidReferenceError
from bumasys.services.base import EntityService
from bumasys.services.helpers.references import belongs_to_organization, find_by_id
from bumasys.services.helpers.uniqueness import ensure_unique
from bumasys.store.base import DEPARTMENTS, ORGANIZATIONS, STAFF


class OrganizationService(EntityService):
    collection = ORGANIZATIONS
    entity = "Organization"
    fields = ("name", "description", "root_department_id", "root_staff_id")
    required = ("name",)

    def find_by_name(self, name: str) -> dict | None:
        for organization in self._records():
            if organization.get("name") == name:
                return dict(organization)
        return None

    def _check_roots(self, organization_id: str, changes: dict) -> None:
        if changes.get("root_department_id") is not None:
            department = find_by_id(self._records(DEPARTMENTS), changes["root_department_id"])
            if not belongs_to_organization(department, organization_id):
                raise InvalidReferenceError(
                    "Department not found or does not belong to this organization"
                )
        if changes.get("root_staff_id") is not None:
            staff = find_by_id(self._records(STAFF), changes["root_staff_id"])
            if not belongs_to_organization(staff, organization_id):
                raise InvalidReferenceError(
                    "Staff member not found or does not belong to this organization"
                )

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        ensure_unique(self._records(), "name", record["name"], case_sensitive=True,
                      message="Organization name already in use")
        # A brand-new organization owns nothing yet, so roots start unset.
        record["root_department_id"] = None
        record["root_staff_id"] = None
        return self._insert(record)

    def update(self, data: dict) -> dict:
        organization = self._require(data.get("id"))
        changes = self._changes(data)
        if "name" in changes:
            ensure_unique(self._records(), "name", changes["name"], case_sensitive=True,
                          message="Organization name already in use",
                          exclude_id=organization["id"])
        self._check_roots(organization["id"], changes)
        return self._save(organization, changes)

    def _ensure_deletable(self, record: dict) -> None:
        self.guard.ensure_organization_deletable(record["id"])

    def get_with_stats(self) -> list[dict]:
        """Every organization plus its department and staff counts."""
        departments = self._records(DEPARTMENTS)
        staff = self._records(STAFF)
        result = []
        for organization in self._records():
            item = dict(organization)
            item["department_count"] = sum(
                1 for d in departments if d.get("organization_id") == organization["id"])
            item["staff_count"] = sum(
                1 for s in staff if s.get("organization_id") == organization["id"])
            result.append(item)
        return result
