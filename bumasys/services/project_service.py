"""
Project Service.

Rules:
    - lead_staff_id, when set, must be an existing staff member
    - planned and actual date pairs: when both ends are known (stored value
      merged with the incoming one) start must be strictly before end
    - deletion is blocked while tasks or project status reports reference it
"""

from bumasys.services.base import EntityService
from bumasys.services.helpers.references import check_date_pairs, require_reference
from bumasys.store.base import PROJECT_STATUS_REPORTS, PROJECTS, STAFF, TASKS

DATE_FIELDS = ("planned_start_date", "planned_end_date", "actual_start_date", "actual_end_date")


class ProjectService(EntityService):
    collection = PROJECTS
    entity = "Project"
    fields = ("name", "description", "lead_staff_id") + DATE_FIELDS
    required = ("name",)

    def _check_lead(self, lead_staff_id) -> None:
        if lead_staff_id is not None:
            require_reference(self._records(STAFF), lead_staff_id, "Lead staff member not found")

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        self._check_lead(record["lead_staff_id"])
        check_date_pairs(record)
        return self._insert(record)

    def update(self, data: dict) -> dict:
        project = self._require(data.get("id"))
        changes = self._changes(data)
        if "lead_staff_id" in changes:
            self._check_lead(changes["lead_staff_id"])
        if changes.keys() & set(DATE_FIELDS):
            check_date_pairs({**project, **changes})
        return self._save(project, changes)

    def _ensure_deletable(self, record: dict) -> None:
        self.guard.ensure_project_deletable(record["id"])

    def get_tasks(self, project_id: str) -> list[dict]:
        return [dict(t) for t in self._records(TASKS) if t.get("project_id") == project_id]

    def get_status_reports(self, project_id: str) -> list[dict]:
        return [dict(r) for r in self._records(PROJECT_STATUS_REPORTS)
                if r.get("project_id") == project_id]
