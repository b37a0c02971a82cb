"""Project Status Report Service: dated status summaries attached to a project."""

from bumasys.services.base import EntityService
from bumasys.services.helpers.references import require_reference
from bumasys.store.base import PROJECT_STATUS_REPORTS, PROJECTS
from bumasys.utils.helpers import parse_timestamp


class ProjectStatusReportService(EntityService):
    collection = PROJECT_STATUS_REPORTS
    entity = "Project status report"
    fields = ("project_id", "report_date", "status_summary")
    update_fields = ("report_date", "status_summary")
    required = ("project_id", "report_date")

    def get_by_project(self, project_id: str) -> list[dict]:
        return self.get_all(project_id=project_id)

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        require_reference(self._records(PROJECTS), record["project_id"], "Project not found")
        parse_timestamp(record["report_date"], "report_date")
        return self._insert(record)

    def update(self, data: dict) -> dict:
        report = self._require(data.get("id"))
        changes = self._changes(data)
        if "report_date" in changes:
            parse_timestamp(changes["report_date"], "report_date")
        return self._save(report, changes)
