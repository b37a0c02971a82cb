"""Task Status Report Service: dated free-text status summaries on a task."""

from bumasys.services.base import EntityService
from bumasys.services.helpers.creators import check_creator, resolve_creator
from bumasys.services.helpers.references import require_reference
from bumasys.store.base import TASK_STATUS_REPORTS, TASKS
from bumasys.utils.helpers import parse_timestamp


class TaskStatusReportService(EntityService):
    collection = TASK_STATUS_REPORTS
    entity = "Task status report"
    fields = ("task_id", "report_date", "status_summary", "creator_id")
    update_fields = ("report_date", "status_summary", "creator_id")
    required = ("task_id", "report_date")

    def get_by_task(self, task_id: str) -> list[dict]:
        return self.get_all(task_id=task_id)

    def create(self, data: dict, caller_email: str | None = None) -> dict:
        record = self._new_record(data)
        task = require_reference(self._records(TASKS), record["task_id"], "Task not found")
        parse_timestamp(record["report_date"], "report_date")
        record["creator_id"] = resolve_creator(self.store, task, record["creator_id"], caller_email)
        return self._insert(record)

    def update(self, data: dict) -> dict:
        report = self._require(data.get("id"))
        changes = self._changes(data)
        if "report_date" in changes:
            parse_timestamp(changes["report_date"], "report_date")
        if changes.get("creator_id") is not None:
            task = require_reference(self._records(TASKS), report["task_id"], "Task not found")
            check_creator(self.store, task, changes["creator_id"])
        return self._save(report, changes)
