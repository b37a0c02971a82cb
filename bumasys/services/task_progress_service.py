"""
Task Progress Service: dated completion percentages reported on a task.

``progress_percent`` must be a number in [0, 100] (both ends allowed).
The creator follows the rules in ``helpers.creators``.
"""

import math

from bumasys.core.exceptions import OutOfRangeError, ValidationError
from bumasys.services.base import EntityService
from bumasys.services.helpers.creators import check_creator, resolve_creator
from bumasys.services.helpers.references import require_reference
from bumasys.store.base import TASK_PROGRESS, TASKS
from bumasys.utils.helpers import parse_timestamp

MIN_PERCENT = 0
MAX_PERCENT = 100


def check_percent(value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("progress_percent must be a number",
                              details={"progress_percent": value})
    if not math.isfinite(value) or not MIN_PERCENT <= value <= MAX_PERCENT:
        raise OutOfRangeError("Progress percentage must be between 0 and 100")


class TaskProgressService(EntityService):
    collection = TASK_PROGRESS
    entity = "Task progress report"
    fields = ("task_id", "report_date", "progress_percent", "notes", "creator_id")
    update_fields = ("report_date", "progress_percent", "notes", "creator_id")
    required = ("task_id", "report_date", "progress_percent")

    def get_by_task(self, task_id: str) -> list[dict]:
        return self.get_all(task_id=task_id)

    def create(self, data: dict, caller_email: str | None = None) -> dict:
        record = self._new_record(data)
        task = require_reference(self._records(TASKS), record["task_id"], "Task not found")
        check_percent(record["progress_percent"])
        parse_timestamp(record["report_date"], "report_date")
        record["creator_id"] = resolve_creator(self.store, task, record["creator_id"], caller_email)
        return self._insert(record)

    def update(self, data: dict) -> dict:
        report = self._require(data.get("id"))
        changes = self._changes(data)
        if "progress_percent" in changes:
            check_percent(changes["progress_percent"])
        if "report_date" in changes:
            parse_timestamp(changes["report_date"], "report_date")
        if changes.get("creator_id") is not None:
            task = require_reference(self._records(TASKS), report["task_id"], "Task not found")
            check_creator(self.store, task, changes["creator_id"])
        return self._save(report, changes)
