"""Task Evaluation Service: at most one evaluation per task."""

from bumasys.core.exceptions import ConflictError
from bumasys.services.base import EntityService
from bumasys.services.helpers.references import require_reference
from bumasys.store.base import STAFF, TASK_EVALUATIONS, TASKS
from bumasys.utils.helpers import parse_timestamp


class TaskEvaluationService(EntityService):
    collection = TASK_EVALUATIONS
    entity = "Task evaluation"
    fields = ("task_id", "evaluator_id", "evaluation_date", "evaluation_notes", "result")
    update_fields = ("evaluator_id", "evaluation_date", "evaluation_notes", "result")
    required = ("task_id", "evaluator_id", "evaluation_date")

    def find_by_task_id(self, task_id: str) -> dict | None:
        for evaluation in self._records():
            if evaluation.get("task_id") == task_id:
                return dict(evaluation)
        return None

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        require_reference(self._records(TASKS), record["task_id"], "Task not found")
        require_reference(self._records(STAFF), record["evaluator_id"], "Evaluator not found")
        if self.find_by_task_id(record["task_id"]) is not None:
            raise ConflictError("Task evaluation already exists for this task")
        parse_timestamp(record["evaluation_date"], "evaluation_date")
        return self._insert(record)

    def update(self, data: dict) -> dict:
        evaluation = self._require(data.get("id"))
        changes = self._changes(data)
        if "evaluator_id" in changes:
            require_reference(self._records(STAFF), changes["evaluator_id"], "Evaluator not found")
        if "evaluation_date" in changes:
            parse_timestamp(changes["evaluation_date"], "evaluation_date")
        return self._save(evaluation, changes)
