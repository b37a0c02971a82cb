"""
Task Service: tasks, their assignees and their predecessor links.

Rules:
    - project_id is required, must exist, and is fixed after creation
    - parent_task_id must exist, belong to the same project, differ from the
      task itself and never close a loop in the task tree
    - evaluator / status / priority / complexity references must exist
    - planned and actual date pairs are strictly ordered (merged values)
    - deletion is blocked by child tasks; otherwise assignees, predecessor
      links (both directions), evaluation, progress and status reports
      of the task are removed with it
    - assignee pairs and predecessor pairs are unique; the predecessor
      graph stays acyclic
"""

import logging

from bumasys.core.exceptions import (
    CircularReferenceError,
    ConflictError,
    InvalidReferenceError,
)
from bumasys.services.base import EntityService
from bumasys.services.helpers.hierarchy import check_no_cycle, check_no_dependency_cycle
from bumasys.services.helpers.references import (
    belongs_to_project,
    check_date_pairs,
    require_reference,
)
from bumasys.store.base import (
    COMPLEXITIES,
    PRIORITIES,
    PROJECTS,
    STAFF,
    STATUSES,
    TASK_ASSIGNEES,
    TASK_PREDECESSORS,
    TASKS,
)

logger = logging.getLogger(__name__)

DATE_FIELDS = ("planned_start_date", "planned_end_date", "actual_start_date", "actual_end_date")

# field → (collection, message when the referenced record is missing)
_OPTIONAL_REFERENCES = (
    ("evaluator_id", STAFF, "Evaluator not found"),
    ("status_id", STATUSES, "Status not found"),
    ("priority_id", PRIORITIES, "Priority not found"),
    ("complexity_id", COMPLEXITIES, "Complexity not found"),
)


class TaskService(EntityService):
    collection = TASKS
    entity = "Task"
    fields = (
        "name", "description", "project_id", "parent_task_id",
        "evaluator_id", "status_id", "priority_id", "complexity_id",
    ) + DATE_FIELDS
    update_fields = tuple(f for f in fields if f != "project_id")
    required = ("name", "project_id")

    def get_by_project(self, project_id: str) -> list[dict]:
        return self.get_all(project_id=project_id)

    def get_children(self, task_id: str) -> list[dict]:
        return self.get_all(parent_task_id=task_id)

    # ── Validation ───────────────────────────────────────────────────────

    def _check_parent(self, task_id: str | None, project_id: str, parent_id) -> None:
        if parent_id is None:
            return
        parent = require_reference(self._records(), parent_id, "Parent task not found")
        if not belongs_to_project(parent, project_id):
            raise InvalidReferenceError("Parent task must belong to the same project")
        if task_id is not None:
            check_no_cycle(
                self._records(), task_id, parent_id, "parent_task_id",
                self_message="Task cannot be its own parent",
                cycle_message="Update would create circular reference in task hierarchy",
            )

    def _check_optional_references(self, values: dict) -> None:
        for field, collection, message in _OPTIONAL_REFERENCES:
            if values.get(field) is not None:
                require_reference(self._records(collection), values[field], message)

    # ── CRUD ─────────────────────────────────────────────────────────────

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        require_reference(self._records(PROJECTS), record["project_id"], "Project not found")
        self._check_parent(None, record["project_id"], record["parent_task_id"])
        self._check_optional_references(record)
        check_date_pairs(record)
        return self._insert(record)

    def update(self, data: dict) -> dict:
        task = self._require(data.get("id"))
        changes = self._changes(data)
        if "parent_task_id" in changes:
            self._check_parent(task["id"], task["project_id"], changes["parent_task_id"])
        self._check_optional_references(changes)
        if changes.keys() & set(DATE_FIELDS):
            check_date_pairs({**task, **changes})
        return self._save(task, changes)

    def _ensure_deletable(self, record: dict) -> None:
        self.guard.ensure_task_deletable(record["id"])

    def _on_delete(self, record: dict) -> None:
        self.guard.cascade_task(record["id"])

    # ── Assignees ────────────────────────────────────────────────────────

    def assign_staff(self, task_id: str, staff_id: str) -> dict:
        self._require(task_id)
        require_reference(self._records(STAFF), staff_id, "Staff member not found")
        assignees = self._records(TASK_ASSIGNEES)
        if any(a["task_id"] == task_id and a["staff_id"] == staff_id for a in assignees):
            raise ConflictError("Staff member already assigned to this task")
        assignment = {"task_id": task_id, "staff_id": staff_id}
        assignees.append(assignment)
        self.store.persist()
        logger.info("Staff assigned to task",
                    extra={"operation": "assign_staff", "entity_id": task_id, "staff_id": staff_id})
        return dict(assignment)

    def remove_staff(self, task_id: str, staff_id: str) -> bool:
        assignees = self._records(TASK_ASSIGNEES)
        for assignment in assignees:
            if assignment["task_id"] == task_id and assignment["staff_id"] == staff_id:
                assignees.remove(assignment)
                self.store.persist()
                logger.info("Staff removed from task",
                            extra={"operation": "remove_staff", "entity_id": task_id,
                                   "staff_id": staff_id})
                return True
        return False

    def get_assignees(self, task_id: str) -> list[dict]:
        staff_ids = {a["staff_id"] for a in self._records(TASK_ASSIGNEES) if a["task_id"] == task_id}
        return [dict(s) for s in self._records(STAFF) if s["id"] in staff_ids]

    def is_assigned(self, task_id: str, staff_id: str) -> bool:
        return any(a["task_id"] == task_id and a["staff_id"] == staff_id
                   for a in self._records(TASK_ASSIGNEES))

    # ── Predecessors ─────────────────────────────────────────────────────

    def add_predecessor(self, task_id: str, predecessor_task_id: str) -> dict:
        self._require(task_id)
        require_reference(self._records(), predecessor_task_id, "Predecessor task not found")
        if task_id == predecessor_task_id:
            raise CircularReferenceError("Task cannot be its own predecessor")
        edges = self._records(TASK_PREDECESSORS)
        if any(p["task_id"] == task_id and p["predecessor_task_id"] == predecessor_task_id
               for p in edges):
            raise ConflictError("Predecessor relationship already exists")
        check_no_dependency_cycle(
            edges, task_id, predecessor_task_id,
            message="Predecessor relationship would create a circular dependency",
        )
        link = {"task_id": task_id, "predecessor_task_id": predecessor_task_id}
        edges.append(link)
        self.store.persist()
        logger.info("Task predecessor added",
                    extra={"operation": "add_predecessor", "entity_id": task_id,
                           "predecessor_task_id": predecessor_task_id})
        return dict(link)

    def remove_predecessor(self, task_id: str, predecessor_task_id: str) -> bool:
        edges = self._records(TASK_PREDECESSORS)
        for link in edges:
            if link["task_id"] == task_id and link["predecessor_task_id"] == predecessor_task_id:
                edges.remove(link)
                self.store.persist()
                logger.info("Task predecessor removed",
                            extra={"operation": "remove_predecessor", "entity_id": task_id,
                                   "predecessor_task_id": predecessor_task_id})
                return True
        return False

    def get_predecessors(self, task_id: str) -> list[dict]:
        ids = {p["predecessor_task_id"] for p in self._records(TASK_PREDECESSORS)
               if p["task_id"] == task_id}
        return [dict(t) for t in self._records() if t["id"] in ids]
