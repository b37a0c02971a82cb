"""
Dependency guard: pre-delete checks and named cascades.

Each ``ensure_*_deletable`` method scans the dependent collections and raises
``DependencyExistsError`` while live dependents exist. Cascades and
soft-reference clears are separate named operations that return what they
removed or changed, so a service composes them explicitly:

    guard.ensure_task_deletable(task_id)
    removed = guard.cascade_task(task_id)

Collections are filtered in place (slice assignment) because services and
the store share the same list objects.
"""

import logging

from bumasys.core.exceptions import DependencyExistsError
from bumasys.store import base as collections
from bumasys.store.base import Store

logger = logging.getLogger(__name__)

# Reference-data kind → (task foreign key, blocked-delete message)
_REFERENCE_KINDS = {
    "status": ("status_id", "Cannot delete status: it is being used by tasks"),
    "priority": ("priority_id", "Cannot delete priority: it is being used by tasks"),
    "complexity": ("complexity_id", "Cannot delete complexity: it is being used by tasks"),
}

# Collection → field pointing at a task, for the task cascade
_TASK_CASCADE = (
    (collections.TASK_ASSIGNEES, ("task_id",)),
    (collections.TASK_PREDECESSORS, ("task_id", "predecessor_task_id")),
    (collections.TASK_EVALUATIONS, ("task_id",)),
    (collections.TASK_PROGRESS, ("task_id",)),
    (collections.TASK_STATUS_REPORTS, ("task_id",)),
)


def _any(records: list[dict], field: str, value) -> bool:
    return any(record.get(field) == value for record in records)


class DependencyGuard:
    """Delete-time integrity rules over one store."""

    def __init__(self, store: Store):
        self.store = store

    # ── Blocking checks ──────────────────────────────────────────────────

    def ensure_reference_data_deletable(self, kind: str, record_id: str) -> None:
        field, message = _REFERENCE_KINDS[kind]
        if _any(self.store.get(collections.TASKS), field, record_id):
            raise DependencyExistsError(message)

    def ensure_organization_deletable(self, organization_id: str) -> None:
        if (_any(self.store.get(collections.DEPARTMENTS), "organization_id", organization_id)
                or _any(self.store.get(collections.STAFF), "organization_id", organization_id)):
            raise DependencyExistsError(
                "Cannot delete organization with existing departments or staff members"
            )

    def ensure_department_deletable(self, department_id: str) -> None:
        if (_any(self.store.get(collections.DEPARTMENTS), "parent_department_id", department_id)
                or _any(self.store.get(collections.STAFF), "department_id", department_id)):
            raise DependencyExistsError(
                "Cannot delete department with existing child departments or staff members"
            )

    def ensure_staff_deletable(self, staff_id: str) -> None:
        if (_any(self.store.get(collections.STAFF), "supervisor_id", staff_id)
                or _any(self.store.get(collections.DEPARTMENTS), "manager_id", staff_id)):
            raise DependencyExistsError(
                "Cannot delete staff member who has subordinates or manages departments"
            )

    def ensure_project_deletable(self, project_id: str) -> None:
        if _any(self.store.get(collections.TASKS), "project_id", project_id):
            raise DependencyExistsError("Cannot delete project: it has associated tasks")
        if _any(self.store.get(collections.PROJECT_STATUS_REPORTS), "project_id", project_id):
            raise DependencyExistsError("Cannot delete project: it has status reports")

    def ensure_task_deletable(self, task_id: str) -> None:
        if _any(self.store.get(collections.TASKS), "parent_task_id", task_id):
            raise DependencyExistsError("Cannot delete task: it has child tasks")

    def ensure_team_deletable(self, team_id: str) -> None:
        if _any(self.store.get(collections.TEAM_MEMBERS), "team_id", team_id):
            raise DependencyExistsError("Cannot delete team that has members")

    # ── Cascades & soft-reference clears ─────────────────────────────────

    def cascade_task(self, task_id: str) -> dict[str, list[dict]]:
        """Remove every join/child row pointing at ``task_id``.

        Predecessor links are removed in both directions. Returns the removed
        records keyed by collection name (empty collections omitted).
        """
        removed: dict[str, list[dict]] = {}
        for name, fields in _TASK_CASCADE:
            records = self.store.get(name)
            kept, dropped = [], []
            for record in records:
                if any(record.get(field) == task_id for field in fields):
                    dropped.append(record)
                else:
                    kept.append(record)
            if dropped:
                records[:] = kept
                removed[name] = dropped
        if removed:
            logger.debug(
                "Task cascade removed dependents",
                extra={"operation": "cascade_task", "entity_id": task_id,
                       "removed": {name: len(rows) for name, rows in removed.items()}},
            )
        return removed

    def _clear_soft_reference(self, field: str, target_id: str) -> list[dict]:
        changed = []
        for organization in self.store.get(collections.ORGANIZATIONS):
            if organization.get(field) == target_id:
                organization[field] = None
                changed.append(organization)
        return changed

    def clear_root_department(self, department_id: str) -> list[dict]:
        """Unset ``root_department_id`` on organizations pointing at the department."""
        return self._clear_soft_reference("root_department_id", department_id)

    def clear_root_staff(self, staff_id: str) -> list[dict]:
        """Unset ``root_staff_id`` on organizations pointing at the staff member."""
        return self._clear_soft_reference("root_staff_id", staff_id)
