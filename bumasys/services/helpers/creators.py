"""
Creator resolution for task progress and task status reports.

A report's creator, when set, must be a staff member who either is assigned
to the task or is its evaluator:

    explicit creator_id      must exist and qualify, else the call fails
    caller email only        a qualifying staff member with that email
                             becomes the creator
    neither / no match       creator stays unset
"""

from bumasys.core.exceptions import UnauthorizedError
from bumasys.services.helpers.references import require_reference
from bumasys.store.base import STAFF, TASK_ASSIGNEES
from bumasys.store.base import Store


def can_report_on(store: Store, task: dict, staff_id: str) -> bool:
    """True when ``staff_id`` is the task's evaluator or one of its assignees."""
    if task.get("evaluator_id") == staff_id:
        return True
    return any(
        a["task_id"] == task["id"] and a["staff_id"] == staff_id
        for a in store.get(TASK_ASSIGNEES)
    )


def check_creator(store: Store, task: dict, creator_id: str) -> str:
    require_reference(store.get(STAFF), creator_id, "Creator staff not found")
    if not can_report_on(store, task, creator_id):
        raise UnauthorizedError("Creator must be assigned to the task or be the evaluator")
    return creator_id


def resolve_creator(
    store: Store,
    task: dict,
    creator_id: str | None = None,
    caller_email: str | None = None,
) -> str | None:
    """Return the effective creator id for a new report on ``task``."""
    if creator_id:
        return check_creator(store, task, creator_id)
    if caller_email:
        for staff in store.get(STAFF):
            if staff.get("email") == caller_email and can_report_on(store, task, staff["id"]):
                return staff["id"]
    return None
