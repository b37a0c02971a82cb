"""
Reference validators: foreign-key existence and ownership checks.

Services call these before mutating anything and stop at the first
violation. The call order inside each service is fixed (existence before
relational checks before date ordering) so error messages are deterministic.

Usage:
    org = require_reference(store.get(ORGANIZATIONS), data["organization_id"],
                            "Organization not found")
    if not belongs_to_organization(parent, org["id"]):
        raise InvalidReferenceError("Parent department must belong to the same organization")
"""

from bumasys.core.exceptions import InvalidOrderingError, InvalidReferenceError
from bumasys.utils.helpers import parse_timestamp

# (start field, end field, error message) for entities carrying date pairs
DATE_PAIRS = (
    ("planned_start_date", "planned_end_date",
     "Planned start date must be before planned end date"),
    ("actual_start_date", "actual_end_date",
     "Actual start date must be before actual end date"),
)


def find_by_id(collection: list[dict], record_id) -> dict | None:
    if record_id is None:
        return None
    for record in collection:
        if record.get("id") == record_id:
            return record
    return None


def exists(collection: list[dict], record_id) -> bool:
    return find_by_id(collection, record_id) is not None


def require_reference(collection: list[dict], record_id, message: str) -> dict:
    """Return the referenced record or raise InvalidReferenceError(message)."""
    record = find_by_id(collection, record_id)
    if record is None:
        raise InvalidReferenceError(message)
    return record


def belongs_to_organization(record: dict | None, organization_id) -> bool:
    return record is not None and record.get("organization_id") == organization_id


def belongs_to_project(task: dict | None, project_id) -> bool:
    return task is not None and task.get("project_id") == project_id


def check_date_order(start, end, message: str) -> None:
    """Raise InvalidOrderingError unless ``start`` is strictly before ``end``.

    Nothing to check unless both values are present.
    """
    start_at = parse_timestamp(start, "start date")
    end_at = parse_timestamp(end, "end date")
    if start_at is None or end_at is None:
        return
    if start_at >= end_at:
        raise InvalidOrderingError(message)


def check_date_pairs(merged: dict) -> None:
    """Apply ``check_date_order`` to the planned and actual pairs of a record."""
    for start_field, end_field, message in DATE_PAIRS:
        check_date_order(merged.get(start_field), merged.get(end_field), message)
