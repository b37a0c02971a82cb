"""
Uniqueness guard for names and emails within one collection.

Case policy is chosen per call site and kept exactly as the product has
always behaved:

    case-insensitive   status / priority / complexity / team names
    case-sensitive     staff emails, user emails, organization names
"""

from bumasys.core.exceptions import ConflictError


def _normalize(value, case_sensitive: bool):
    if not case_sensitive and isinstance(value, str):
        return value.casefold()
    return value


def is_unique(
    collection: list[dict],
    field: str,
    value,
    case_sensitive: bool,
    exclude_id: str | None = None,
) -> bool:
    """True when no record other than ``exclude_id`` has ``field`` equal to ``value``."""
    wanted = _normalize(value, case_sensitive)
    for record in collection:
        if exclude_id is not None and record.get("id") == exclude_id:
            continue
        if _normalize(record.get(field), case_sensitive) == wanted:
            return False
    return True


def ensure_unique(
    collection: list[dict],
    field: str,
    value,
    *,
    case_sensitive: bool,
    message: str,
    exclude_id: str | None = None,
) -> None:
    """Raise ConflictError with ``message`` when ``value`` is already taken."""
    if not is_unique(collection, field, value, case_sensitive, exclude_id):
        raise ConflictError(message, details={field: value})
