"""Shared utility functions used by services and blueprints."""

import uuid
from datetime import date, datetime, timezone

from bumasys.core.exceptions import ValidationError


def new_id() -> str:
    """Random UUID4 string used as the primary key of every record."""
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value, field: str = "date"):
    """Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Supports:
    - YYYY-MM-DD (midnight UTC)
    - YYYY-MM-DDTHH:MM:SS[.ffffff][+HH:MM|Z] (naive values are taken as UTC)
    - date / datetime objects

    Returns None for empty input; raises ValidationError on bad input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(
                f"Invalid {field} format. Use ISO-8601 (YYYY-MM-DD).",
                details={field: value},
            ) from exc
    else:
        raise ValidationError(f"Invalid {field} format. Use ISO-8601 (YYYY-MM-DD).",
                              details={field: str(value)})
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_blank(value) -> bool:
    """True for None and for strings that are empty after stripping."""
    return value is None or (isinstance(value, str) and not value.strip())
