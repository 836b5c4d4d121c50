"""Date parsing and export formatting.

Everything is rendered in UTC. Naive datetimes are taken to already be UTC.
"""

from datetime import datetime, timezone
from typing import Optional, Union

INPUT_FORMATS = (
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y",
)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Parse a campaign date into an aware UTC datetime.

    Accepts datetime objects, ISO-8601 strings (a trailing ``Z`` is allowed)
    and the importer's own ``MM/DD/YYYY h:mm:ss am`` forms. Returns None for
    empty input and raises ValueError for anything else it can't read.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)

    text = str(value).strip()
    if not text:
        return None

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return to_utc(datetime.fromisoformat(iso_text))
    except ValueError:
        pass

    for fmt in INPUT_FORMATS:
        try:
            return to_utc(datetime.strptime(text.upper(), fmt))
        except ValueError:
            continue

    raise ValueError(f"Unrecognized date: {value!r}")


def format_export_datetime(value: datetime) -> str:
    """Render as ``MM/DD/YYYY hh:mm:ss am|pm`` in UTC."""
    value = to_utc(value)
    hour = value.hour % 12 or 12
    meridiem = "pm" if value.hour >= 12 else "am"
    return f"{value:%m/%d/%Y} {hour:02d}:{value:%M:%S} {meridiem}"
