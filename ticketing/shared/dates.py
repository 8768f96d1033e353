"""Date helpers shared by repositories and the sequence allocator.

Datetimes are stored in the PocketBase layout (``2025-01-01 08:30:00.000Z``,
always UTC) so that string comparison in filters orders them correctly.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_db_datetime(value: datetime | None) -> str:
    """Format a datetime for storage. Naive values are taken as UTC."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_db_datetime(value: str | datetime | None) -> datetime | None:
    """Parse a stored datetime back into an aware UTC datetime.

    Handles:
    - PocketBase layout: "2025-01-01 08:30:00.123Z"
    - ISO layout: "2025-01-01T08:30:00Z" / "2025-01-01T08:30:00+00:00"
    - Empty strings (PocketBase's value for an unset date field)
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    text = value.strip().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def to_db_date(value: date) -> str:
    """Format a calendar date for storage."""
    return value.isoformat()


def parse_db_date(value: str | date | None) -> date | None:
    """Parse a stored calendar date. Accepts bare dates and PocketBase datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def local_day(moment: datetime, zone: ZoneInfo) -> date:
    """Calendar day of moment in the given timezone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(zone).date()


def day_bounds(day: date, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """UTC bounds [start, end) of a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(UTC), end.astimezone(UTC)
