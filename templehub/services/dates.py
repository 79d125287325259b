from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo

from ..config import settings
from ..errors import ValidationError


def _local_zone(tz: Optional[ZoneInfo]) -> ZoneInfo:
    return tz or settings.tz


def to_calendar_date(value: Any, tz: Optional[ZoneInfo] = None) -> date:
    """
    Reduce an ISO-8601 date/datetime (string or object) to the local calendar day.

    - "2025-03-02"                  -> 2025-03-02
    - "2025-03-02T18:30:00"         -> 2025-03-02 (naive = already local)
    - "2025-03-01T23:30:00-05:00"   -> converted into the local zone first
    """
    if value is None:
        raise ValidationError("date is required")

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value
    else:
        raw = str(value).strip()
        if not raw:
            raise ValidationError("date is required")
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            raise ValidationError(f"Invalid date: {value}")

    if dt.tzinfo is not None:
        dt = dt.astimezone(_local_zone(tz))
    return dt.date()


def day_bounds(day: date, tz: Optional[ZoneInfo] = None) -> Tuple[datetime, datetime]:
    """
    [start, end) of a local calendar day as naive UTC datetimes, for columns
    stored with utcnow().
    """
    zone = _local_zone(tz)
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )
