"""Time utilities (UTC now, report timestamps, month partitions)."""
from __future__ import annotations
from datetime import datetime, timezone

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def iso_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC with millisecond precision and a `Z` suffix."""
    ts = (moment or utc_now()).astimezone(timezone.utc)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def previous_month(moment: datetime) -> tuple[str, str]:
    """Return (YYYY, MM) of the calendar month before `moment`."""
    if moment.month == 1:
        year, month = moment.year - 1, 12
    else:
        year, month = moment.year, moment.month - 1
    return str(year), f"{month:02d}"

__all__ = ["utc_now", "iso_timestamp", "previous_month"]
