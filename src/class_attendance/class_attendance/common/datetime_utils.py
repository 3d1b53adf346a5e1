from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Protocol

from ..core.exceptions import ValidationError


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Current local time.

    Note: Injected instead of calling datetime.now() so tests can pin the time.
    """

    def now(self) -> datetime:
        return datetime.now()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open [start, end) datetime range covering one calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes elapsed from start to end (floored)."""
    return int((end - start).total_seconds() // 60)
