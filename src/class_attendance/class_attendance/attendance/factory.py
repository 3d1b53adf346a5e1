from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import minutes_between
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def minutes_late(self, *, session_start: datetime, now: datetime) -> int:
        return max(minutes_between(session_start, now), 0)

    def for_mark(self, *, minutes_late: int, late_threshold_minutes: int) -> AttendanceStrategy:
        if minutes_late > late_threshold_minutes:
            return LateStrategy()
        return PresentStrategy()
