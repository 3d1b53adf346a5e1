from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, late_note


class LateStrategy(AttendanceStrategy):
    """Check-in past the late threshold."""

    def decide_mark(self, *, minutes_late: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, note=late_note(minutes_late))
