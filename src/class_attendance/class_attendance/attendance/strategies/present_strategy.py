from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, late_note


class PresentStrategy(AttendanceStrategy):
    """Check-in within the late threshold (still noted when not on the dot)."""

    def decide_mark(self, *, minutes_late: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note=late_note(minutes_late))
