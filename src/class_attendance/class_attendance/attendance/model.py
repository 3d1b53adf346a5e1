from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from ..sessions.model import Session


@dataclass(frozen=True)
class Attendance:
    """Domain entity: one student's check-in outcome for one session."""

    attendance_id: int
    student_id: int
    session_id: int
    marked_at: datetime
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class MarkResult:
    """Stored row enriched with denormalized session/class identifiers."""

    attendance: Attendance
    class_id: int
    class_name: str
    session_code: str
    minutes_late: int


@dataclass(frozen=True)
class AttendanceHistoryRow:
    """Read-model for the history view (joined with session)."""

    attendance: Attendance
    class_id: int
    session_code: str
    session_start: datetime


@dataclass(frozen=True)
class HistoryPage:
    items: list[AttendanceHistoryRow]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class RosterEntry:
    student_id: int
    status: AttendanceStatus
    attendance: Optional[Attendance] = None

    @property
    def is_derived(self) -> bool:
        """True when the status is the implicit ABSENT (no stored row)."""
        return self.attendance is None


@dataclass(frozen=True)
class SessionRoster:
    session: Session
    class_name: str
    entries: list[RosterEntry]
