from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class DailyRate:
    day: date
    present_count: int
    total_count: int
    rate: float


@dataclass(frozen=True)
class ClassSize:
    class_id: int
    name: str
    code: str
    enrolled_count: int


@dataclass(frozen=True)
class StudentSummary:
    """Per-student counts over in-scope sessions.

    absent_count is the complement (total - present - late - excused), so
    stored ABSENT override rows and missing rows count the same way.
    """

    student_id: int
    total_sessions: int
    present_count: int
    late_count: int
    excused_count: int
    absent_count: int
    attendance_rate: float


@dataclass(frozen=True)
class SessionBreakdown:
    session_id: int
    code: str
    start_time: datetime
    present_count: int
    late_count: int
    excused_count: int
    absent_count: int


@dataclass(frozen=True)
class ClassStatistics:
    class_id: int
    name: str
    session_count: int
    enrolled_count: int
    present_count: int
    late_count: int
    excused_count: int
    absent_count: int
    overall_attendance_rate: float
    sessions: list[SessionBreakdown]


@dataclass(frozen=True)
class Dashboard:
    total_classes: int
    total_students: int
    sessions_today: int
    open_sessions: int
    trend: list[DailyRate]
    distribution: list[ClassSize]
