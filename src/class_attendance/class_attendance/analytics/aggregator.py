"""Pure read-side transforms over sessions and attendance rows.

Nothing here reads a clock or touches storage; callers pass the rows for the
scope they care about and, for trends, the reference ``now``.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from ..attendance.model import Attendance
from ..classes.model import ClassSection
from ..core.constants import DEFAULT_TREND_DAYS
from ..core.enums import AttendanceStatus
from ..sessions.model import Session
from .model import ClassSize, ClassStatistics, DailyRate, SessionBreakdown, StudentSummary


def _rate(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def _status_counts(rows: Iterable[Attendance]) -> Counter:
    return Counter(r.status for r in rows)


def daily_trend(
    sessions: Sequence[Session],
    rows: Sequence[Attendance],
    *,
    now: datetime,
    days: int = DEFAULT_TREND_DAYS,
) -> list[DailyRate]:
    """One entry per calendar day, oldest first, ending on now's date.

    rate = PRESENT rows / all rows for sessions starting that day.
    """

    days = max(int(days), 1)
    session_day = {s.session_id: s.start_time.date() for s in sessions}

    present: Counter = Counter()
    total: Counter = Counter()
    for r in rows:
        day = session_day.get(r.session_id)
        if day is None:
            continue
        total[day] += 1
        if r.status == AttendanceStatus.PRESENT:
            present[day] += 1

    today = now.date()
    out: list[DailyRate] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        out.append(
            DailyRate(
                day=day,
                present_count=present[day],
                total_count=total[day],
                rate=_rate(present[day], total[day]),
            )
        )
    return out


def class_distribution(classes: Sequence[ClassSection]) -> list[ClassSize]:
    return [
        ClassSize(class_id=c.class_id, name=c.name, code=c.code, enrolled_count=c.enrolled_count)
        for c in classes
    ]


def student_summary(student_id: int, sessions: Sequence[Session], rows: Sequence[Attendance]) -> StudentSummary:
    """Summary over ``sessions``, the student's in-scope sessions.

    Rows for other students or for sessions outside the scope are ignored.
    """

    session_ids = {s.session_id for s in sessions}
    counts = _status_counts(
        r for r in rows if r.student_id == int(student_id) and r.session_id in session_ids
    )

    total = len(session_ids)
    present = counts[AttendanceStatus.PRESENT]
    late = counts[AttendanceStatus.LATE]
    excused = counts[AttendanceStatus.EXCUSED]
    return StudentSummary(
        student_id=int(student_id),
        total_sessions=total,
        present_count=present,
        late_count=late,
        excused_count=excused,
        absent_count=max(total - present - late - excused, 0),
        attendance_rate=_rate(present + late, total),
    )


def class_statistics(
    class_section: ClassSection,
    sessions: Sequence[Session],
    rows: Sequence[Attendance],
) -> ClassStatistics:
    """overall_attendance_rate = PRESENT rows / (sessions x enrolled students).

    Rows for students not on the roster are ignored, so the rate stays in [0, 1].
    """

    enrolled = class_section.enrolled_count
    by_session: dict[int, list[Attendance]] = {s.session_id: [] for s in sessions}
    for r in rows:
        if r.session_id in by_session and class_section.has_student(r.student_id):
            by_session[r.session_id].append(r)

    breakdown: list[SessionBreakdown] = []
    totals: Counter = Counter()
    for s in sorted(sessions, key=lambda s: s.start_time):
        counts = _status_counts(by_session[s.session_id])
        totals.update(counts)
        present = counts[AttendanceStatus.PRESENT]
        late = counts[AttendanceStatus.LATE]
        excused = counts[AttendanceStatus.EXCUSED]
        breakdown.append(
            SessionBreakdown(
                session_id=s.session_id,
                code=s.code,
                start_time=s.start_time,
                present_count=present,
                late_count=late,
                excused_count=excused,
                absent_count=max(enrolled - present - late - excused, 0),
            )
        )

    session_count = len(by_session)
    present = totals[AttendanceStatus.PRESENT]
    late = totals[AttendanceStatus.LATE]
    excused = totals[AttendanceStatus.EXCUSED]
    return ClassStatistics(
        class_id=class_section.class_id,
        name=class_section.name,
        session_count=session_count,
        enrolled_count=enrolled,
        present_count=present,
        late_count=late,
        excused_count=excused,
        absent_count=sum(b.absent_count for b in breakdown),
        overall_attendance_rate=_rate(present, session_count * enrolled),
        sessions=breakdown,
    )
