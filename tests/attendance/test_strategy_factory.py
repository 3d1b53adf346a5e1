from datetime import datetime

from src.class_attendance.class_attendance.attendance.factory import AttendanceStrategyFactory
from src.class_attendance.class_attendance.attendance.strategies.late_strategy import LateStrategy
from src.class_attendance.class_attendance.attendance.strategies.present_strategy import PresentStrategy
from src.class_attendance.class_attendance.core.enums import AttendanceStatus


def test_factory_mark_within_threshold_is_present():
    factory = AttendanceStrategyFactory()
    start = datetime(2025, 1, 1, 8, 0, 0)
    minutes = factory.minutes_late(session_start=start, now=datetime(2025, 1, 1, 8, 15, 59))

    strategy = factory.for_mark(minutes_late=minutes, late_threshold_minutes=15)

    assert minutes == 15
    assert isinstance(strategy, PresentStrategy)


def test_factory_mark_after_threshold_is_late():
    factory = AttendanceStrategyFactory()
    start = datetime(2025, 1, 1, 8, 0, 0)
    minutes = factory.minutes_late(session_start=start, now=datetime(2025, 1, 1, 8, 16, 0))

    strategy = factory.for_mark(minutes_late=minutes, late_threshold_minutes=15)

    assert isinstance(strategy, LateStrategy)


def test_minutes_late_never_negative():
    factory = AttendanceStrategyFactory()
    start = datetime(2025, 1, 1, 8, 0, 0)

    assert factory.minutes_late(session_start=start, now=datetime(2025, 1, 1, 7, 59, 0)) == 0


def test_notes_only_when_not_on_time():
    assert PresentStrategy().decide_mark(minutes_late=0).note is None

    decision = PresentStrategy().decide_mark(minutes_late=5)
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.note == "Marked 5 minutes late"

    late = LateStrategy().decide_mark(minutes_late=20)
    assert late.status == AttendanceStatus.LATE
    assert late.note == "Marked 20 minutes late"
