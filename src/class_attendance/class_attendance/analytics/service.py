from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..classes.model import ClassSection
from ..classes.repository import ClassRepository
from ..common.datetime_utils import day_bounds
from ..core.constants import DEFAULT_TREND_DAYS
from ..core.enums import Role
from ..core.exceptions import Forbidden, NotFound, ValidationError
from ..sessions.repository import SessionRepository
from . import aggregator
from .model import ClassSize, ClassStatistics, DailyRate, Dashboard, StudentSummary

logger = logging.getLogger(__name__)


def _datetime_range(start_date: Optional[date], end_date: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive date range -> half-open datetime range."""

    if start_date and end_date and start_date > end_date:
        raise ValidationError("startDate must be on or before endDate")
    start = day_bounds(start_date)[0] if start_date else None
    end = day_bounds(end_date)[1] if end_date else None
    return start, end


class AnalyticsService:
    """Loads sessions and attendance rows for a scope and hands them to the aggregator."""

    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        *,
        trend_days: int = DEFAULT_TREND_DAYS,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._classes = classes
        self._trend_days = int(trend_days)

    def _classes_in_scope(self, caller_id: int, caller_role: Role) -> Sequence[ClassSection]:
        if caller_role == Role.ADMIN:
            return self._classes.list_all()
        if caller_role == Role.TEACHER:
            return self._classes.list_for_teacher(int(caller_id))
        raise Forbidden("Access denied")

    def _rows_for(self, sessions):
        session_ids = [s.session_id for s in sessions]
        return self._attendance.list_for_sessions(session_ids) if session_ids else []

    def daily_trend(
        self,
        *,
        now: datetime,
        caller_id: int,
        caller_role: Role,
        class_id: Optional[int] = None,
        days: Optional[int] = None,
    ) -> list[DailyRate]:
        days = self._trend_days if days is None else int(days)
        if days <= 0:
            raise ValidationError("days must be positive")

        class_ids = [c.class_id for c in self._classes_in_scope(caller_id, caller_role)]
        if class_id is not None:
            if int(class_id) not in class_ids:
                raise NotFound("Class not found")
            class_ids = [int(class_id)]

        start = day_bounds(now.date() - timedelta(days=days - 1))[0]
        end = day_bounds(now.date())[1]
        sessions = self._sessions.list_started_between(start=start, end=end, class_ids=class_ids)
        return aggregator.daily_trend(sessions, self._rows_for(sessions), now=now, days=days)

    def class_distribution(self, *, caller_id: int, caller_role: Role) -> list[ClassSize]:
        return aggregator.class_distribution(self._classes_in_scope(caller_id, caller_role))

    def student_summary(
        self,
        student_id: int,
        *,
        caller_id: int,
        caller_role: Role,
        class_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> StudentSummary:
        """Sessions in scope are those of the classes the student is enrolled in."""

        if caller_role == Role.STUDENT and int(caller_id) != int(student_id):
            raise Forbidden("Can only view your own summary", detail="self-only")

        start, end = _datetime_range(start_date, end_date)
        classes = self._classes.list_for_student(int(student_id))
        if caller_role == Role.TEACHER:
            classes = [c for c in classes if c.is_owned_by(caller_id)]
        class_ids = [c.class_id for c in classes]
        if class_id is not None:
            class_ids = [cid for cid in class_ids if cid == int(class_id)]

        sessions = self._sessions.list_started_between(start=start, end=end, class_ids=class_ids)
        return aggregator.student_summary(int(student_id), sessions, self._rows_for(sessions))

    def class_statistics(
        self,
        class_id: int,
        *,
        caller_id: int,
        caller_role: Role,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ClassStatistics:
        class_section = self._classes.get_by_id(int(class_id))
        if not class_section:
            raise NotFound("Class not found")
        if caller_role == Role.STUDENT:
            raise Forbidden("Access denied")
        if caller_role == Role.TEACHER and not class_section.is_owned_by(caller_id):
            raise Forbidden("You do not own this class", detail="not-owner")

        start, end = _datetime_range(start_date, end_date)
        sessions = self._sessions.list_started_between(start=start, end=end, class_ids=[class_section.class_id])
        return aggregator.class_statistics(class_section, sessions, self._rows_for(sessions))

    def dashboard(self, now: datetime) -> Dashboard:
        """Admin overview across every class."""

        classes = self._classes.list_all()
        today_start, today_end = day_bounds(now.date())
        today = self._sessions.list_started_between(start=today_start, end=today_end)
        open_count = sum(1 for s in self._sessions.list_active() if s.is_open(now))
        students = set()
        for c in classes:
            students.update(c.student_ids)

        trend_start = day_bounds(now.date() - timedelta(days=self._trend_days - 1))[0]
        recent = self._sessions.list_started_between(start=trend_start, end=today_end)
        logger.debug("Dashboard built over %s classes, %s recent sessions", len(classes), len(recent))
        return Dashboard(
            total_classes=len(classes),
            total_students=len(students),
            sessions_today=len(today),
            open_sessions=open_count,
            trend=aggregator.daily_trend(recent, self._rows_for(recent), now=now, days=self._trend_days),
            distribution=aggregator.class_distribution(classes),
        )
