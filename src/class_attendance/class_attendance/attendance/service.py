from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..biometrics.repository import FingerprintRepository
from ..biometrics.verifier import BiometricVerifier
from ..classes.repository import ClassRepository
from ..common.validators import optional_text, parse_status, require_max_length
from ..core.constants import (
    ATTENDANCE_STUDENT_SESSION_KEY,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    MAX_HISTORY_LIMIT,
    MAX_NOTES_LENGTH,
)
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import (
    AlreadyMarked,
    BiometricVerificationFailed,
    DomainError,
    DuplicateKeyError,
    FingerprintNotEnrolled,
    Forbidden,
    NotEnrolled,
    NotFound,
    SessionNotFoundOrExpired,
)
from ..sessions.service import SessionManager
from .factory import AttendanceStrategyFactory
from .model import Attendance, HistoryPage, MarkResult, RosterEntry, SessionRoster
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """Owns the check-in protocol.

    mark() runs its gates in a fixed order and stops at the first failure, so
    callers always get the same, least revealing error for a given request:

    1. caller is the student (Forbidden "self-only")
    2. fingerprint enrollment is active (FingerprintNotEnrolled)
    3. biometric token verifies (BiometricVerificationFailed)
    4. session is the class's open session (SessionNotFoundOrExpired)
    5. student is on the class roster (NotEnrolled)
    6. atomic insert, unique on (student, session) (AlreadyMarked)
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionManager,
        classes: ClassRepository,
        enrollments: FingerprintRepository,
        verifier: BiometricVerifier,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._classes = classes
        self._enrollments = enrollments
        self._verifier = verifier
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._late_threshold = int(late_threshold_minutes)

    def mark(
        self,
        student_id: int,
        session_id: Optional[int],
        biometric_token: str,
        now: datetime,
        *,
        caller_id: int,
    ) -> MarkResult:
        try:
            return self._mark(int(student_id), session_id, biometric_token, now, caller_id=int(caller_id))
        except DomainError as e:
            logger.info("Mark rejected for student %s, session %s: %s", student_id, session_id, e.code)
            raise

    def mark_by_code(
        self,
        student_id: int,
        code: str,
        biometric_token: str,
        now: datetime,
        *,
        caller_id: int,
    ) -> MarkResult:
        """Join-and-mark: resolve a session code, then run the regular gates."""

        session = self._sessions.find_open_by_code(code, now) if code else None
        return self.mark(
            student_id,
            session.session_id if session else None,
            biometric_token,
            now,
            caller_id=caller_id,
        )

    def _mark(
        self,
        student_id: int,
        session_id: Optional[int],
        biometric_token: str,
        now: datetime,
        *,
        caller_id: int,
    ) -> MarkResult:
        if caller_id != student_id:
            raise Forbidden("Can only mark attendance for yourself", detail="self-only")

        enrollment = self._enrollments.get(student_id)
        if not enrollment or not enrollment.is_active:
            raise FingerprintNotEnrolled()

        if not self._verifier.verify(student_id, biometric_token):
            raise BiometricVerificationFailed()

        session = self._sessions.find(session_id)
        active = self._sessions.active_for(session.class_id, now) if session else None
        if not active or active.session_id != session.session_id:
            raise SessionNotFoundOrExpired()

        class_section = self._classes.get_by_id(active.class_id)
        if not class_section or not class_section.has_student(student_id):
            raise NotEnrolled()

        minutes_late = self._factory.minutes_late(session_start=active.start_time, now=now)
        strategy = self._factory.for_mark(minutes_late=minutes_late, late_threshold_minutes=self._late_threshold)
        decision = strategy.decide_mark(minutes_late=minutes_late)

        try:
            attendance_id = self._attendance.insert(
                student_id=student_id,
                session_id=active.session_id,
                marked_at=now,
                status=decision.status,
                notes=decision.note,
            )
        except DuplicateKeyError as e:
            if e.key == ATTENDANCE_STUDENT_SESSION_KEY:
                raise AlreadyMarked() from e
            raise

        logger.info(
            "Attendance marked: student %s, session %s, class %s, status %s",
            student_id,
            active.session_id,
            active.class_id,
            decision.status.value,
        )
        return MarkResult(
            attendance=Attendance(
                attendance_id=attendance_id,
                student_id=student_id,
                session_id=active.session_id,
                marked_at=now,
                status=decision.status,
                notes=decision.note,
            ),
            class_id=class_section.class_id,
            class_name=class_section.name,
            session_code=active.code,
            minutes_late=minutes_late,
        )

    def override(
        self,
        student_id: int,
        session_id: int,
        status,
        notes: Optional[str],
        teacher_id: int,
        now: datetime,
    ) -> Attendance:
        """Teacher path: create or overwrite a row, bypassing the student gates.

        The only way to store EXCUSED or an explicit ABSENT.
        """

        status = parse_status(status)
        notes = optional_text(notes, "notes")
        require_max_length(notes, "notes", MAX_NOTES_LENGTH)

        session = self._sessions.find(session_id)
        if not session or session.teacher_id != int(teacher_id):
            raise NotFound("Session not found")

        attendance_id = self._attendance.upsert(
            student_id=int(student_id),
            session_id=session.session_id,
            marked_at=now,
            status=status,
            notes=notes,
        )
        logger.info(
            "Attendance override by teacher %s: student %s, session %s, status %s",
            teacher_id,
            student_id,
            session.session_id,
            status.value,
        )
        return Attendance(
            attendance_id=attendance_id,
            student_id=int(student_id),
            session_id=session.session_id,
            marked_at=now,
            status=status,
            notes=notes,
        )

    def session_roster(self, session_id: int, *, caller_id: int, caller_role: Role) -> SessionRoster:
        """Every enrolled student with their stored status, or the derived ABSENT."""

        if caller_role == Role.STUDENT:
            raise Forbidden("Access denied")

        session = self._sessions.find(session_id)
        if not session or (caller_role == Role.TEACHER and session.teacher_id != int(caller_id)):
            raise NotFound("Session not found")

        class_section = self._classes.get_by_id(session.class_id)
        roster_ids = set(class_section.student_ids) if class_section else set()
        rows = {a.student_id: a for a in self._attendance.list_for_session(session.session_id)}

        entries: list[RosterEntry] = []
        for student_id in sorted(roster_ids | set(rows)):
            row = rows.get(student_id)
            entries.append(
                RosterEntry(
                    student_id=student_id,
                    status=row.status if row else AttendanceStatus.ABSENT,
                    attendance=row,
                )
            )
        return SessionRoster(
            session=session,
            class_name=class_section.name if class_section else "",
            entries=entries,
        )

    def history(
        self,
        student_id: int,
        *,
        caller_id: int,
        caller_role: Role,
        class_id: Optional[int] = None,
        page: int = 1,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> HistoryPage:
        if caller_role == Role.STUDENT and int(caller_id) != int(student_id):
            raise Forbidden("Can only view your own attendance history", detail="self-only")

        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_HISTORY_LIMIT)
        items = self._attendance.list_history(
            student_id=int(student_id),
            class_id=class_id,
            limit=limit,
            offset=(page - 1) * limit,
        )
        total = self._attendance.count_history(student_id=int(student_id), class_id=class_id)
        return HistoryPage(items=list(items), page=page, limit=limit, total=total)
