from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.codes import generate_session_code, normalize_session_code
from ..core.constants import (
    DEFAULT_SESSION_CODE_LENGTH,
    DEFAULT_SESSION_CODE_MAX_ATTEMPTS,
    DEFAULT_SESSION_LIST_LIMIT,
    DEFAULT_SESSION_WINDOW_MINUTES,
    MAX_SESSION_LIST_LIMIT,
    SESSIONS_ACTIVE_CLASS_KEY,
    SESSIONS_ACTIVE_CODE_KEY,
)
from ..core.exceptions import (
    DuplicateKeyError,
    Forbidden,
    NotFound,
    SessionAlreadyActive,
    StorageError,
    ValidationError,
)
from .model import Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def _clamp_limit(limit) -> int:
    return min(max(int(limit), 1), MAX_SESSION_LIST_LIMIT)


class SessionManager:
    """Owns the class-session lifecycle: start, stop and the lazy-expiry gate.

    State machine: OPEN -> EXPIRED (derived, now >= expires_at) or
    OPEN -> CLOSED (stored, is_active=0). Both are terminal for marks.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        classes: ClassRepository,
        *,
        window_minutes: int = DEFAULT_SESSION_WINDOW_MINUTES,
        code_length: int = DEFAULT_SESSION_CODE_LENGTH,
        code_max_attempts: int = DEFAULT_SESSION_CODE_MAX_ATTEMPTS,
        code_generator: Callable[[int], str] = generate_session_code,
    ):
        self._sessions = sessions
        self._classes = classes
        self._window = timedelta(minutes=int(window_minutes))
        self._code_length = int(code_length)
        self._code_max_attempts = max(int(code_max_attempts), 1)
        self._code_generator = code_generator

    def start(self, class_id: int, teacher_id: int, now: datetime) -> Session:
        class_section = self._classes.get_by_id(class_id)
        if not class_section:
            raise NotFound("Class not found")
        if not class_section.is_owned_by(teacher_id):
            raise Forbidden("You do not own this class", detail="not-owner")

        # A forgotten session past its window must not block a new one.
        retired = self._sessions.retire_expired(class_id=class_section.class_id, now=now)
        if retired:
            logger.info("Retired %s expired session(s) for class %s", retired, class_section.class_id)

        expires_at = now + self._window
        for attempt in range(1, self._code_max_attempts + 1):
            code = self._code_generator(self._code_length)
            try:
                session_id = self._sessions.insert_active(
                    class_id=class_section.class_id,
                    teacher_id=int(teacher_id),
                    code=code,
                    start_time=now,
                    expires_at=expires_at,
                )
            except DuplicateKeyError as e:
                if e.key == SESSIONS_ACTIVE_CLASS_KEY:
                    raise SessionAlreadyActive() from e
                if e.key == SESSIONS_ACTIVE_CODE_KEY:
                    logger.warning("Session code collision on attempt %s for class %s", attempt, class_section.class_id)
                    continue
                raise

            logger.info(
                "Session %s started for class %s by teacher %s (code=%s, expires_at=%s)",
                session_id,
                class_section.class_id,
                teacher_id,
                code,
                expires_at.isoformat(),
            )
            return Session(
                session_id=session_id,
                class_id=class_section.class_id,
                teacher_id=int(teacher_id),
                code=code,
                start_time=now,
                expires_at=expires_at,
                end_time=None,
                is_active=True,
            )

        raise StorageError(f"Could not allocate a unique session code after {self._code_max_attempts} attempts")

    def stop(self, session_id: int, teacher_id: int, now: datetime) -> Session:
        """Close an active session. Not idempotent: a second stop is NotFound."""

        closed = self._sessions.close(session_id=int(session_id), end_time=now, teacher_id=int(teacher_id))
        if not closed:
            raise NotFound("Active session not found")

        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFound("Active session not found")
        logger.info("Session %s stopped by teacher %s", session_id, teacher_id)
        return session

    def end(self, session_id: int, now: datetime, *, admin_id: Optional[int] = None) -> Session:
        """Admin close of any teacher's session.

        NotFound for an unknown id, ValidationError if it is already closed.
        """

        self.get(session_id)
        if not self._sessions.close(session_id=int(session_id), end_time=now):
            raise ValidationError("Session is already ended")

        logger.info("Session %s ended by admin %s", session_id, admin_id)
        return self.get(session_id)

    def active_for(self, class_id: int, now: datetime) -> Optional[Session]:
        """The open session of a class, or None.

        Sole gate for accepting marks: a stale is_active row past expires_at
        is reported as None.
        """

        session = self._sessions.find_active_for_class(int(class_id))
        if session and session.is_open(now):
            return session
        return None

    def find(self, session_id: Optional[int]) -> Optional[Session]:
        if session_id is None:
            return None
        return self._sessions.get_by_id(int(session_id))

    def get(self, session_id: int) -> Session:
        session = self.find(session_id)
        if not session:
            raise NotFound("Session not found")
        return session

    def find_open_by_code(self, code: str, now: datetime) -> Optional[Session]:
        session = self._sessions.find_active_by_code(normalize_session_code(code))
        if not session:
            return None
        active = self.active_for(session.class_id, now)
        if active and active.session_id == session.session_id:
            return active
        return None

    def open_for_student(self, student_id: int, now: datetime) -> Sequence[Session]:
        class_ids = [c.class_id for c in self._classes.list_for_student(int(student_id))]
        if not class_ids:
            return []
        return [s for s in self._sessions.list_active(class_ids=class_ids) if s.is_open(now)]

    def open_for_teacher(self, teacher_id: int, now: datetime) -> Sequence[Session]:
        return [s for s in self._sessions.list_active(teacher_id=int(teacher_id)) if s.is_open(now)]

    def open_sessions(self, now: datetime) -> Sequence[Session]:
        return [s for s in self._sessions.list_active() if s.is_open(now)]

    def list_for_teacher(self, teacher_id: int, *, limit: int = DEFAULT_SESSION_LIST_LIMIT) -> Sequence[Session]:
        return self._sessions.list_recent(teacher_id=int(teacher_id), limit=_clamp_limit(limit))

    def list_recent(
        self,
        *,
        is_active: Optional[bool] = None,
        limit: int = DEFAULT_SESSION_LIST_LIMIT,
    ) -> Sequence[Session]:
        """Admin listing across all teachers, newest first."""

        return self._sessions.list_recent(is_active=is_active, limit=_clamp_limit(limit))
