from __future__ import annotations

import threading
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from src.class_attendance.class_attendance.attendance.model import Attendance, AttendanceHistoryRow
from src.class_attendance.class_attendance.biometrics.model import FingerprintEnrollment
from src.class_attendance.class_attendance.biometrics.verifier import sign_attestation
from src.class_attendance.class_attendance.classes.model import ClassSection
from src.class_attendance.class_attendance.container import assemble
from src.class_attendance.class_attendance.core.constants import (
    ATTENDANCE_STUDENT_SESSION_KEY,
    SESSIONS_ACTIVE_CLASS_KEY,
    SESSIONS_ACTIVE_CODE_KEY,
)
from src.class_attendance.class_attendance.core.exceptions import DuplicateKeyError
from src.class_attendance.class_attendance.sessions.model import Session

T0 = datetime(2026, 3, 2, 9, 0, 0)

TEACHER_ID = 100
OTHER_TEACHER_ID = 101
ADMIN_ID = 1
STUDENT_A = 201
STUDENT_B = 202
OUTSIDER = 203

DEVICE_KEYS = {
    STUDENT_A: "device-key-201",
    STUDENT_B: "device-key-202",
    OUTSIDER: "device-key-203",
}


class FixedClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


class InMemoryClassRepo:
    def __init__(self, classes=()):
        self._classes = {c.class_id: c for c in classes}

    def get_by_id(self, class_id):
        return self._classes.get(int(class_id))

    def list_all(self):
        return sorted(self._classes.values(), key=lambda c: c.class_id)

    def list_for_student(self, student_id):
        return [c for c in self.list_all() if c.has_student(student_id)]

    def list_for_teacher(self, teacher_id):
        return [c for c in self.list_all() if c.is_owned_by(teacher_id)]


class InMemorySessionRepo:
    """Enforces the active-class and active-code unique keys under a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[int, Session] = {}
        self._next_id = 1

    def add(self, session: Session) -> Session:
        with self._lock:
            self._rows[session.session_id] = session
            self._next_id = max(self._next_id, session.session_id + 1)
        return session

    def get_by_id(self, session_id):
        return self._rows.get(int(session_id))

    def find_active_for_class(self, class_id):
        for s in self._rows.values():
            if s.is_active and s.class_id == int(class_id):
                return s
        return None

    def find_active_by_code(self, code):
        for s in self._rows.values():
            if s.is_active and s.code == code:
                return s
        return None

    def insert_active(self, *, class_id, teacher_id, code, start_time, expires_at):
        with self._lock:
            for s in self._rows.values():
                if s.is_active and s.class_id == int(class_id):
                    raise DuplicateKeyError(SESSIONS_ACTIVE_CLASS_KEY)
                if s.is_active and s.code == code:
                    raise DuplicateKeyError(SESSIONS_ACTIVE_CODE_KEY)
            sid = self._next_id
            self._next_id += 1
            self._rows[sid] = Session(
                session_id=sid,
                class_id=int(class_id),
                teacher_id=int(teacher_id),
                code=code,
                start_time=start_time,
                expires_at=expires_at,
                end_time=None,
                is_active=True,
            )
            return sid

    def _replace(self, s: Session, *, end_time) -> Session:
        closed = Session(
            session_id=s.session_id,
            class_id=s.class_id,
            teacher_id=s.teacher_id,
            code=s.code,
            start_time=s.start_time,
            expires_at=s.expires_at,
            end_time=end_time,
            is_active=False,
        )
        self._rows[s.session_id] = closed
        return closed

    def retire_expired(self, *, class_id, now):
        with self._lock:
            stale = [s for s in self._rows.values() if s.is_active and s.class_id == int(class_id) and s.expires_at <= now]
            for s in stale:
                self._replace(s, end_time=s.expires_at)
            return len(stale)

    def close(self, *, session_id, end_time, teacher_id=None):
        with self._lock:
            s = self._rows.get(int(session_id))
            if not s or not s.is_active:
                return False
            if teacher_id is not None and s.teacher_id != int(teacher_id):
                return False
            self._replace(s, end_time=end_time)
            return True

    def list_active(self, *, class_ids=None, teacher_id=None):
        rows = [s for s in self._rows.values() if s.is_active]
        if class_ids is not None:
            rows = [s for s in rows if s.class_id in set(class_ids)]
        if teacher_id is not None:
            rows = [s for s in rows if s.teacher_id == int(teacher_id)]
        return sorted(rows, key=lambda s: s.start_time, reverse=True)

    def list_recent(self, *, teacher_id=None, is_active=None, limit=100):
        rows = list(self._rows.values())
        if teacher_id is not None:
            rows = [s for s in rows if s.teacher_id == int(teacher_id)]
        if is_active is not None:
            rows = [s for s in rows if s.is_active == is_active]
        return sorted(rows, key=lambda s: s.start_time, reverse=True)[:limit]

    def list_started_between(self, *, start=None, end=None, class_ids=None, teacher_id=None):
        rows = list(self._rows.values())
        if start is not None:
            rows = [s for s in rows if s.start_time >= start]
        if end is not None:
            rows = [s for s in rows if s.start_time < end]
        if class_ids is not None:
            rows = [s for s in rows if s.class_id in set(class_ids)]
        if teacher_id is not None:
            rows = [s for s in rows if s.teacher_id == int(teacher_id)]
        return sorted(rows, key=lambda s: s.start_time)


class InMemoryAttendanceRepo:
    """Enforces the (student_id, session_id) unique key under a lock."""

    def __init__(self, sessions: InMemorySessionRepo):
        self._lock = threading.Lock()
        self._sessions = sessions
        self._rows: dict[tuple[int, int], Attendance] = {}
        self._next_id = 1
        self.insert_calls = 0

    def _store(self, *, student_id, session_id, marked_at, status, notes, attendance_id=None):
        if attendance_id is None:
            attendance_id = self._next_id
            self._next_id += 1
        row = Attendance(
            attendance_id=attendance_id,
            student_id=int(student_id),
            session_id=int(session_id),
            marked_at=marked_at,
            status=status,
            notes=notes,
        )
        self._rows[(row.student_id, row.session_id)] = row
        return attendance_id

    def insert(self, *, student_id, session_id, marked_at, status, notes=None):
        with self._lock:
            self.insert_calls += 1
            if (int(student_id), int(session_id)) in self._rows:
                raise DuplicateKeyError(ATTENDANCE_STUDENT_SESSION_KEY)
            return self._store(
                student_id=student_id, session_id=session_id, marked_at=marked_at, status=status, notes=notes
            )

    def upsert(self, *, student_id, session_id, marked_at, status, notes=None):
        with self._lock:
            existing = self._rows.get((int(student_id), int(session_id)))
            return self._store(
                student_id=student_id,
                session_id=session_id,
                marked_at=marked_at,
                status=status,
                notes=notes,
                attendance_id=existing.attendance_id if existing else None,
            )

    def all(self):
        return list(self._rows.values())

    def list_for_session(self, session_id):
        return sorted((r for r in self._rows.values() if r.session_id == int(session_id)), key=lambda r: r.student_id)

    def list_for_sessions(self, session_ids):
        wanted = {int(s) for s in session_ids}
        return [r for r in self._rows.values() if r.session_id in wanted]

    def _history(self, student_id, class_id):
        out = []
        for r in self._rows.values():
            if r.student_id != int(student_id):
                continue
            s = self._sessions.get_by_id(r.session_id)
            if class_id is not None and s.class_id != int(class_id):
                continue
            out.append(AttendanceHistoryRow(attendance=r, class_id=s.class_id, session_code=s.code, session_start=s.start_time))
        return sorted(out, key=lambda h: h.attendance.marked_at, reverse=True)

    def list_history(self, *, student_id, class_id=None, limit=10, offset=0):
        return self._history(student_id, class_id)[offset : offset + limit]

    def count_history(self, *, student_id, class_id=None):
        return len(self._history(student_id, class_id))


class InMemoryFingerprintRepo:
    def __init__(self):
        self._rows: dict[int, FingerprintEnrollment] = {}

    def get(self, user_id):
        return self._rows.get(int(user_id))

    def upsert(self, *, user_id, template_ref, now):
        existing = self._rows.get(int(user_id))
        self._rows[int(user_id)] = FingerprintEnrollment(
            user_id=int(user_id),
            template_ref=template_ref,
            is_active=True,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )

    def deactivate(self, user_id):
        e = self._rows[int(user_id)]
        self._rows[int(user_id)] = FingerprintEnrollment(
            user_id=e.user_id, template_ref=e.template_ref, is_active=False, created_at=e.created_at, updated_at=e.updated_at
        )

    def delete(self, user_id):
        return self._rows.pop(int(user_id), None) is not None


def default_classes():
    return [
        ClassSection(class_id=1, name="Data Structures", code="CS101", teacher_id=TEACHER_ID, student_ids=frozenset({STUDENT_A, STUDENT_B})),
        ClassSection(class_id=2, name="Operating Systems", code="CS202", teacher_id=OTHER_TEACHER_ID, student_ids=frozenset({STUDENT_B})),
    ]


class SequenceCodes:
    """Deterministic code generator: yields the given codes, then CODE0001, CODE0002, ..."""

    def __init__(self, *codes):
        self._codes = list(codes)
        self._counter = 0

    def __call__(self, length):
        if self._codes:
            return self._codes.pop(0)
        self._counter += 1
        return f"CODE{self._counter:04d}"[:length]


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def classes_repo():
    return InMemoryClassRepo(default_classes())


@pytest.fixture
def sessions_repo():
    return InMemorySessionRepo()


@pytest.fixture
def attendance_repo(sessions_repo):
    return InMemoryAttendanceRepo(sessions_repo)


@pytest.fixture
def fingerprints_repo(clock):
    repo = InMemoryFingerprintRepo()
    for user_id in (STUDENT_A, STUDENT_B, OUTSIDER):
        repo.upsert(user_id=user_id, template_ref=DEVICE_KEYS[user_id], now=clock.now())
    return repo


@pytest.fixture
def settings():
    return SimpleNamespace(
        SECRET_KEY="test-secret",
        DEBUG=False,
        TESTING=True,
        LOG_LEVEL="WARNING",
        SESSION_WINDOW_MINUTES=30,
        LATE_THRESHOLD_MINUTES=15,
        SESSION_CODE_LENGTH=8,
        SESSION_CODE_MAX_ATTEMPTS=5,
        TREND_DAYS=7,
        BIOMETRIC_TOKEN_MAX_AGE_SECONDS=120,
        BIOMETRIC_TOKEN_ALGORITHM="HS256",
    )


@pytest.fixture
def container(classes_repo, sessions_repo, attendance_repo, fingerprints_repo, clock, settings):
    return assemble(
        classes_repo=classes_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        fingerprints_repo=fingerprints_repo,
        clock=clock,
        settings=settings,
        code_generator=SequenceCodes(),
    )


@pytest.fixture
def token_for(clock):
    """Signed attestation for a student, issued at the current clock time."""

    def make(student_id, *, key=None, issued_at=None):
        return sign_attestation(
            student_id,
            key or DEVICE_KEYS[student_id],
            issued_at=issued_at or clock.now(),
        )

    return make


@pytest.fixture
def open_session(container, clock):
    """Session for class 1 started by its teacher at T0."""

    return container.session_manager.start(1, TEACHER_ID, clock.now())
