from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .analytics.service import AnalyticsService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceRecorder
from .biometrics.mysql_fingerprint_repository import MySQLFingerprintRepository
from .biometrics.repository import FingerprintRepository
from .biometrics.service import BiometricService
from .biometrics.verifier import BiometricVerifier, SignedTokenVerifier
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .common.datetime_utils import Clock, SystemClock
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionManager


@dataclass(frozen=True)
class Container:
    clock: Clock

    classes_repo: ClassRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    fingerprints_repo: FingerprintRepository
    verifier: BiometricVerifier

    session_manager: SessionManager
    attendance_recorder: AttendanceRecorder
    biometric_service: BiometricService
    analytics_service: AnalyticsService

    conn: Optional[DatabaseConnection] = None


def _setting(settings: Any, name: str, default):
    return getattr(settings, name, default) if settings is not None else default


def assemble(
    *,
    classes_repo: ClassRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    fingerprints_repo: FingerprintRepository,
    clock: Clock,
    settings: Any = None,
    verifier: Optional[BiometricVerifier] = None,
    code_generator=None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    verifier = verifier or SignedTokenVerifier(
        fingerprints_repo,
        clock=clock,
        max_age_seconds=_setting(
            settings, "BIOMETRIC_TOKEN_MAX_AGE_SECONDS", constants.DEFAULT_BIOMETRIC_TOKEN_MAX_AGE_SECONDS
        ),
        algorithm=_setting(settings, "BIOMETRIC_TOKEN_ALGORITHM", constants.DEFAULT_BIOMETRIC_TOKEN_ALGORITHM),
    )

    manager_kwargs = {
        "window_minutes": _setting(settings, "SESSION_WINDOW_MINUTES", constants.DEFAULT_SESSION_WINDOW_MINUTES),
        "code_length": _setting(settings, "SESSION_CODE_LENGTH", constants.DEFAULT_SESSION_CODE_LENGTH),
        "code_max_attempts": _setting(
            settings, "SESSION_CODE_MAX_ATTEMPTS", constants.DEFAULT_SESSION_CODE_MAX_ATTEMPTS
        ),
    }
    if code_generator is not None:
        manager_kwargs["code_generator"] = code_generator
    session_manager = SessionManager(sessions_repo, classes_repo, **manager_kwargs)

    attendance_recorder = AttendanceRecorder(
        attendance_repo,
        session_manager,
        classes_repo,
        fingerprints_repo,
        verifier,
        strategy_factory=AttendanceStrategyFactory(),
        late_threshold_minutes=_setting(settings, "LATE_THRESHOLD_MINUTES", constants.DEFAULT_LATE_THRESHOLD_MINUTES),
    )
    biometric_service = BiometricService(fingerprints_repo, verifier)
    analytics_service = AnalyticsService(
        sessions_repo,
        attendance_repo,
        classes_repo,
        trend_days=_setting(settings, "TREND_DAYS", constants.DEFAULT_TREND_DAYS),
    )

    return Container(
        clock=clock,
        classes_repo=classes_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        fingerprints_repo=fingerprints_repo,
        verifier=verifier,
        session_manager=session_manager,
        attendance_recorder=attendance_recorder,
        biometric_service=biometric_service,
        analytics_service=analytics_service,
        conn=conn,
    )


def build_container(*, db_config: dict, settings: Any = None, clock: Optional[Clock] = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return assemble(
        classes_repo=MySQLClassRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        fingerprints_repo=MySQLFingerprintRepository(conn),
        clock=clock or SystemClock(),
        settings=settings,
        conn=conn,
    )
