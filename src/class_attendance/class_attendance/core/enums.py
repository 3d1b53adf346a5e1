from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles used for authorization."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"


class SessionState(str, Enum):
    """Derived session state.

    Only CLOSED is stored (is_active=0). EXPIRED is computed from expires_at.
    """

    OPEN = "OPEN"
    EXPIRED = "EXPIRED"
    CLOSED = "CLOSED"
