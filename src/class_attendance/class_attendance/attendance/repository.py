from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import Attendance, AttendanceHistoryRow


class AttendanceRepository(Protocol):
    def insert(
        self,
        *,
        student_id: int,
        session_id: int,
        marked_at: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        """Insert-if-absent keyed on (student_id, session_id).

        A second row for the pair is rejected by the unique key with DuplicateKeyError;
        there is no separate existence check.
        """

        raise NotImplementedError

    def upsert(
        self,
        *,
        student_id: int,
        session_id: int,
        marked_at: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        """Teacher override: create or overwrite the row for the pair."""

        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[Attendance]:
        raise NotImplementedError

    def list_for_sessions(self, session_ids: Sequence[int]) -> Sequence[Attendance]:
        raise NotImplementedError

    def list_history(
        self,
        *,
        student_id: int,
        class_id: Optional[int] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[AttendanceHistoryRow]:
        raise NotImplementedError

    def count_history(self, *, student_id: int, class_id: Optional[int] = None) -> int:
        raise NotImplementedError
