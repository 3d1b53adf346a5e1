from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Session


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def find_active_for_class(self, class_id: int) -> Optional[Session]:
        """Row with is_active=1 for the class, expired or not."""

        raise NotImplementedError

    def find_active_by_code(self, code: str) -> Optional[Session]:
        raise NotImplementedError

    def insert_active(
        self,
        *,
        class_id: int,
        teacher_id: int,
        code: str,
        start_time: datetime,
        expires_at: datetime,
    ) -> int:
        """Conditional insert guarded by the active-class and active-code unique keys.

        Raises DuplicateKeyError naming the rejected key.
        """

        raise NotImplementedError

    def retire_expired(self, *, class_id: int, now: datetime) -> int:
        """Close active rows whose window has passed (end_time=expires_at)."""

        raise NotImplementedError

    def close(self, *, session_id: int, end_time: datetime, teacher_id: Optional[int] = None) -> bool:
        """Close an active session. False if no such row.

        With teacher_id set, only a session owned by that teacher is closed.
        """

        raise NotImplementedError

    def list_active(
        self,
        *,
        class_ids: Optional[Sequence[int]] = None,
        teacher_id: Optional[int] = None,
    ) -> Sequence[Session]:
        raise NotImplementedError

    def list_recent(
        self,
        *,
        teacher_id: Optional[int] = None,
        is_active: Optional[bool] = None,
        limit: int = 100,
    ) -> Sequence[Session]:
        """Newest first by start_time, at most limit rows."""

        raise NotImplementedError

    def list_started_between(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        class_ids: Optional[Sequence[int]] = None,
        teacher_id: Optional[int] = None,
    ) -> Sequence[Session]:
        """Sessions with start <= start_time < end. A None bound is open."""

        raise NotImplementedError
