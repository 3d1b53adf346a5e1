from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import SessionState


@dataclass(frozen=True)
class Session:
    """Domain entity: one time-boxed attendance window for a class.

    Expiry is lazy: a row can still have is_active=True after expires_at has
    passed. Use state()/is_open() rather than is_active when accepting marks.
    """

    session_id: int
    class_id: int
    teacher_id: int
    code: str
    start_time: datetime
    expires_at: datetime
    end_time: Optional[datetime]
    is_active: bool

    def state(self, now: datetime) -> SessionState:
        if not self.is_active:
            return SessionState.CLOSED
        if now >= self.expires_at:
            return SessionState.EXPIRED
        return SessionState.OPEN

    def is_open(self, now: datetime) -> bool:
        return self.state(now) == SessionState.OPEN
