from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import FingerprintEnrollment


class FingerprintRepository(Protocol):
    def get(self, user_id: int) -> Optional[FingerprintEnrollment]:
        raise NotImplementedError

    def upsert(self, *, user_id: int, template_ref: str, now: datetime) -> None:
        """Create the enrollment or replace its template and re-activate it."""

        raise NotImplementedError

    def delete(self, user_id: int) -> bool:
        raise NotImplementedError
