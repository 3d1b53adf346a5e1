from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import FingerprintEnrollment
from .repository import FingerprintRepository


class MySQLFingerprintRepository(FingerprintRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: int) -> Optional[FingerprintEnrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, template_ref, is_active, created_at, updated_at
                FROM fingerprint_enrollments
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return FingerprintEnrollment(
                user_id=int(r["user_id"]),
                template_ref=r["template_ref"],
                is_active=bool(r["is_active"]),
                created_at=r["created_at"],
                updated_at=r["updated_at"],
            )

    def upsert(self, *, user_id: int, template_ref: str, now: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO fingerprint_enrollments(user_id, template_ref, is_active, created_at, updated_at)
                VALUES(%s,%s,1,%s,%s)
                ON DUPLICATE KEY UPDATE template_ref=VALUES(template_ref), is_active=1, updated_at=VALUES(updated_at)
                """,
                (int(user_id), template_ref, now, now),
            )

    def delete(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM fingerprint_enrollments WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0
