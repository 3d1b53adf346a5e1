from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Session
from .repository import SessionRepository

_COLUMNS = "session_id, class_id, teacher_id, code, start_time, expires_at, end_time, is_active"


def _to_session(r: dict) -> Session:
    return Session(
        session_id=int(r["session_id"]),
        class_id=int(r["class_id"]),
        teacher_id=int(r["teacher_id"]),
        code=r["code"],
        start_time=r["start_time"],
        expires_at=r["expires_at"],
        end_time=r.get("end_time"),
        is_active=bool(r["is_active"]),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def find_active_for_class(self, class_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE active_class_id=%s",
                (int(class_id),),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def find_active_by_code(self, code: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE active_code=%s", (code,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def insert_active(
        self,
        *,
        class_id: int,
        teacher_id: int,
        code: str,
        start_time: datetime,
        expires_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(class_id, teacher_id, code, start_time, expires_at, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                """,
                (int(class_id), int(teacher_id), code, start_time, expires_at),
            )
            return int(cur.lastrowid)

    def retire_expired(self, *, class_id: int, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET is_active=0, end_time=expires_at
                WHERE class_id=%s AND is_active=1 AND expires_at<=%s
                """,
                (int(class_id), now),
            )
            return int(cur.rowcount)

    def close(self, *, session_id: int, end_time: datetime, teacher_id: Optional[int] = None) -> bool:
        sql = "UPDATE sessions SET is_active=0, end_time=%s WHERE session_id=%s AND is_active=1"
        params: list[object] = [end_time, int(session_id)]
        if teacher_id is not None:
            sql += " AND teacher_id=%s"
            params.append(int(teacher_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return cur.rowcount > 0

    def list_active(
        self,
        *,
        class_ids: Optional[Sequence[int]] = None,
        teacher_id: Optional[int] = None,
    ) -> Sequence[Session]:
        clauses = ["is_active=1"]
        params: list[object] = []

        if class_ids is not None:
            if not class_ids:
                return []
            clauses.append(f"class_id IN ({in_clause(class_ids)})")
            params.extend(int(c) for c in class_ids)
        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE {' AND '.join(clauses)} ORDER BY start_time DESC",
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_recent(
        self,
        *,
        teacher_id: Optional[int] = None,
        is_active: Optional[bool] = None,
        limit: int = 100,
    ) -> Sequence[Session]:
        clauses = ["1=1"]
        params: list[object] = []

        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(1 if is_active else 0)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE {' AND '.join(clauses)} ORDER BY start_time DESC LIMIT %s",
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_started_between(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        class_ids: Optional[Sequence[int]] = None,
        teacher_id: Optional[int] = None,
    ) -> Sequence[Session]:
        clauses = ["1=1"]
        params: list[object] = []

        if start is not None:
            clauses.append("start_time >= %s")
            params.append(start)
        if end is not None:
            clauses.append("start_time < %s")
            params.append(end)
        if class_ids is not None:
            if not class_ids:
                return []
            clauses.append(f"class_id IN ({in_clause(class_ids)})")
            params.extend(int(c) for c in class_ids)
        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE {' AND '.join(clauses)} ORDER BY start_time ASC",
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]
