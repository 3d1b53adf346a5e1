from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Attendance, AttendanceHistoryRow
from .repository import AttendanceRepository

_COLUMNS = "a.attendance_id, a.student_id, a.session_id, a.marked_at, a.status, a.notes"


def _to_attendance(r: dict) -> Attendance:
    return Attendance(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        session_id=int(r["session_id"]),
        marked_at=r["marked_at"],
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(
        self,
        *,
        student_id: int,
        session_id: int,
        marked_at: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(student_id, session_id, marked_at, status, notes)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(student_id), int(session_id), marked_at, status.value, notes),
            )
            return int(cur.lastrowid)

    def upsert(
        self,
        *,
        student_id: int,
        session_id: int,
        marked_at: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) makes lastrowid report the existing row on update.
            cur.execute(
                """
                INSERT INTO attendance(student_id, session_id, marked_at, status, notes)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    marked_at=VALUES(marked_at),
                    status=VALUES(status),
                    notes=VALUES(notes)
                """,
                (int(student_id), int(session_id), marked_at, status.value, notes),
            )
            return int(cur.lastrowid)

    def list_for_session(self, session_id: int) -> Sequence[Attendance]:
        return self.list_for_sessions([session_id])

    def list_for_sessions(self, session_ids: Sequence[int]) -> Sequence[Attendance]:
        if not session_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance a
                WHERE a.session_id IN ({in_clause(session_ids)})
                ORDER BY a.session_id ASC, a.student_id ASC
                """,
                tuple(int(s) for s in session_ids),
            )
            return [_to_attendance(r) for r in fetchall(cur)]

    def list_history(
        self,
        *,
        student_id: int,
        class_id: Optional[int] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[AttendanceHistoryRow]:
        clauses = ["a.student_id=%s"]
        params: list[object] = [int(student_id)]
        if class_id is not None:
            clauses.append("s.class_id=%s")
            params.append(int(class_id))
        params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, s.class_id, s.code AS session_code, s.start_time AS session_start
                FROM attendance a
                JOIN sessions s ON s.session_id = a.session_id
                WHERE {' AND '.join(clauses)}
                ORDER BY a.marked_at DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params),
            )
            return [
                AttendanceHistoryRow(
                    attendance=_to_attendance(r),
                    class_id=int(r["class_id"]),
                    session_code=r["session_code"],
                    session_start=r["session_start"],
                )
                for r in fetchall(cur)
            ]

    def count_history(self, *, student_id: int, class_id: Optional[int] = None) -> int:
        clauses = ["a.student_id=%s"]
        params: list[object] = [int(student_id)]
        if class_id is not None:
            clauses.append("s.class_id=%s")
            params.append(int(class_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM attendance a
                JOIN sessions s ON s.session_id = a.session_id
                WHERE {' AND '.join(clauses)}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0
