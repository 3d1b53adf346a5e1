from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import ClassSection
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_rosters(self, cur, class_ids: list[int]) -> dict[int, set[int]]:
        rosters: dict[int, set[int]] = {cid: set() for cid in class_ids}
        if not class_ids:
            return rosters
        cur.execute(
            f"SELECT class_id, student_id FROM class_students WHERE class_id IN ({in_clause(class_ids)})",
            tuple(class_ids),
        )
        for r in fetchall(cur):
            rosters[int(r["class_id"])].add(int(r["student_id"]))
        return rosters

    def _to_models(self, cur, rows) -> list[ClassSection]:
        rosters = self._load_rosters(cur, [int(r["class_id"]) for r in rows])
        return [
            ClassSection(
                class_id=int(r["class_id"]),
                name=r["name"],
                code=r["code"],
                teacher_id=int(r["teacher_id"]),
                student_ids=frozenset(rosters[int(r["class_id"])]),
            )
            for r in rows
        ]

    def get_by_id(self, class_id: int) -> Optional[ClassSection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, name, code, teacher_id FROM classes WHERE class_id=%s",
                (int(class_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return self._to_models(cur, [row])[0]

    def list_all(self) -> Sequence[ClassSection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, code, teacher_id FROM classes ORDER BY class_id ASC")
            return self._to_models(cur, fetchall(cur))

    def list_for_student(self, student_id: int) -> Sequence[ClassSection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.name, c.code, c.teacher_id
                FROM classes c
                JOIN class_students cs ON cs.class_id = c.class_id
                WHERE cs.student_id=%s
                ORDER BY c.class_id ASC
                """,
                (int(student_id),),
            )
            return self._to_models(cur, fetchall(cur))

    def list_for_teacher(self, teacher_id: int) -> Sequence[ClassSection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, name, code, teacher_id FROM classes WHERE teacher_id=%s ORDER BY class_id ASC",
                (int(teacher_id),),
            )
            return self._to_models(cur, fetchall(cur))
