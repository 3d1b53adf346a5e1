from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ClassSection:
    """Domain entity: a course/class with its owner and roster.

    Created by administrative CRUD; the attendance engine only reads it.
    """

    class_id: int
    name: str
    code: str
    teacher_id: int
    student_ids: frozenset[int] = field(default_factory=frozenset)

    def is_owned_by(self, teacher_id: int) -> bool:
        return self.teacher_id == int(teacher_id)

    def has_student(self, student_id: int) -> bool:
        return int(student_id) in self.student_ids

    @property
    def enrolled_count(self) -> int:
        return len(self.student_ids)
