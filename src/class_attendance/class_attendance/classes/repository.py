from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassSection


class ClassRepository(Protocol):
    """Read-only access to classes and rosters."""

    def get_by_id(self, class_id: int) -> Optional[ClassSection]:
        raise NotImplementedError

    def list_all(self) -> Sequence[ClassSection]:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[ClassSection]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[ClassSection]:
        raise NotImplementedError
