from __future__ import annotations

import pytest

from src.class_attendance.class_attendance.core.enums import AttendanceStatus
from src.class_attendance.class_attendance.core.exceptions import NotFound, ValidationError

TEACHER_ID = 100
OTHER_TEACHER_ID = 101
STUDENT_A = 201
STUDENT_B = 202


def _stored(repo, student_id, session_id):
    return next((r for r in repo.list_for_session(session_id) if r.student_id == student_id), None)


def test_override_creates_excused_row(container, clock, attendance_repo, open_session):
    a = container.attendance_recorder.override(
        STUDENT_B, open_session.session_id, "excused", "  Doctor's note ", TEACHER_ID, clock.now()
    )

    assert a.status == AttendanceStatus.EXCUSED
    assert a.notes == "Doctor's note"
    assert _stored(attendance_repo, STUDENT_B, open_session.session_id) == a


def test_override_overwrites_student_mark(container, clock, token_for, attendance_repo, open_session):
    marked = container.attendance_recorder.mark(
        STUDENT_A, open_session.session_id, token_for(STUDENT_A), clock.now(), caller_id=STUDENT_A
    )

    a = container.attendance_recorder.override(
        STUDENT_A, open_session.session_id, AttendanceStatus.ABSENT, None, TEACHER_ID, clock.now()
    )

    assert a.attendance_id == marked.attendance.attendance_id
    assert a.notes is None
    assert _stored(attendance_repo, STUDENT_A, open_session.session_id).status == AttendanceStatus.ABSENT
    assert len(attendance_repo.all()) == 1


def test_override_works_after_session_closed(container, clock, open_session):
    container.session_manager.stop(open_session.session_id, TEACHER_ID, clock.now())
    clock.advance(days=1)

    a = container.attendance_recorder.override(
        STUDENT_B, open_session.session_id, "LATE", "Bus strike", TEACHER_ID, clock.now()
    )
    assert a.status == AttendanceStatus.LATE


def test_override_by_non_owner_is_not_found(container, clock, attendance_repo, open_session):
    with pytest.raises(NotFound):
        container.attendance_recorder.override(
            STUDENT_B, open_session.session_id, "PRESENT", None, OTHER_TEACHER_ID, clock.now()
        )
    assert attendance_repo.all() == []


def test_override_validates_status_and_notes(container, clock, open_session):
    recorder = container.attendance_recorder
    with pytest.raises(ValidationError):
        recorder.override(STUDENT_B, open_session.session_id, "SICK", None, TEACHER_ID, clock.now())
    with pytest.raises(ValidationError):
        recorder.override(STUDENT_B, open_session.session_id, "EXCUSED", "x" * 501, TEACHER_ID, clock.now())


def test_override_unknown_session_is_not_found(container, clock):
    with pytest.raises(NotFound):
        container.attendance_recorder.override(STUDENT_B, 777, "PRESENT", None, TEACHER_ID, clock.now())


@pytest.mark.parametrize("notes", [123, ["late"], {"text": "x"}])
def test_override_rejects_non_string_notes(container, clock, attendance_repo, open_session, notes):
    with pytest.raises(ValidationError):
        container.attendance_recorder.override(STUDENT_B, open_session.session_id, "EXCUSED", notes, TEACHER_ID, clock.now())
    assert attendance_repo.all() == []


def test_override_blank_notes_are_stored_as_none(container, clock, open_session):
    a = container.attendance_recorder.override(STUDENT_B, open_session.session_id, "EXCUSED", "   ", TEACHER_ID, clock.now())

    assert a.notes is None
