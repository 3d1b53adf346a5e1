from __future__ import annotations

import pytest

from src.class_attendance.class_attendance.core.exceptions import Forbidden, NotFound, ValidationError

STUDENT_A = 201
NEW_USER = 300


def test_enroll_and_status(container, clock):
    service = container.biometric_service
    assert service.status(NEW_USER).enrolled is False

    enrollment = service.enroll(NEW_USER, "  key-300 ", caller_id=NEW_USER)

    assert enrollment.template_ref == "key-300"
    assert enrollment.is_active is True
    status = service.status(NEW_USER)
    assert status.enrolled is True
    assert status.active is True
    assert status.enrolled_at == clock.now()
    assert service.get_enrollment(NEW_USER) == enrollment


def test_enroll_is_self_only(container):
    with pytest.raises(Forbidden):
        container.biometric_service.enroll(NEW_USER, "key", caller_id=STUDENT_A)


def test_enroll_validates_template(container):
    with pytest.raises(ValidationError):
        container.biometric_service.enroll(NEW_USER, "   ", caller_id=NEW_USER)
    with pytest.raises(ValidationError):
        container.biometric_service.enroll(NEW_USER, "k" * 513, caller_id=NEW_USER)


def test_remove(container):
    service = container.biometric_service
    service.remove(STUDENT_A)

    assert service.status(STUDENT_A).enrolled is False
    with pytest.raises(NotFound):
        service.remove(STUDENT_A)
