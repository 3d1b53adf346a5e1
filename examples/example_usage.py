"""Example: drive the service layer directly (no Flask).

Runs one class session against the database configured by APP_ENV, using
the demo seed (teacher 100 owns class 1; student 201 is enrolled with a
device key).
"""

import importlib

from config import get_settings_module

from src.class_attendance.class_attendance.biometrics.verifier import sign_attestation
from src.class_attendance.class_attendance.container import build_container
from src.class_attendance.class_attendance.core.enums import Role


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    now = container.clock.now()

    session = container.session_manager.start(1, 100, now)
    token = sign_attestation(201, "demo-device-key-201-change-me", issued_at=now)
    result = container.attendance_recorder.mark(201, session.session_id, token, now, caller_id=201)
    print(result.attendance.status.value, result.session_code)

    container.session_manager.stop(session.session_id, 100, container.clock.now())
    print(container.analytics_service.class_statistics(1, caller_id=100, caller_role=Role.TEACHER))


if __name__ == "__main__":
    main()
