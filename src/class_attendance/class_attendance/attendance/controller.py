from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_role, current_user_id, login_required, roles_required
from ..common.validators import require_non_empty, require_positive_int
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role
from ..sessions.controller import session_to_dict
from .model import Attendance, MarkResult


def attendance_to_dict(a: Attendance) -> dict:
    return {
        "id": a.attendance_id,
        "studentId": a.student_id,
        "sessionId": a.session_id,
        "markedAt": a.marked_at.isoformat(),
        "status": a.status.value,
        "notes": a.notes,
    }


def _mark_response(result: MarkResult):
    body = attendance_to_dict(result.attendance)
    body.update(
        {
            "classId": result.class_id,
            "className": result.class_name,
            "sessionCode": result.session_code,
            "minutesLate": result.minutes_late,
        }
    )
    return jsonify({"message": "Attendance marked", "attendance": body}), 201


def register(app: Flask, container: Container) -> None:
    recorder = container.attendance_recorder

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    @roles_required(Role.STUDENT)
    def mark():
        data = request.get_json(silent=True) or {}
        caller_id = current_user_id()
        student_id = require_positive_int(data.get("studentId", caller_id), "studentId")
        session_id = require_positive_int(data.get("sessionId"), "sessionId")
        result = recorder.mark(
            student_id,
            session_id,
            data.get("biometricToken") or "",
            container.clock.now(),
            caller_id=caller_id,
        )
        return _mark_response(result)

    @app.route("/api/attendance/join", methods=["POST"], endpoint="api_attendance_join")
    @roles_required(Role.STUDENT)
    def join():
        data = request.get_json(silent=True) or {}
        code = require_non_empty(data.get("code"), "code")
        caller_id = current_user_id()
        result = recorder.mark_by_code(
            caller_id,
            code,
            data.get("biometricToken") or "",
            container.clock.now(),
            caller_id=caller_id,
        )
        return _mark_response(result)

    @app.route("/api/attendance/override", methods=["PUT"], endpoint="api_attendance_override")
    @roles_required(Role.TEACHER)
    def override():
        data = request.get_json(silent=True) or {}
        a = recorder.override(
            require_positive_int(data.get("studentId"), "studentId"),
            require_positive_int(data.get("sessionId"), "sessionId"),
            data.get("status"),
            data.get("notes"),
            current_user_id(),
            container.clock.now(),
        )
        return jsonify({"message": "Attendance updated", "attendance": attendance_to_dict(a)})

    @app.route("/api/attendance/session/<int:session_id>", methods=["GET"], endpoint="api_attendance_session")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def session_roster(session_id: int):
        roster = recorder.session_roster(session_id, caller_id=current_user_id(), caller_role=current_role())
        entries = [
            {
                "studentId": e.student_id,
                "status": e.status.value,
                "derived": e.is_derived,
                "attendance": attendance_to_dict(e.attendance) if e.attendance else None,
            }
            for e in roster.entries
        ]
        return jsonify(
            {
                "session": session_to_dict(roster.session, container.clock.now()),
                "className": roster.class_name,
                "attendance": entries,
            }
        )

    @app.route("/api/attendance/history/<int:student_id>", methods=["GET"], endpoint="api_attendance_history")
    @login_required
    def history(student_id: int):
        class_id = request.args.get("classId", type=int)
        page = request.args.get("page", default=1, type=int)
        limit = request.args.get("limit", default=DEFAULT_HISTORY_LIMIT, type=int)
        result = recorder.history(
            student_id,
            caller_id=current_user_id(),
            caller_role=current_role(),
            class_id=class_id,
            page=page,
            limit=limit,
        )
        items = []
        for row in result.items:
            item = attendance_to_dict(row.attendance)
            item.update(
                {
                    "classId": row.class_id,
                    "sessionCode": row.session_code,
                    "sessionStart": row.session_start.isoformat(),
                }
            )
            items.append(item)
        return jsonify(
            {
                "attendance": items,
                "pagination": {
                    "page": result.page,
                    "limit": result.limit,
                    "total": result.total,
                    "pages": result.pages,
                },
            }
        )
