from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..common.auth import current_role, current_user_id, login_required, roles_required
from ..common.validators import require_positive_int
from ..container import Container
from ..core.constants import DEFAULT_SESSION_LIST_LIMIT
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import Session

_STATUS_FILTERS = {"ACTIVE": True, "ENDED": False}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def session_to_dict(s: Session, now: datetime) -> dict:
    return {
        "id": s.session_id,
        "classId": s.class_id,
        "teacherId": s.teacher_id,
        "code": s.code,
        "startTime": _iso(s.start_time),
        "expiresAt": _iso(s.expires_at),
        "endTime": _iso(s.end_time),
        "isActive": s.is_active,
        "state": s.state(now).value,
    }


def register(app: Flask, container: Container) -> None:
    manager = container.session_manager

    @app.route("/api/sessions/start", methods=["POST"], endpoint="api_sessions_start")
    @roles_required(Role.TEACHER)
    def start_session():
        data = request.get_json(silent=True) or {}
        class_id = require_positive_int(data.get("classId"), "classId")
        now = container.clock.now()
        s = manager.start(class_id, current_user_id(), now)
        return jsonify({"message": "Session started", "session": session_to_dict(s, now)}), 201

    @app.route("/api/sessions/<int:session_id>/stop", methods=["PUT"], endpoint="api_sessions_stop")
    @roles_required(Role.TEACHER)
    def stop_session(session_id: int):
        now = container.clock.now()
        s = manager.stop(session_id, current_user_id(), now)
        return jsonify({"message": "Session stopped", "session": session_to_dict(s, now)})

    @app.route("/api/sessions/class/<int:class_id>/active", methods=["GET"], endpoint="api_sessions_class_active")
    @login_required
    def active_for_class(class_id: int):
        now = container.clock.now()
        s = manager.active_for(class_id, now)
        return jsonify({"session": session_to_dict(s, now) if s else None})

    @app.route("/api/sessions/active", methods=["GET"], endpoint="api_sessions_active")
    @login_required
    def open_sessions():
        now = container.clock.now()
        role = current_role()
        if role == Role.STUDENT:
            items = manager.open_for_student(current_user_id(), now)
        elif role == Role.TEACHER:
            items = manager.open_for_teacher(current_user_id(), now)
        else:
            items = manager.open_sessions(now)
        return jsonify({"sessions": [session_to_dict(s, now) for s in items]})

    @app.route("/api/sessions/<int:session_id>", methods=["GET"], endpoint="api_sessions_get")
    @login_required
    def get_session(session_id: int):
        now = container.clock.now()
        return jsonify({"session": session_to_dict(manager.get(session_id), now)})

    @app.route("/api/sessions/teacher", methods=["GET"], endpoint="api_sessions_teacher")
    @roles_required(Role.TEACHER)
    def teacher_sessions():
        now = container.clock.now()
        limit = request.args.get("limit", default=DEFAULT_SESSION_LIST_LIMIT, type=int)
        items = manager.list_for_teacher(current_user_id(), limit=limit)
        return jsonify({"sessions": [session_to_dict(s, now) for s in items]})

    @app.route("/api/sessions", methods=["GET"], endpoint="api_sessions_list")
    @roles_required(Role.ADMIN)
    def list_sessions():
        now = container.clock.now()
        status = (request.args.get("status") or "").upper()
        if status and status not in _STATUS_FILTERS:
            raise ValidationError("status must be ACTIVE or ENDED")
        limit = request.args.get("limit", default=DEFAULT_SESSION_LIST_LIMIT, type=int)
        items = manager.list_recent(is_active=_STATUS_FILTERS.get(status), limit=limit)
        return jsonify({"sessions": [session_to_dict(s, now) for s in items]})

    @app.route("/api/sessions/<int:session_id>/end", methods=["POST"], endpoint="api_sessions_end")
    @roles_required(Role.ADMIN)
    def end_session(session_id: int):
        now = container.clock.now()
        s = manager.end(session_id, now, admin_id=current_user_id())
        return jsonify({"message": "Session ended", "session": session_to_dict(s, now)})
