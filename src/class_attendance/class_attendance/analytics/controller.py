from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.auth import current_role, current_user_id, login_required, roles_required
from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.enums import Role
from .model import ClassSize, ClassStatistics, DailyRate, StudentSummary


def _date_arg(name: str):
    value: Optional[str] = request.args.get(name)
    return parse_iso_date(value) if value else None


def _rate_dict(r: DailyRate) -> dict:
    return {
        "date": r.day.isoformat(),
        "present": r.present_count,
        "total": r.total_count,
        "rate": r.rate,
    }


def _size_dict(c: ClassSize) -> dict:
    return {"classId": c.class_id, "name": c.name, "code": c.code, "studentCount": c.enrolled_count}


def _summary_dict(s: StudentSummary) -> dict:
    return {
        "studentId": s.student_id,
        "totalSessions": s.total_sessions,
        "presentCount": s.present_count,
        "lateCount": s.late_count,
        "excusedCount": s.excused_count,
        "absentCount": s.absent_count,
        "attendanceRate": s.attendance_rate,
    }


def _statistics_dict(s: ClassStatistics) -> dict:
    return {
        "classId": s.class_id,
        "name": s.name,
        "sessionCount": s.session_count,
        "enrolledCount": s.enrolled_count,
        "presentCount": s.present_count,
        "lateCount": s.late_count,
        "excusedCount": s.excused_count,
        "absentCount": s.absent_count,
        "overallAttendanceRate": s.overall_attendance_rate,
        "sessions": [
            {
                "sessionId": b.session_id,
                "code": b.code,
                "startTime": b.start_time.isoformat(),
                "presentCount": b.present_count,
                "lateCount": b.late_count,
                "excusedCount": b.excused_count,
                "absentCount": b.absent_count,
            }
            for b in s.sessions
        ],
    }


def register(app: Flask, container: Container) -> None:
    service = container.analytics_service

    @app.route("/api/reports/trend", methods=["GET"], endpoint="api_reports_trend")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def trend():
        rates = service.daily_trend(
            now=container.clock.now(),
            caller_id=current_user_id(),
            caller_role=current_role(),
            class_id=request.args.get("classId", type=int),
            days=request.args.get("days", type=int),
        )
        return jsonify({"trend": [_rate_dict(r) for r in rates]})

    @app.route("/api/reports/distribution", methods=["GET"], endpoint="api_reports_distribution")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def distribution():
        sizes = service.class_distribution(caller_id=current_user_id(), caller_role=current_role())
        return jsonify({"distribution": [_size_dict(c) for c in sizes]})

    @app.route("/api/reports/students/<int:student_id>/summary", methods=["GET"], endpoint="api_reports_student_summary")
    @login_required
    def student_summary(student_id: int):
        summary = service.student_summary(
            student_id,
            caller_id=current_user_id(),
            caller_role=current_role(),
            class_id=request.args.get("classId", type=int),
            start_date=_date_arg("startDate"),
            end_date=_date_arg("endDate"),
        )
        return jsonify({"summary": _summary_dict(summary)})

    @app.route("/api/reports/classes/<int:class_id>/statistics", methods=["GET"], endpoint="api_reports_class_statistics")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def class_statistics(class_id: int):
        stats = service.class_statistics(
            class_id,
            caller_id=current_user_id(),
            caller_role=current_role(),
            start_date=_date_arg("startDate"),
            end_date=_date_arg("endDate"),
        )
        return jsonify({"statistics": _statistics_dict(stats)})

    @app.route("/api/reports/dashboard", methods=["GET"], endpoint="api_reports_dashboard")
    @roles_required(Role.ADMIN)
    def dashboard():
        d = service.dashboard(container.clock.now())
        return jsonify(
            {
                "totalClasses": d.total_classes,
                "totalStudents": d.total_students,
                "sessionsToday": d.sessions_today,
                "openSessions": d.open_sessions,
                "trend": [_rate_dict(r) for r in d.trend],
                "distribution": [_size_dict(c) for c in d.distribution],
            }
        )
