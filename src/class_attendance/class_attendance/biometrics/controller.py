from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_user_id, login_required, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    service = container.biometric_service

    @app.route("/api/fingerprints/enroll", methods=["POST"], endpoint="api_fingerprints_enroll")
    @roles_required(Role.STUDENT)
    def enroll():
        data = request.get_json(silent=True) or {}
        user_id = current_user_id()
        enrollment = service.enroll(user_id, data.get("templateData"), caller_id=user_id)
        return (
            jsonify(
                {
                    "message": "Fingerprint enrolled successfully",
                    "enrolled": True,
                    "active": enrollment.is_active,
                    "enrolledAt": enrollment.created_at.isoformat() if enrollment.created_at else None,
                }
            ),
            201,
        )

    @app.route("/api/fingerprints/status", methods=["GET"], endpoint="api_fingerprints_status")
    @login_required
    def status():
        s = service.status(current_user_id())
        return jsonify(
            {
                "enrolled": s.enrolled,
                "active": s.active,
                "enrolledAt": s.enrolled_at.isoformat() if s.enrolled_at else None,
            }
        )

    @app.route("/api/fingerprints", methods=["DELETE"], endpoint="api_fingerprints_delete")
    @login_required
    def remove():
        service.remove(current_user_id())
        return jsonify({"message": "Fingerprint removed"})
