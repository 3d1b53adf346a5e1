from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def _error(status: int, code: str, message: str):
    return jsonify({"error": code, "message": message}), status


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(str(session.get("role", "")).upper())


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return _error(401, "UNAUTHORIZED", "Authentication required")
        try:
            current_role()
        except ValueError:
            return _error(403, "FORBIDDEN", "Unknown role")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    """login_required plus a role allow-list."""

    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return _error(401, "UNAUTHORIZED", "Authentication required")
            if str(session.get("role", "")).upper() not in allowed:
                return _error(403, "FORBIDDEN", "Access denied")
            return view(*args, **kwargs)

        return wrapper

    return decorator
