from __future__ import annotations

import secrets
import string

SESSION_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_session_code(length: int) -> str:
    """Short unguessable join code shown to students (e.g. ``7KQ2M9XA``)."""
    return "".join(secrets.choice(SESSION_CODE_ALPHABET) for _ in range(int(length)))


def normalize_session_code(code: str) -> str:
    return (code or "").strip().upper()
