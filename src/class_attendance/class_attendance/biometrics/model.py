from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class FingerprintEnrollment:
    """Per-user biometric registration.

    template_ref is opaque to the engine: for SignedTokenVerifier it is the
    key the enrolled device signs its attestations with.
    """

    user_id: int
    template_ref: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class EnrollmentStatus:
    enrolled: bool
    active: bool
    enrolled_at: Optional[datetime] = None
