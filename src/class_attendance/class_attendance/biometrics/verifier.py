from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from jose import JWTError, jwt

from ..common.datetime_utils import Clock
from ..core.constants import DEFAULT_BIOMETRIC_TOKEN_ALGORITHM, DEFAULT_BIOMETRIC_TOKEN_MAX_AGE_SECONDS
from .repository import FingerprintRepository

# Tolerated device clock drift for tokens issued slightly "in the future".
CLOCK_SKEW_SECONDS = 5


class BiometricVerifier(Protocol):
    """Capability consulted by the attendance recorder."""

    def enroll(self, user_id: int, template: str) -> None:
        raise NotImplementedError

    def verify(self, user_id: int, token: str) -> bool:
        raise NotImplementedError


def sign_attestation(
    user_id: int,
    device_key: str,
    *,
    issued_at: datetime,
    algorithm: str = DEFAULT_BIOMETRIC_TOKEN_ALGORITHM,
    ttl_seconds: Optional[int] = None,
) -> str:
    """Build the attestation an enrolled device sends after a successful local match."""

    iat = int(issued_at.timestamp())
    claims = {"sub": str(user_id), "iat": iat, "typ": "biometric"}
    if ttl_seconds is not None:
        claims["exp"] = iat + int(ttl_seconds)
    return jwt.encode(claims, device_key, algorithm=algorithm)


class SignedTokenVerifier(BiometricVerifier):
    """Proof of possession of the enrolled device key.

    The token is a JWS signed with the key registered at enrollment. It must
    name the user as ``sub`` and be fresh: ``iat`` no older than
    max_age_seconds and ``exp`` (when present) not passed, both measured
    against the injected clock.
    """

    def __init__(
        self,
        enrollments: FingerprintRepository,
        *,
        clock: Clock,
        max_age_seconds: int = DEFAULT_BIOMETRIC_TOKEN_MAX_AGE_SECONDS,
        algorithm: str = DEFAULT_BIOMETRIC_TOKEN_ALGORITHM,
    ):
        self._enrollments = enrollments
        self._clock = clock
        self._max_age = int(max_age_seconds)
        self._algorithm = algorithm

    def enroll(self, user_id: int, template: str) -> None:
        self._enrollments.upsert(user_id=int(user_id), template_ref=template, now=self._clock.now())

    def verify(self, user_id: int, token: str) -> bool:
        if not token or not isinstance(token, str):
            return False

        enrollment = self._enrollments.get(int(user_id))
        if not enrollment or not enrollment.is_active:
            return False

        try:
            claims = jwt.decode(
                token,
                enrollment.template_ref,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_nbf": False, "verify_aud": False},
            )
        except JWTError:
            return False

        if str(claims.get("sub")) != str(user_id):
            return False

        now_ts = self._clock.now().timestamp()
        iat = claims.get("iat")
        if not isinstance(iat, (int, float)):
            return False
        if iat - now_ts > CLOCK_SKEW_SECONDS or now_ts - iat > self._max_age:
            return False

        exp = claims.get("exp")
        if exp is not None and (not isinstance(exp, (int, float)) or now_ts >= exp):
            return False
        return True
