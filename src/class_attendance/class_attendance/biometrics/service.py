from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import require_max_length, require_non_empty
from ..core.exceptions import Forbidden, NotFound
from .model import EnrollmentStatus, FingerprintEnrollment
from .repository import FingerprintRepository
from .verifier import BiometricVerifier

logger = logging.getLogger(__name__)

MAX_TEMPLATE_LENGTH = 512


class BiometricService:
    def __init__(self, enrollments: FingerprintRepository, verifier: BiometricVerifier):
        self._enrollments = enrollments
        self._verifier = verifier

    def enroll(self, user_id: int, template: str, *, caller_id: int) -> FingerprintEnrollment:
        if int(caller_id) != int(user_id):
            raise Forbidden("Can only enroll your own fingerprint", detail="self-only")

        template = require_non_empty(template, "templateData")
        require_max_length(template, "templateData", MAX_TEMPLATE_LENGTH)

        self._verifier.enroll(int(user_id), template)
        enrollment = self._enrollments.get(int(user_id))
        if not enrollment:
            raise NotFound("Fingerprint enrollment was not stored")
        logger.info("Fingerprint enrolled for user %s", user_id)
        return enrollment

    def get_enrollment(self, user_id: int) -> Optional[FingerprintEnrollment]:
        return self._enrollments.get(int(user_id))

    def status(self, user_id: int) -> EnrollmentStatus:
        enrollment = self._enrollments.get(int(user_id))
        if not enrollment:
            return EnrollmentStatus(enrolled=False, active=False)
        return EnrollmentStatus(enrolled=True, active=enrollment.is_active, enrolled_at=enrollment.created_at)

    def remove(self, user_id: int) -> None:
        if not self._enrollments.delete(int(user_id)):
            raise NotFound("Fingerprint not found")
        logger.info("Fingerprint removed for user %s", user_id)
