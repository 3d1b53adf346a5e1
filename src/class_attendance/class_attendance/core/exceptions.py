from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable ``code`` the HTTP layer and other callers
    can switch on (e.g. to prompt re-enrollment on FINGERPRINT_NOT_ENROLLED).
    """

    code = "DOMAIN_ERROR"
    default_message = "Request rejected"

    def __init__(self, message: Optional[str] = None, *, detail: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.detail = detail


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class Forbidden(DomainError):
    """Raised when the caller may not perform the action."""

    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(DomainError):
    """Missing resource. Also used for foreign resources to avoid leaking existence."""

    code = "NOT_FOUND"
    default_message = "Not found"


class FingerprintNotEnrolled(DomainError):
    code = "FINGERPRINT_NOT_ENROLLED"
    default_message = "Fingerprint not enrolled. Please enroll your fingerprint first."


class BiometricVerificationFailed(DomainError):
    code = "BIOMETRIC_VERIFICATION_FAILED"
    default_message = "Biometric verification failed"


class SessionNotFoundOrExpired(DomainError):
    code = "SESSION_NOT_FOUND"
    default_message = "Session not found or expired"


class NotEnrolled(DomainError):
    code = "NOT_ENROLLED"
    default_message = "You are not enrolled in this class"


class AlreadyMarked(DomainError):
    code = "ALREADY_MARKED"
    default_message = "Attendance already marked for this session"


class SessionAlreadyActive(DomainError):
    code = "SESSION_ALREADY_ACTIVE"
    default_message = "There is already an active session for this class"


class StorageError(Exception):
    """Storage-layer failure (connectivity, unexpected constraint, ...).

    Not a business outcome: callers log it and report a generic internal error.
    """


class DuplicateKeyError(StorageError):
    """A unique index rejected a write."""

    def __init__(self, key: str, message: str = ""):
        super().__init__(message or f"Duplicate entry for key {key!r}")
        self.key = key
