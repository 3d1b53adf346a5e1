from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AlreadyMarked,
    BiometricVerificationFailed,
    DomainError,
    FingerprintNotEnrolled,
    Forbidden,
    NotEnrolled,
    NotFound,
    SessionAlreadyActive,
    SessionNotFoundOrExpired,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; first isinstance match wins.
STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (BiometricVerificationFailed, 401),
    (Forbidden, 403),
    (NotEnrolled, 403),
    (FingerprintNotEnrolled, 404),
    (SessionNotFoundOrExpired, 404),
    (NotFound, 404),
    (AlreadyMarked, 409),
    (SessionAlreadyActive, 409),
)


def status_for(error: DomainError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def error_body(code: str, message: str, detail=None) -> dict:
    body = {"error": code, "message": message}
    if detail:
        body["detail"] = detail
    return body


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify(error_body(e.code, str(e), e.detail)), status_for(e)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        code = (e.name or "HTTP_ERROR").upper().replace(" ", "_")
        return jsonify(error_body(code, e.description or e.name)), e.code or 500

    @app.errorhandler(StorageError)
    def handle_storage_error(e: StorageError):
        logger.error("Storage failure: %s", e, exc_info=e)
        return jsonify(error_body("INTERNAL_ERROR", "Internal server error")), 500

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error: %s", e)
        return jsonify(error_body("INTERNAL_ERROR", "Internal server error")), 500
