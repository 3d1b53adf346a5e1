from __future__ import annotations

from datetime import timedelta

from jose import jwt

from src.class_attendance.class_attendance.biometrics.verifier import SignedTokenVerifier, sign_attestation

STUDENT_A = 201
KEY = "device-key-201"


def _verifier(fingerprints_repo, clock, **kwargs):
    return SignedTokenVerifier(fingerprints_repo, clock=clock, **kwargs)


def test_fresh_token_from_enrolled_device_verifies(fingerprints_repo, clock):
    token = sign_attestation(STUDENT_A, KEY, issued_at=clock.now())

    assert _verifier(fingerprints_repo, clock).verify(STUDENT_A, token) is True


def test_empty_or_malformed_token_fails(fingerprints_repo, clock):
    v = _verifier(fingerprints_repo, clock)

    assert v.verify(STUDENT_A, "") is False
    assert v.verify(STUDENT_A, None) is False
    assert v.verify(STUDENT_A, "abc.def.ghi") is False


def test_prefix_marker_is_not_accepted(fingerprints_repo, clock):
    assert _verifier(fingerprints_repo, clock).verify(STUDENT_A, f"FP_{STUDENT_A}_anything") is False


def test_token_for_other_subject_fails(fingerprints_repo, clock):
    token = sign_attestation(202, KEY, issued_at=clock.now())

    assert _verifier(fingerprints_repo, clock).verify(STUDENT_A, token) is False


def test_token_too_old_or_from_the_future_fails(fingerprints_repo, clock):
    v = _verifier(fingerprints_repo, clock, max_age_seconds=60)

    old = sign_attestation(STUDENT_A, KEY, issued_at=clock.now() - timedelta(seconds=61))
    future = sign_attestation(STUDENT_A, KEY, issued_at=clock.now() + timedelta(seconds=30))
    slight_skew = sign_attestation(STUDENT_A, KEY, issued_at=clock.now() + timedelta(seconds=3))

    assert v.verify(STUDENT_A, old) is False
    assert v.verify(STUDENT_A, future) is False
    assert v.verify(STUDENT_A, slight_skew) is True


def test_expired_exp_claim_fails_against_injected_clock(fingerprints_repo, clock):
    token = sign_attestation(STUDENT_A, KEY, issued_at=clock.now(), ttl_seconds=10)
    v = _verifier(fingerprints_repo, clock)

    assert v.verify(STUDENT_A, token) is True
    clock.advance(seconds=10)
    assert v.verify(STUDENT_A, token) is False


def test_token_without_iat_fails(fingerprints_repo, clock):
    token = jwt.encode({"sub": str(STUDENT_A)}, KEY, algorithm="HS256")

    assert _verifier(fingerprints_repo, clock).verify(STUDENT_A, token) is False


def test_inactive_or_missing_enrollment_fails(fingerprints_repo, clock):
    token = sign_attestation(STUDENT_A, KEY, issued_at=clock.now())
    v = _verifier(fingerprints_repo, clock)

    fingerprints_repo.deactivate(STUDENT_A)
    assert v.verify(STUDENT_A, token) is False

    fingerprints_repo.delete(STUDENT_A)
    assert v.verify(STUDENT_A, token) is False


def test_enroll_replaces_key_and_reactivates(fingerprints_repo, clock):
    v = _verifier(fingerprints_repo, clock)
    fingerprints_repo.deactivate(STUDENT_A)

    v.enroll(STUDENT_A, "new-device-key")

    assert fingerprints_repo.get(STUDENT_A).is_active is True
    assert v.verify(STUDENT_A, sign_attestation(STUDENT_A, KEY, issued_at=clock.now())) is False
    assert v.verify(STUDENT_A, sign_attestation(STUDENT_A, "new-device-key", issued_at=clock.now())) is True
