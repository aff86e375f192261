"""
Tests for bearer token verification
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from examguard.core.config import settings
from examguard.core.exceptions import Unauthenticated
from examguard.core.security import JWTIdentityVerifier, create_access_token


@pytest.fixture
def verifier():
    return JWTIdentityVerifier(settings.secret_key, settings.algorithm)


def test_valid_token_yields_identity(verifier):
    identity = verifier.verify(create_access_token("student-1", "s1@example.com"))

    assert identity.user_id == "student-1"
    assert identity.email == "s1@example.com"


def test_expired_token_is_rejected(verifier):
    token = create_access_token("student-1", expires_delta=timedelta(seconds=-5))

    with pytest.raises(Unauthenticated, match="expired"):
        verifier.verify(token)


def test_foreign_signature_is_rejected(verifier):
    token = jwt.encode(
        {"sub": "student-1", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "some-other-secret-that-is-long-enough",
        algorithm="HS256",
    )

    with pytest.raises(Unauthenticated):
        verifier.verify(token)


def test_token_without_subject_is_rejected(verifier):
    token = jwt.encode(
        {"email": "x@example.com", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        settings.secret_key,
        algorithm=settings.algorithm,
    )

    with pytest.raises(Unauthenticated):
        verifier.verify(token)


def test_replacement_verifier_can_be_injected(client, add_user):
    from examguard.api import deps
    from examguard.core.security import Identity
    from examguard.main import app

    class StaticVerifier:
        def verify(self, token):
            if token != "letmein":
                raise Unauthenticated()
            return Identity(user_id="admin-9")

    add_user("admin-9", role="admin")
    app.dependency_overrides[deps.get_identity_verifier] = StaticVerifier
    try:
        ok = client.get("/api/v1/exams/admin", headers={"Authorization": "Bearer letmein"})
        denied = client.get("/api/v1/exams/admin", headers={"Authorization": "Bearer nope"})
    finally:
        app.dependency_overrides.clear()

    assert ok.status_code == 200
    assert denied.status_code == 401
