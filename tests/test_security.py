"""Unit tests for password hashing and the token service."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest

from api.config import AuthSettings
from utils.security import (
    ACCESS,
    REFRESH,
    InvalidToken,
    TokenExpired,
    TokenService,
    hash_password,
    verify_password,
)


@pytest.fixture
def settings():
    return AuthSettings(
        access_token_secret="unit-access-secret-for-automation-only-01",
        refresh_token_secret="unit-refresh-secret-for-automation-only-02",
        access_token_ttl=timedelta(minutes=15),
        refresh_token_ttl=timedelta(days=10),
    )


@pytest.fixture
def service(settings):
    return TokenService(settings)


@pytest.fixture
def identity():
    return SimpleNamespace(id="user-1", email="ana@example.com", full_name="Ana", username="ana")


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        pw_hash = hash_password("pw123456")
        assert pw_hash != "pw123456"
        assert pw_hash.startswith("$argon2")

    def test_same_password_produces_different_hashes(self):
        assert hash_password("pw123456") != hash_password("pw123456")

    def test_verify(self):
        pw_hash = hash_password("pw123456")
        assert verify_password("pw123456", pw_hash) is True
        assert verify_password("wrong-password", pw_hash) is False

    def test_verify_against_garbage_hash_fails_closed(self):
        assert verify_password("pw123456", "not-a-hash") is False


class TestAuthSettings:
    def test_rejects_shared_secret(self):
        with pytest.raises(ValueError):
            AuthSettings("same-secret", "same-secret", timedelta(minutes=1), timedelta(days=1))

    def test_rejects_missing_secret(self):
        with pytest.raises(ValueError):
            AuthSettings("", "other", timedelta(minutes=1), timedelta(days=1))


class TestTokenService:
    def test_access_token_claims(self, service, identity):
        claims = service.verify(service.issue_access_token(identity), ACCESS)
        assert claims["sub"] == "user-1"
        assert claims["email"] == "ana@example.com"
        assert claims["username"] == "ana"
        assert claims["full_name"] == "Ana"
        assert claims["type"] == ACCESS
        assert claims["exp"] - claims["iat"] == 15 * 60

    def test_access_token_is_deterministic_for_same_instant(self, service, identity):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(days=365 * 5)
        assert service.issue_access_token(identity, now=now) == service.issue_access_token(identity, now=now)

    def test_refresh_token_carries_only_identity(self, service, identity):
        claims = service.verify(service.issue_refresh_token(identity), REFRESH)
        assert claims["sub"] == "user-1"
        assert "email" not in claims
        assert "username" not in claims
        assert claims["exp"] - claims["iat"] == 10 * 24 * 3600

    def test_refresh_tokens_from_same_instant_differ(self, service, identity):
        now = datetime.now(timezone.utc)
        assert service.issue_refresh_token(identity, now=now) != service.issue_refresh_token(identity, now=now)

    def test_expired_access_token(self, service, identity):
        token = service.issue_access_token(identity, now=datetime.now(timezone.utc) - timedelta(hours=1))
        with pytest.raises(TokenExpired):
            service.verify(token, ACCESS)

    def test_expired_is_an_invalid_token(self, service, identity):
        token = service.issue_refresh_token(identity, now=datetime.now(timezone.utc) - timedelta(days=11))
        with pytest.raises(InvalidToken):
            service.verify(token, REFRESH)

    def test_token_classes_are_not_interchangeable(self, service, identity):
        with pytest.raises(InvalidToken):
            service.verify(service.issue_refresh_token(identity), ACCESS)
        with pytest.raises(InvalidToken):
            service.verify(service.issue_access_token(identity), REFRESH)

    def test_tampered_token(self, service, identity):
        token = service.issue_access_token(identity)
        header, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        with pytest.raises(InvalidToken):
            service.verify(".".join([header, payload, flipped]), ACCESS)

    def test_foreign_secret(self, service, settings, identity):
        forged = jwt.encode(
            {"sub": "user-1", "iat": 1, "exp": 9999999999, "type": ACCESS, "iss": settings.issuer},
            "someone-elses-secret-for-automation-only",
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            service.verify(forged, ACCESS)

    def test_malformed_and_missing(self, service):
        with pytest.raises(InvalidToken):
            service.verify("not.a.jwt", ACCESS)
        with pytest.raises(InvalidToken):
            service.verify("", ACCESS)
