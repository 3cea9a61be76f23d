"""
security helpers:
- Argon2 password hashing via argon2-cffi
- access / refresh JWT issuing and verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

ACCESS = "access"
REFRESH = "refresh"

ph = PasswordHasher()


class InvalidToken(Exception):
    """Bad signature, malformed token, wrong token class, or expired."""


class TokenExpired(InvalidToken):
    pass


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def password_needs_rehash(password_hash: str) -> bool:
    return ph.check_needs_rehash(password_hash)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and verifies the two token classes.

    Access tokens carry a snapshot of the identity's display fields and are
    verified statelessly. Refresh tokens carry only the identity id plus a
    jti; whether one is still current is decided by the caller against the
    value stored on the user.
    """

    def __init__(self, settings):
        self.settings = settings

    def _secret(self, kind: str) -> str:
        if kind == ACCESS:
            return self.settings.access_token_secret
        if kind == REFRESH:
            return self.settings.refresh_token_secret
        raise ValueError(f"Unknown token kind: {kind}")

    def _encode(self, payload: Dict[str, Any], kind: str) -> str:
        return jwt.encode(payload, self._secret(kind), algorithm=self.settings.algorithm)

    def issue_access_token(self, user, now: datetime | None = None) -> str:
        issued_at = now or _now()
        payload = {
            "iss": self.settings.issuer,
            "sub": str(user.id),
            "email": user.email,
            "full_name": user.full_name,
            "username": user.username,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.settings.access_token_ttl).timestamp()),
            "type": ACCESS,
        }
        return self._encode(payload, ACCESS)

    def issue_refresh_token(self, user, now: datetime | None = None) -> str:
        issued_at = now or _now()
        payload = {
            "iss": self.settings.issuer,
            "sub": str(user.id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.settings.refresh_token_ttl).timestamp()),
            "type": REFRESH,
            # two refresh tokens minted in the same second must still differ
            "jti": generate_jti(),
        }
        return self._encode(payload, REFRESH)

    def verify(self, token: str, kind: str = ACCESS) -> Dict[str, Any]:
        """
        Decode and validate a JWT against the secret of its class.
        Raises TokenExpired / InvalidToken; never consults stored state.
        """
        if not token:
            raise InvalidToken("Token is missing")
        try:
            decoded = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired("Token expired")
        except jwt.InvalidTokenError as exc:
            raise InvalidToken(f"Invalid token: {exc}")

        if decoded.get("type") != kind:
            raise InvalidToken("Wrong token type")
        return decoded
