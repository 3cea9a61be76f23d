"""
Session middleware.

Views wrapped with jwt_required() receive an explicit ``ctx`` keyword
argument (an AuthContext); a view never runs with an unresolved identity.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Dict, Optional

from flask import current_app, request

from models import storage
from models.schemas.user import UserOutSchema
from models.user import User
from utils.exceptions import Unauthorized
from utils.security import ACCESS, InvalidToken

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

_user_view = UserOutSchema()


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    # stripped profile view: no password hash, no refresh token
    user: Dict[str, Any] = field(default_factory=dict)


def get_auth_service():
    return current_app.extensions["auth"]


def extract_access_token(req) -> Optional[str]:
    """accessToken cookie first, then an `Authorization: Bearer <token>` header."""
    token = req.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    auth = req.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def authenticate(req, tokens) -> AuthContext:
    token = extract_access_token(req)
    if not token:
        raise Unauthorized("Unauthorized request")
    try:
        decoded = tokens.verify(token, ACCESS)
    except InvalidToken as exc:
        raise Unauthorized(str(exc))

    user = storage.get(User, decoded.get("sub"))
    if not user:
        raise Unauthorized("Invalid access token, user can't be found")
    return AuthContext(user_id=user.id, user=_user_view.dump(user))


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            ctx = authenticate(request, get_auth_service().tokens)
            return fn(*args, ctx=ctx, **kwargs)

        return wrapper

    return decorator


def jwt_optional():
    """
    Like jwt_required, but anonymous requests get ctx=None.
    A credential that is presented and fails verification is still rejected.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            ctx = None
            if extract_access_token(request):
                ctx = authenticate(request, get_auth_service().tokens)
            return fn(*args, ctx=ctx, **kwargs)

        return wrapper

    return decorator
