"""
Authentication flow: registration, login, refresh-token rotation, logout,
password change and profile updates.

The service holds no per-request state. The only mutable auth state is
User.refresh_token: login overwrites it, refresh swaps it, logout clears it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from marshmallow import ValidationError
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models.user import User
from utils.exceptions import Conflict, NotFound, Unauthorized
from utils.security import (
    REFRESH,
    InvalidToken,
    hash_password,
    password_needs_rehash,
    verify_password,
)

logger = logging.getLogger(__name__)

IMAGE_KINDS = ("avatar", "cover_image")


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    user: User
    access_token: str
    refresh_token: str


def _require(**values) -> None:
    blank = {k: ["Field may not be blank."] for k, v in values.items() if v is None or not str(v).strip()}
    if blank:
        raise ValidationError(blank)


class AuthService:
    def __init__(self, storage, tokens):
        self.storage = storage
        self.tokens = tokens

    @property
    def session(self):
        return self.storage.get_session()

    def _get_user(self, user_id: str) -> User:
        user = self.storage.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def _issue(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=self.tokens.issue_access_token(user),
            refresh_token=self.tokens.issue_refresh_token(user),
        )

    def register(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str,
        avatar_url: str | None = None,
        avatar_public_id: str | None = None,
        cover_image_url: str | None = None,
        cover_image_public_id: str | None = None,
    ) -> User:
        _require(username=username, email=email, password=password, full_name=full_name)
        username = username.strip().lower()
        email = email.strip().lower()

        existing = (
            self.session.query(User)
            .filter(or_(User.username == username, User.email == email))
            .first()
        )
        if existing:
            raise Conflict("User with this username or email already exists")

        user = User(
            username=username,
            email=email,
            full_name=full_name.strip(),
            password_hash=hash_password(password),
            avatar_url=avatar_url,
            avatar_public_id=avatar_public_id,
            cover_image_url=cover_image_url,
            cover_image_public_id=cover_image_public_id,
            refresh_token=None,
        )
        try:
            user.save()
        except IntegrityError:
            # lost a race against a concurrent registration; the unique index caught it
            raise Conflict("User with this username or email already exists")
        logger.info("registered user %s", user.id)
        return user

    def login(self, identifier: str, password: str) -> LoginResult:
        """identifier is a username or an email address."""
        _require(identifier=identifier, password=password)
        ident = identifier.strip().lower()
        user = (
            self.session.query(User)
            .filter(or_(User.username == ident, User.email == ident))
            .first()
        )
        if not user:
            raise NotFound("User does not exist")
        if not verify_password(password, user.password_hash):
            logger.warning("failed login for user %s", user.id)
            raise Unauthorized("Invalid credentials")

        if password_needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)

        pair = self._issue(user)
        # last writer wins; any refresh token handed out earlier stops matching
        user.refresh_token = pair.refresh_token
        user.save()
        return LoginResult(user=user, access_token=pair.access_token, refresh_token=pair.refresh_token)

    def refresh(self, presented: str | None) -> TokenPair:
        if not presented:
            raise Unauthorized("Refresh token is required")
        try:
            claims = self.tokens.verify(presented, REFRESH)
        except InvalidToken as exc:
            raise Unauthorized(str(exc))

        user = self.storage.get(User, claims.get("sub"))
        if not user:
            raise Unauthorized("Invalid refresh token, user can't be found")
        if user.refresh_token != presented:
            raise Unauthorized("Refresh token is expired or used")

        pair = self._issue(user)
        # compare-and-swap: only one of several concurrent refreshes with the same token wins
        swapped = (
            self.session.query(User)
            .filter(User.id == user.id, User.refresh_token == presented)
            .update({User.refresh_token: pair.refresh_token}, synchronize_session="evaluate")
        )
        if swapped != 1:
            self.storage.rollback()
            raise Unauthorized("Refresh token is expired or used")
        self.storage.save()
        return pair

    def logout(self, user_id: str) -> None:
        self.session.query(User).filter(User.id == user_id).update(
            {User.refresh_token: None}, synchronize_session="evaluate"
        )
        self.storage.save()

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        _require(old_password=old_password, new_password=new_password)
        user = self._get_user(user_id)
        if not verify_password(old_password, user.password_hash):
            raise Unauthorized("Old password is incorrect")
        user.password_hash = hash_password(new_password)
        user.save()

    def update_details(self, user_id: str, full_name: str | None = None, email: str | None = None) -> User:
        user = self._get_user(user_id)
        if email is not None:
            email = email.strip().lower()
            _require(email=email)
            taken = (
                self.session.query(User)
                .filter(User.email == email, User.id != user.id)
                .first()
            )
            if taken:
                raise Conflict("Email already registered")
            user.email = email
        if full_name is not None:
            _require(full_name=full_name)
            user.full_name = full_name.strip()
        try:
            user.save()
        except IntegrityError:
            raise Conflict("Email already registered")
        return user

    def update_image(self, user_id: str, kind: str, url: str, public_id: str | None = None) -> User:
        """Point the avatar or cover image at a new asset reference."""
        if kind not in IMAGE_KINDS:
            raise ValueError(f"Unknown image kind: {kind}")
        _require(url=url)
        user = self._get_user(user_id)
        setattr(user, f"{kind}_url", url)
        setattr(user, f"{kind}_public_id", public_id)
        user.save()
        return user
