"""AuthService behaviour against a real (in-memory) database."""

import pytest
from marshmallow import ValidationError
from sqlalchemy import update

from models import storage
from models.user import User
from utils.exceptions import Conflict, NotFound, Unauthorized
from utils.security import ACCESS, REFRESH, verify_password


def _register(auth_service, username="ana", email="a@x.com", password="pw123456", full_name="Ana"):
    return auth_service.register(username=username, email=email, password=password, full_name=full_name)


class TestRegister:
    def test_stores_hash_and_no_refresh_token(self, auth_service):
        user = _register(auth_service)
        assert user.id
        assert user.password_hash != "pw123456"
        assert verify_password("pw123456", user.password_hash)
        assert user.refresh_token is None

    def test_username_and_email_are_case_folded(self, auth_service):
        user = _register(auth_service, username="  Ana ", email="A@X.com")
        assert user.username == "ana"
        assert user.email == "a@x.com"

    def test_duplicate_username(self, auth_service):
        _register(auth_service)
        with pytest.raises(Conflict):
            _register(auth_service, email="other@x.com")

    def test_duplicate_email(self, auth_service):
        _register(auth_service)
        with pytest.raises(Conflict):
            _register(auth_service, username="bob")

    def test_duplicate_differs_only_by_case(self, auth_service):
        _register(auth_service)
        with pytest.raises(Conflict):
            _register(auth_service, username="ANA", email="other@x.com")

    @pytest.mark.parametrize("field", ["username", "email", "password", "full_name"])
    def test_blank_fields_rejected(self, auth_service, field):
        values = {"username": "ana", "email": "a@x.com", "password": "pw123456", "full_name": "Ana"}
        values[field] = "   "
        with pytest.raises(ValidationError) as exc:
            auth_service.register(**values)
        assert field in exc.value.messages
        assert storage.count(User) == 0


class TestLogin:
    def test_login_by_username_or_email(self, auth_service):
        _register(auth_service)
        assert auth_service.login("ana", "pw123456").user.username == "ana"
        assert auth_service.login("A@X.com", "pw123456").user.username == "ana"

    def test_issues_distinct_tokens_and_persists_refresh(self, auth_service, tokens):
        user = _register(auth_service)
        result = auth_service.login("ana", "pw123456")
        assert result.access_token != result.refresh_token
        assert tokens.verify(result.access_token, ACCESS)["sub"] == user.id
        assert tokens.verify(result.refresh_token, REFRESH)["sub"] == user.id
        assert storage.get(User, user.id).refresh_token == result.refresh_token

    def test_unknown_user(self, auth_service):
        with pytest.raises(NotFound):
            auth_service.login("ghost", "pw123456")

    def test_wrong_password_changes_nothing(self, auth_service):
        user = _register(auth_service)
        with pytest.raises(Unauthorized):
            auth_service.login("ana", "wrong-password")
        assert storage.get(User, user.id).refresh_token is None

    def test_second_login_supersedes_first(self, auth_service):
        _register(auth_service)
        first = auth_service.login("ana", "pw123456")
        auth_service.login("ana", "pw123456")
        with pytest.raises(Unauthorized):
            auth_service.refresh(first.refresh_token)


class TestRefresh:
    def test_rotation(self, auth_service, tokens):
        user = _register(auth_service)
        r1 = auth_service.login("ana", "pw123456").refresh_token

        pair = auth_service.refresh(r1)
        assert pair.refresh_token != r1
        assert tokens.verify(pair.access_token, ACCESS)["sub"] == user.id
        assert storage.get(User, user.id).refresh_token == pair.refresh_token

        # the presented token is now spent
        with pytest.raises(Unauthorized):
            auth_service.refresh(r1)
        # the rotated one still works exactly once
        assert auth_service.refresh(pair.refresh_token).refresh_token != pair.refresh_token

    def test_concurrent_rotation_loses_to_the_first_writer(self, auth_service, monkeypatch):
        user = _register(auth_service)
        r1 = auth_service.login("ana", "pw123456").refresh_token
        issue = auth_service._issue

        def issue_then_competing_write(u):
            pair = issue(u)
            # another refresh with the same token commits first
            storage.get_session().execute(
                update(User).where(User.id == u.id).values(refresh_token="rotated-elsewhere")
            )
            storage.save()
            return pair

        monkeypatch.setattr(auth_service, "_issue", issue_then_competing_write)
        with pytest.raises(Unauthorized):
            auth_service.refresh(r1)

        storage.close()
        assert storage.get(User, user.id).refresh_token == "rotated-elsewhere"

    def test_missing_token(self, auth_service):
        with pytest.raises(Unauthorized):
            auth_service.refresh(None)
        with pytest.raises(Unauthorized):
            auth_service.refresh("")

    def test_access_token_is_not_a_refresh_token(self, auth_service):
        _register(auth_service)
        access = auth_service.login("ana", "pw123456").access_token
        with pytest.raises(Unauthorized):
            auth_service.refresh(access)

    def test_garbage_token(self, auth_service):
        with pytest.raises(Unauthorized):
            auth_service.refresh("definitely.not.valid")

    def test_user_removed(self, auth_service):
        user = _register(auth_service)
        r1 = auth_service.login("ana", "pw123456").refresh_token
        storage.delete(storage.get(User, user.id))
        storage.save()
        with pytest.raises(Unauthorized):
            auth_service.refresh(r1)


class TestLogout:
    def test_logout_revokes_refresh_token(self, auth_service):
        user = _register(auth_service)
        r1 = auth_service.login("ana", "pw123456").refresh_token
        auth_service.logout(user.id)
        assert storage.get(User, user.id).refresh_token is None
        with pytest.raises(Unauthorized):
            auth_service.refresh(r1)

    def test_logout_is_idempotent(self, auth_service):
        user = _register(auth_service)
        auth_service.logout(user.id)
        auth_service.logout(user.id)
        assert storage.get(User, user.id).refresh_token is None


class TestChangePassword:
    def test_wrong_old_password_leaves_hash_untouched(self, auth_service):
        user = _register(auth_service)
        before = storage.get(User, user.id).password_hash
        with pytest.raises(Unauthorized):
            auth_service.change_password(user.id, "wrong-password", "new-pass-123")
        assert storage.get(User, user.id).password_hash == before

    def test_new_password_takes_effect(self, auth_service):
        user = _register(auth_service)
        auth_service.change_password(user.id, "pw123456", "new-pass-123")
        assert auth_service.login("ana", "new-pass-123").user.id == user.id
        with pytest.raises(Unauthorized):
            auth_service.login("ana", "pw123456")

    def test_unknown_user(self, auth_service):
        with pytest.raises(NotFound):
            auth_service.change_password("no-such-id", "pw123456", "new-pass-123")


class TestProfileUpdates:
    def test_update_details(self, auth_service):
        user = _register(auth_service)
        updated = auth_service.update_details(user.id, full_name=" Ana Maria ", email="NEW@x.com")
        assert updated.full_name == "Ana Maria"
        assert updated.email == "new@x.com"

    def test_email_taken(self, auth_service):
        _register(auth_service)
        bob = _register(auth_service, username="bob", email="b@x.com")
        with pytest.raises(Conflict):
            auth_service.update_details(bob.id, email="a@x.com")

    def test_update_image(self, auth_service):
        user = _register(auth_service)
        updated = auth_service.update_image(user.id, "avatar", "https://cdn.example.com/a.png", "img_1")
        assert updated.avatar_url == "https://cdn.example.com/a.png"
        assert updated.avatar_public_id == "img_1"
        updated = auth_service.update_image(user.id, "cover_image", "https://cdn.example.com/c.png")
        assert updated.cover_image_url == "https://cdn.example.com/c.png"

    def test_update_image_unknown_kind(self, auth_service):
        user = _register(auth_service)
        with pytest.raises(ValueError):
            auth_service.update_image(user.id, "banner", "https://cdn.example.com/x.png")
