"""Shared fixtures: a fresh app on in-memory SQLite per test."""

import pytest

from api import create_app
from models import storage

API = "/api/v1"
DEFAULT_PASSWORD = "pw123456"


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    storage.close()


@pytest.fixture
def client(app):
    """Cookie-less client: credentials travel only where a test puts them."""
    return app.test_client(use_cookies=False)


@pytest.fixture
def auth_service(app):
    return app.extensions["auth"]


@pytest.fixture
def tokens(auth_service):
    return auth_service.tokens


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user over HTTP and return the response JSON `data`."""
    def _register(username="ana", email=None, password=DEFAULT_PASSWORD, full_name=None, **extra):
        payload = {
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
            "full_name": full_name or username.capitalize(),
            **extra,
        }
        resp = client.post(f"{API}/auth/register", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _register


@pytest.fixture
def login(client):
    """Log in over HTTP and return the response JSON `data` (user + tokens)."""
    def _login(username="ana", password=DEFAULT_PASSWORD):
        resp = client.post(f"{API}/auth/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()["data"]

    return _login


@pytest.fixture
def signed_in(register, login):
    """Register + log in; returns (user, auth headers)."""
    def _signed_in(username="ana"):
        user = register(username)
        data = login(username)
        return user, bearer(data["access_token"])

    return _signed_in


@pytest.fixture
def make_video(client):
    def _make_video(headers, title="First video", **overrides):
        payload = {
            "title": title,
            "description": f"About {title}",
            "video_file_url": "https://cdn.example.com/videos/v.mp4",
            "thumbnail_url": "https://cdn.example.com/thumbs/t.jpg",
            "duration": 12.5,
            **overrides,
        }
        resp = client.post(f"{API}/videos", json=payload, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _make_video
