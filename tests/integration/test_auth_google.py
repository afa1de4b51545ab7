from urllib.parse import parse_qs, urlparse

import pytest

from jobtrack.auth import google
from jobtrack.auth.tokens import create_access_token, decode_access_token
from jobtrack.db.repositories import Repository
from jobtrack.db.session import SessionLocal
from jobtrack.types import GoogleProfile


@pytest.fixture
def google_profile(monkeypatch) -> GoogleProfile:
    profile = GoogleProfile(google_id="g-123", email="sam@example.com", name="Sam", avatar="https://img/sam.png")
    monkeypatch.setattr(google, "exchange_code", lambda code: profile)
    return profile


def _redirect_query(response) -> dict[str, list[str]]:
    assert response.status_code == 302
    return parse_qs(urlparse(response.headers["location"]).query)


def test_login_redirects_to_google(client) -> None:
    response = client.get("/auth/google", follow_redirects=False)
    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.netloc == "accounts.google.com"
    assert parse_qs(location.query)["client_id"] == ["client-id"]


def test_callback_creates_user_with_default_board(client, google_profile) -> None:
    response = client.get("/auth/google/callback", params={"code": "abc"}, follow_redirects=False)

    assert response.headers["location"].startswith("http://frontend.test/auth/callback?")
    token = _redirect_query(response)["token"][0]
    user_id = decode_access_token(token).user_id

    with SessionLocal() as db:
        repo = Repository(db)
        user = repo.get_user(user_id)
        assert user.email == "sam@example.com"
        assert user.google_id == "g-123"
        assert [column.title for column in repo.list_columns(user_id)][0] == "Applied"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Sam"


def test_callback_links_existing_account_by_email(client, google_profile) -> None:
    with SessionLocal() as db:
        existing = Repository(db).create_user(name="Sam", email="sam@example.com")
        existing_id = existing.id

    response = client.get("/auth/google/callback", params={"code": "abc"}, follow_redirects=False)
    token = _redirect_query(response)["token"][0]

    assert decode_access_token(token).user_id == existing_id
    with SessionLocal() as db:
        assert Repository(db).get_user(existing_id).google_id == "g-123"


def test_callback_error_redirects_to_login(client) -> None:
    response = client.get("/auth/google/callback", params={"error": "access_denied"}, follow_redirects=False)
    query = _redirect_query(response)
    assert response.headers["location"].startswith("http://frontend.test/login?")
    assert query["error"] == ["auth_failed"]
    assert query["message"] == ["access_denied"]


def test_failed_exchange_redirects_to_login(client, monkeypatch) -> None:
    def fail(code: str) -> GoogleProfile:
        raise google.OAuthError("Authentication failed")

    monkeypatch.setattr(google, "exchange_code", fail)
    response = client.get("/auth/google/callback", params={"code": "bad"}, follow_redirects=False)
    assert _redirect_query(response)["message"] == ["Authentication failed"]


def test_token_for_deleted_user_is_rejected(client) -> None:
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {create_access_token(9999)}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"
