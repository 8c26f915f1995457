from __future__ import annotations

import jwt
import pytest

from giftdesk.core.config import settings
from giftdesk.core.security import create_access_token, decode_access_token, hash_password, verify_password
from giftdesk.services import auth as auth_service


class _FakeResponse:
    def __init__(self, status_code: int, payload: dict | None = None) -> None:
        self.status_code = status_code
        self._payload = payload or {}
        self.text = str(self._payload)

    def json(self) -> dict:
        return self._payload


def test_password_hash_round_trip():
    hashed = hash_password("s3cret-pass")
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret-pass", None)


def test_access_token_carries_subject_and_id():
    payload = decode_access_token(create_access_token("user-1"))
    assert payload["sub"] == "user-1"
    assert payload["jti"]


def test_token_signed_with_other_key_is_rejected():
    forged = jwt.encode({"sub": "user-1"}, "not-the-key", algorithm="HS256")
    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(forged)


def test_sign_up_then_authenticate(db_session):
    user = auth_service.sign_up(db_session, "Rep@PharmaGift.in", "s3cret-pass", full_name="Asha Rao")

    assert user.email == "rep@pharmagift.in"
    assert auth_service.authenticate_user(db_session, "rep@pharmagift.in", "s3cret-pass").id == user.id
    assert auth_service.authenticate_user(db_session, "rep@pharmagift.in", "nope") is None
    with pytest.raises(ValueError):
        auth_service.sign_up(db_session, "rep@pharmagift.in", "another-pass")


def test_sign_out_revokes_token(db_session):
    user = auth_service.sign_up(db_session, "mr@pharmagift.in", "s3cret-pass")
    token = auth_service.issue_token_for_user(user)

    auth_service.sign_out(token)

    with pytest.raises(ValueError, match="revoked"):
        decode_access_token(token)


def test_oauth_url_points_at_supabase(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://proj.supabase.co/")

    url = auth_service.oauth_authorize_url("Google", redirect_to="https://pharmagift.in/done")

    assert url.startswith("https://proj.supabase.co/auth/v1/authorize?")
    assert "provider=google" in url
    assert "redirect_to=https%3A%2F%2Fpharmagift.in%2Fdone" in url


def test_oauth_rejects_unknown_provider(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://proj.supabase.co")
    with pytest.raises(ValueError):
        auth_service.oauth_authorize_url("myspace")


def test_supabase_token_exchange_creates_local_user(db_session, monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://proj.supabase.co")
    monkeypatch.setattr(settings, "supabase_anon_key", "anon")
    seen = {}

    def fake_get(url, headers, timeout):
        seen["url"] = url
        seen["auth"] = headers["Authorization"]
        return _FakeResponse(
            200,
            {
                "email": "Doc@PharmaGift.in",
                "user_metadata": {"full_name": "Dr. Mehta"},
                "app_metadata": {"provider": "google"},
            },
        )

    monkeypatch.setattr(auth_service.requests, "get", fake_get)

    user = auth_service.exchange_supabase_token(db_session, "sb-token")

    assert seen == {"url": "https://proj.supabase.co/auth/v1/user", "auth": "Bearer sb-token"}
    assert user.email == "doc@pharmagift.in"
    assert user.full_name == "Dr. Mehta"
    assert user.auth_provider == "google"
    assert auth_service.exchange_supabase_token(db_session, "sb-token").id == user.id


def test_supabase_token_exchange_rejects_bad_token(db_session, monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://proj.supabase.co")
    monkeypatch.setattr(settings, "supabase_anon_key", "anon")
    monkeypatch.setattr(auth_service.requests, "get", lambda url, headers, timeout: _FakeResponse(401))

    with pytest.raises(ValueError):
        auth_service.exchange_supabase_token(db_session, "expired")
