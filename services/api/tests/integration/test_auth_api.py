from __future__ import annotations

from giftdesk.core.config import settings


def test_signup_login_me_logout_round_trip(api_client):
    signup = api_client.post(
        "/v1/auth/signup",
        json={"email": "Rep@PharmaGift.in", "password": "s3cret-pass", "full_name": "Asha Rao"},
    )
    assert signup.status_code == 201

    login = api_client.post("/v1/auth/login", json={"email": "rep@pharmagift.in", "password": "s3cret-pass"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    me = api_client.get("/v1/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "rep@pharmagift.in"
    assert me.json()["display_name"] == "Asha Rao"
    assert me.json()["auth_provider"] == "email"

    assert api_client.post("/v1/auth/logout", headers=headers).status_code == 204
    assert api_client.get("/v1/auth/me", headers=headers).status_code == 401


def test_duplicate_signup_and_bad_password(api_client):
    payload = {"email": "mr@pharmagift.in", "password": "s3cret-pass"}
    assert api_client.post("/v1/auth/signup", json=payload).status_code == 201
    assert api_client.post("/v1/auth/signup", json=payload).status_code == 409

    bad = api_client.post("/v1/auth/login", json={"email": "mr@pharmagift.in", "password": "wrong-pass"})
    assert bad.status_code == 401


def test_short_password_is_rejected(api_client):
    resp = api_client.post("/v1/auth/signup", json={"email": "x@pharmagift.in", "password": "123"})
    assert resp.status_code == 422


def test_me_requires_token(api_client):
    assert api_client.get("/v1/auth/me").status_code == 401
    assert api_client.get("/v1/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_oauth_start(api_client, monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://proj.supabase.co")

    resp = api_client.get("/v1/auth/oauth/github")
    assert resp.status_code == 200
    assert resp.json()["provider"] == "github"
    assert "provider=github" in resp.json()["url"]

    assert api_client.get("/v1/auth/oauth/myspace").status_code == 400


def test_oauth_start_without_supabase(api_client, monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", None)
    assert api_client.get("/v1/auth/oauth/google").status_code == 503


def test_health_endpoints(api_client):
    assert api_client.get("/healthz").json() == {"status": "ok"}


def test_placeholder_bearer_is_not_a_login(api_client):
    api_client.post("/v1/auth/signup", json={"email": "owner@pharmagift.in", "password": "s3cret-pass"})

    assert api_client.get("/v1/auth/me", headers={"Authorization": "Bearer dev"}).status_code == 401

    assert api_client.post("/v1/search/gifts", json={"query": "first"}).status_code == 200
    resp = api_client.post("/v1/search/gifts", json={"query": "second"}, headers={"Authorization": "Bearer dev"})
    assert resp.status_code == 401
