from __future__ import annotations

import base64

from conftest import QUOTE_REPLY, gemini_reply
from giftdesk.models import SearchRecord


def _searches(api_client) -> list[SearchRecord]:
    db = api_client.session_factory()
    try:
        return db.query(SearchRecord).all()
    finally:
        db.close()


def _signup(api_client, email: str = "rep@pharmagift.in") -> dict:
    resp = api_client.post("/v1/auth/signup", json={"email": email, "password": "s3cret-pass"})
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_gift_search_returns_camel_case_records(api_client):
    resp = api_client.post(
        "/v1/search/gifts",
        json={"query": "gifts for cardiologists"},
        headers={"user-agent": "pytest-agent"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["usedFallback"] is False
    first = body["recommendations"][0]
    assert first["priceRange"] == "₹8,000-12,000"
    assert first["suitableFor"] == ["Cardiologists"]
    assert "imageUrl" in first

    rows = _searches(api_client)
    assert len(rows) == 1
    assert rows[0].search_type == "ai_search"
    assert rows[0].search_query == "gifts for cardiologists"
    assert rows[0].user_agent == "pytest-agent"


def test_second_anonymous_search_requires_sign_in(api_client):
    assert api_client.post("/v1/search/gifts", json={"query": "first"}).status_code == 200

    resp = api_client.post("/v1/search/gifts", json={"query": "second"})

    assert resp.status_code == 403
    assert resp.json()["detail"]["requires_auth"] is True
    assert api_client.fake_gemini.calls == 1

    quota = api_client.get("/v1/search/quota").json()
    assert quota == {"searchCount": 1, "canSearch": False, "requiresAuth": True}


def test_signed_in_user_keeps_searching(api_client):
    headers = _signup(api_client)

    for query in ("one", "two", "three"):
        assert api_client.post("/v1/search/gifts", json={"query": query}, headers=headers).status_code == 200

    rows = _searches(api_client)
    assert len(rows) == 3
    assert all(r.user_id for r in rows)


def test_empty_query_is_rejected_without_using_quota(api_client):
    resp = api_client.post("/v1/search/gifts", json={"query": "   "})

    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "input_error"
    assert _searches(api_client) == []
    assert api_client.fake_gemini.calls == 0


def test_rate_limited_gemini_maps_to_429(api_client):
    api_client.fake_gemini.responses = [(429, {"error": {"message": "quota"}})]

    resp = api_client.post("/v1/search/gifts", json={"query": "gifts"})

    assert resp.status_code == 429
    assert resp.json()["detail"]["kind"] == "rate_limited"
    assert api_client.fake_gemini.calls == 4


def test_description_quote(api_client):
    api_client.fake_gemini.responses = [(200, gemini_reply(QUOTE_REPLY))]

    resp = api_client.post("/v1/quote", json={"description": "Digital thermometer"})

    assert resp.status_code == 200
    quote = resp.json()["quote"]
    assert quote["productName"] == "Digital Thermometer"
    assert quote["competitorPrices"] == ["Omron: ₹1,500-1,800"]
    assert _searches(api_client)[0].search_type == "product_quote"


def test_quote_from_uploaded_image(api_client, sample_image_bytes):
    api_client.fake_gemini.responses = [(200, gemini_reply(QUOTE_REPLY))]

    resp = api_client.post(
        "/v1/quote/from-image",
        files={"image": ("thermo.png", sample_image_bytes, "image/png")},
        data={"description": "thermometer"},
    )

    assert resp.status_code == 200
    part = api_client.fake_gemini.last_body()["contents"][0]["parts"][0]
    assert part["inline_data"]["mime_type"] == "image/png"
    assert base64.b64decode(part["inline_data"]["data"]) == sample_image_bytes


def test_upload_must_be_an_image(api_client):
    resp = api_client.post("/v1/quote/from-image", files={"image": ("notes.txt", b"hello", "text/plain")})

    assert resp.status_code == 400
    assert api_client.fake_gemini.calls == 0


def test_dispatch_endpoint_wraps_results(api_client):
    ok = api_client.post("/v1/gemini-ai", json={"type": "gifts", "query": "gifts for pharmacists"})
    assert ok.status_code == 200
    assert ok.json()["success"] is True
    assert len(ok.json()["data"]) == 2

    headers = _signup(api_client)
    bad = api_client.post("/v1/gemini-ai", json={"type": "product-quote"}, headers=headers)
    assert bad.status_code == 400
    assert bad.json() == {
        "success": False,
        "error": "Either product image or description is required",
        "kind": "input_error",
    }


def test_fallback_flag_is_surfaced(api_client):
    api_client.fake_gemini.responses = [(200, gemini_reply("I cannot help with that."))]

    body = api_client.post("/v1/search/gifts", json={"query": "gifts"}).json()

    assert body["usedFallback"] is True
    assert len(body["recommendations"]) == 4


def test_rejected_input_leaves_the_free_search_available(api_client):
    assert api_client.post("/v1/quote", json={"description": "  "}).status_code == 400

    assert api_client.post("/v1/search/gifts", json={"query": "gifts"}).status_code == 200
    assert len(_searches(api_client)) == 1
