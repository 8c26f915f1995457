from __future__ import annotations

import base64
import json
from io import BytesIO
from pathlib import Path
from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from giftdesk.db.base import Base
from reco_core import GeminiClient, PipelineConfig, RecommendationPipeline

GIFTS_REPLY = json.dumps(
    [
        {
            "title": "Premium Digital Stethoscope",
            "description": "Bluetooth stethoscope for cardiologists.",
            "category": "Medical Equipment",
            "priceRange": "₹8,000-12,000",
            "rating": 4.7,
            "features": ["Bluetooth", "Noise cancellation"],
            "suitableFor": ["Cardiologists"],
            "availability": "Pan-India delivery",
            "imageUrl": "https://images.pexels.com/photos/40568/x.jpeg",
        },
        {
            "title": "Ayurvedic Wellness Hamper",
            "description": "Herbal teas and chyawanprash.",
            "category": "Wellness Products",
            "priceRange": "₹2,500-3,800",
            "rating": 4.4,
            "features": ["Organic"],
            "suitableFor": ["Pharmacists"],
            "availability": "Available in India",
        },
    ]
)

QUOTE_REPLY = json.dumps(
    {
        "productName": "Digital Thermometer",
        "suggestedPrice": "₹1,200-1,600",
        "marketComparison": "5% below Indian market average",
        "confidence": 82,
        "recommendations": ["Offer bulk pricing with 18% GST shown"],
        "category": "Medical Equipment",
        "features": ["Fast reading"],
        "competitorPrices": ["Omron: ₹1,500-1,800"],
    }
)


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


class FakeGemini:
    """Scripted Gemini endpoint: pops one (status, body) per call, repeating the last."""

    def __init__(self, responses: list[tuple[int, object]]) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []
        self.sleeps: list[float] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def client(self, config: PipelineConfig) -> GeminiClient:
        http = httpx.Client(transport=httpx.MockTransport(self.handler))
        return GeminiClient(config, http_client=http, sleep=self.sleeps.append)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture()
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(api_key="test-key", model="gemini-1.5-flash", max_retries=3, initial_backoff_sec=1.0)


@pytest.fixture()
def make_pipeline(pipeline_config: PipelineConfig) -> Callable[..., tuple[RecommendationPipeline, FakeGemini]]:
    def _make(*responses: tuple[int, object], config: PipelineConfig | None = None):
        cfg = config or pipeline_config
        fake = FakeGemini(list(responses) or [(200, gemini_reply(GIFTS_REPLY))])
        return RecommendationPipeline(cfg, client=fake.client(cfg)), fake

    return _make


@pytest.fixture()
def db_session(tmp_path: Path):
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite+pysqlite:///{db_path}", future=True)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)

    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def sample_image_bytes() -> bytes:
    buf = BytesIO()
    Image.new("RGB", (64, 64), color=(170, 160, 150)).save(buf, "PNG")
    return buf.getvalue()


@pytest.fixture()
def sample_image_b64(sample_image_bytes: bytes) -> str:
    return base64.b64encode(sample_image_bytes).decode("ascii")


@pytest.fixture()
def api_client(monkeypatch: pytest.MonkeyPatch, pipeline_config: PipelineConfig):
    """TestClient on an in-memory database with a scripted Gemini behind the pipeline."""
    from giftdesk.api import deps
    from giftdesk.core.rate_limit import search_rate_limiter
    from giftdesk.main import app

    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)

    fake = FakeGemini([(200, gemini_reply(GIFTS_REPLY))])
    pipeline = RecommendationPipeline(pipeline_config, client=fake.client(pipeline_config))

    def _db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[deps.get_db] = _db
    app.dependency_overrides[deps.get_pipeline] = lambda: pipeline
    search_rate_limiter.reset()

    client = TestClient(app)
    client.fake_gemini = fake
    client.session_factory = Session
    try:
        yield client
    finally:
        app.dependency_overrides.clear()
        search_rate_limiter.reset()
