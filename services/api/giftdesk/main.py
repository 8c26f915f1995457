from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from giftdesk.api.v1.router import api_router
from giftdesk.core.config import settings
from giftdesk.core.logging import configure_logging
from giftdesk.db.base import Base
from giftdesk.db.session import engine
from giftdesk.middleware.request_context import RequestContextMiddleware
from giftdesk.services.supabase_status import check_connection

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="PharmaGift API", version="0.1.0")
app.add_middleware(RequestContextMiddleware)
cors_origins = {
    settings.base_site_url.rstrip("/"),
    "http://localhost:8080",
    "http://127.0.0.1:8080",
}
extra_origins = [
    origin.strip().rstrip("/")
    for origin in settings.cors_extra_origins.split(",")
    if origin.strip()
]
cors_origins.update(extra_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(bind=engine)
    if not settings.gemini_api_key.strip():
        logger.warning("gemini_api_key_missing")
    logger.info("startup_complete")


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


@app.get("/readyz")
def readyz() -> dict:
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        logger.exception("readyz_db_check_failed")

    supabase_ok = check_connection().success if settings.supabase_url else None
    gemini_configured = bool(settings.gemini_api_key.strip())
    return {
        "ready": db_ok and gemini_configured,
        "db": db_ok,
        "supabase": supabase_ok,
        "gemini_configured": gemini_configured,
    }
