from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from giftdesk.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SupabaseCheck:
    success: bool
    message: str
    status_code: int | None = None


def _headers() -> dict[str, str]:
    key = settings.supabase_anon_key or ""
    return {
        "apikey": key,
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
    }


def _probe(path: str, label: str) -> SupabaseCheck:
    if not settings.supabase_url or not settings.supabase_anon_key:
        return SupabaseCheck(success=False, message="Missing Supabase environment variables")

    url = f"{settings.supabase_url.rstrip('/')}{path}"
    try:
        resp = requests.get(url, headers=_headers(), timeout=settings.supabase_timeout_sec)
    except requests.RequestException as exc:
        logger.warning("supabase_%s_unreachable error=%s", label, type(exc).__name__)
        return SupabaseCheck(success=False, message=f"{label} check failed: {type(exc).__name__}")

    if resp.ok:
        return SupabaseCheck(success=True, message=f"{label} reachable", status_code=resp.status_code)
    logger.warning("supabase_%s_failed status=%d", label, resp.status_code)
    return SupabaseCheck(
        success=False,
        message=f"{label} check failed: {resp.status_code} {resp.reason}",
        status_code=resp.status_code,
    )


def check_connection() -> SupabaseCheck:
    return _probe("/rest/v1/", "rest")


def check_auth() -> SupabaseCheck:
    return _probe("/auth/v1/settings", "auth")
