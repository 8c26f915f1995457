from __future__ import annotations

import logging
from datetime import datetime, timezone
from urllib.parse import urlencode

import requests
from sqlalchemy.orm import Session

from giftdesk.core.config import settings
from giftdesk.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    token_revocations,
    verify_password,
)
from giftdesk.models import User

logger = logging.getLogger(__name__)

OAUTH_PROVIDERS = {"google", "github", "azure", "linkedin_oidc"}


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def sign_up(db: Session, email: str, password: str, full_name: str | None = None) -> User:
    normalized = _normalize_email(email)
    if db.query(User).filter(User.email == normalized).first() is not None:
        raise ValueError("An account with this email already exists")
    user = User(
        email=normalized,
        password_hash=hash_password(password),
        full_name=(full_name or "").strip() or None,
        auth_provider="email",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user_signed_up user_id=%s", user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    user = db.query(User).filter(User.email == _normalize_email(email)).first()
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def issue_token_for_user(user: User) -> str:
    return create_access_token(subject=user.id)


def sign_out(token: str) -> None:
    payload = decode_access_token(token)
    jti = payload.get("jti")
    if isinstance(jti, str):
        exp = payload.get("exp") or datetime.now(timezone.utc).timestamp()
        token_revocations.revoke(jti, float(exp))
    logger.info("user_signed_out user_id=%s", payload.get("sub"))


def oauth_authorize_url(provider: str, redirect_to: str | None = None) -> str:
    """Supabase hosted OAuth entry point for `provider`."""
    provider = provider.strip().lower()
    if provider not in OAUTH_PROVIDERS:
        raise ValueError(f"Unsupported OAuth provider: {provider}")
    if not settings.supabase_url:
        raise RuntimeError("SUPABASE_URL is not configured")

    params = {"provider": provider, "redirect_to": redirect_to or settings.base_site_url}
    return f"{settings.supabase_url.rstrip('/')}/auth/v1/authorize?{urlencode(params)}"


def exchange_supabase_token(db: Session, access_token: str) -> User:
    """Verify a Supabase OAuth session token and return the matching local user."""
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError("Supabase auth is not configured")

    resp = requests.get(
        f"{settings.supabase_url.rstrip('/')}/auth/v1/user",
        headers={
            "apikey": settings.supabase_anon_key,
            "Authorization": f"Bearer {access_token}",
        },
        timeout=settings.supabase_timeout_sec,
    )
    if resp.status_code in (401, 403):
        raise ValueError("Supabase rejected the access token")
    if resp.status_code >= 400:
        raise RuntimeError(f"Supabase user lookup failed: {resp.status_code} {resp.text[:300]}")

    data = resp.json()
    email = data.get("email")
    if not isinstance(email, str) or not email.strip():
        raise ValueError("Supabase user has no email address")

    meta = data.get("user_metadata") or {}
    provider = (data.get("app_metadata") or {}).get("provider") or "oauth"
    return get_or_create_oauth_user(
        db,
        email=email,
        full_name=meta.get("full_name") or meta.get("name"),
        provider=str(provider),
    )


def get_or_create_oauth_user(db: Session, email: str, full_name: str | None, provider: str) -> User:
    normalized = _normalize_email(email)
    user = db.query(User).filter(User.email == normalized).first()
    if user:
        if full_name and not user.full_name:
            user.full_name = full_name
            db.commit()
        return user
    user = User(email=normalized, password_hash=None, full_name=full_name, auth_provider=provider)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("oauth_user_created user_id=%s provider=%s", user.id, provider)
    return user
