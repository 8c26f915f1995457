from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from .config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def create_access_token(subject: str) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": subject, "jti": uuid.uuid4().hex, "exp": exp}
    return jwt.encode(payload, settings.secret_key, algorithm="HS256")


def decode_access_token(token: str) -> dict:
    payload = jwt.decode(token, settings.secret_key, algorithms=["HS256"])
    sub = payload.get("sub")
    if not isinstance(sub, str):
        raise ValueError("Invalid token subject")
    jti = payload.get("jti")
    if isinstance(jti, str) and token_revocations.is_revoked(jti):
        raise ValueError("Token has been revoked")
    return payload


class TokenRevocationList:
    """Signed-out token ids, kept until the token would have expired anyway."""

    def __init__(self) -> None:
        self._revoked: dict[str, float] = {}
        self._lock = threading.Lock()

    def revoke(self, jti: str, expires_at: float) -> None:
        with self._lock:
            self._purge()
            self._revoked[jti] = expires_at

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            self._purge()
            return jti in self._revoked

    def _purge(self) -> None:
        now = datetime.now(timezone.utc).timestamp()
        for key in [k for k, exp in self._revoked.items() if exp < now]:
            del self._revoked[key]


token_revocations = TokenRevocationList()
