from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from giftdesk.core.security import decode_access_token
from giftdesk.db.session import get_db_session
from giftdesk.middleware.request_context import resolve_client_ip
from giftdesk.models import User
from giftdesk.services.recommendations import get_recommendation_pipeline
from reco_core import RecommendationPipeline

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Session:
    yield from get_db_session()


def get_pipeline() -> RecommendationPipeline:
    return get_recommendation_pipeline()


def get_client_ip(request: Request) -> str:
    return resolve_client_ip(request)


def _user_from_token(db: Session, token: str) -> User:
    try:
        user_id = decode_access_token(token)["sub"]
    except Exception:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing auth token")
    return _user_from_token(db, cred.credentials)


def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User | None:
    """The signed-in user, or None for anonymous callers. A bad token is still rejected."""
    if cred is None:
        return None
    return _user_from_token(db, cred.credentials)
