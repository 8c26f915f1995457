from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from giftdesk.api.deps import bearer_scheme, get_current_user, get_db
from giftdesk.models import User
from giftdesk.schemas.auth import (
    LoginRequest,
    OAuthCallbackRequest,
    OAuthStartResponse,
    SignUpRequest,
    TokenResponse,
    UserOut,
)
from giftdesk.services.auth import (
    authenticate_user,
    exchange_supabase_token,
    issue_token_for_user,
    oauth_authorize_url,
    sign_out,
    sign_up,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        display_name=user.full_name,
        auth_provider=user.auth_provider,
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignUpRequest, db: Session = Depends(get_db)) -> TokenResponse:
    try:
        user = sign_up(db, payload.email, payload.password, payload.full_name)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return TokenResponse(access_token=issue_token_for_user(user))


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user = authenticate_user(db, payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = issue_token_for_user(user)
    return TokenResponse(access_token=token)


@router.get("/oauth/{provider}", response_model=OAuthStartResponse)
def oauth_start(provider: str, redirect_to: str | None = None) -> OAuthStartResponse:
    try:
        url = oauth_authorize_url(provider, redirect_to)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except RuntimeError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return OAuthStartResponse(provider=provider.strip().lower(), url=url)


@router.post("/oauth/callback", response_model=TokenResponse)
def oauth_callback(payload: OAuthCallbackRequest, db: Session = Depends(get_db)) -> TokenResponse:
    try:
        user = exchange_supabase_token(db, payload.access_token)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except RuntimeError as exc:
        logger.warning("oauth_exchange_failed error=%s", exc)
        raise HTTPException(status_code=502, detail=str(exc))
    return TokenResponse(access_token=issue_token_for_user(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    user: User = Depends(get_current_user),
) -> None:
    if cred is not None:
        sign_out(cred.credentials)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)) -> UserOut:
    return _user_out(user)
