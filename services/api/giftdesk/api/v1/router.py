from __future__ import annotations

from fastapi import APIRouter

from giftdesk.api.v1.endpoints import auth
from giftdesk.api.v1.endpoints import search
from giftdesk.api.v1.endpoints import status

api_router = APIRouter(prefix="/v1")
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(search.router, tags=["search"])
api_router.include_router(status.router, tags=["status"])
