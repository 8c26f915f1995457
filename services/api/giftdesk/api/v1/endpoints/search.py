from __future__ import annotations

import base64
import logging
from typing import Callable

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from giftdesk.api.deps import get_client_ip, get_db, get_optional_user, get_pipeline
from giftdesk.core.config import settings
from giftdesk.core.rate_limit import search_rate_limiter
from giftdesk.models import User
from giftdesk.schemas.recommendation import (
    GeminiDispatchRequest,
    GiftRecommendationOut,
    GiftSearchRequest,
    GiftSearchResponse,
    ProductQuoteOut,
    ProductQuoteRequest,
    ProductQuoteResponse,
    QuotaOut,
)
from giftdesk.services.recommendations import FAILURE_STATUS, raise_for_failure
from giftdesk.services.usage_ledger import (
    QuotaExceeded,
    claim_anonymous_search,
    quota_status,
    record_search,
    release_search,
)
from reco_core import ErrorKind, PipelineResult, RecommendationPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

# Failures that happen before Gemini is called do not use up the caller's quota.
_UNRECORDED_FAILURES = {ErrorKind.CONFIGURATION, ErrorKind.INPUT}


def _quota_denied(search_count: int) -> HTTPException:
    return HTTPException(
        status_code=403,
        detail={
            "message": "You have used your free search. Sign in to keep searching.",
            "requires_auth": True,
            "search_count": search_count,
        },
    )


def _check_quota(db: Session, ip: str, user: User | None) -> None:
    if not search_rate_limiter.allow(ip):
        raise HTTPException(status_code=429, detail="Too many searches, slow down")
    status = quota_status(db, ip, user)
    if not status.can_search:
        logger.info("search_quota_exhausted search_count=%d", status.search_count)
        raise _quota_denied(status.search_count)


def _run_recorded(
    db: Session,
    request: Request,
    ip: str,
    user: User | None,
    search_type: str,
    search_text: str,
    run: Callable[[], PipelineResult],
) -> PipelineResult:
    _check_quota(db, ip, user)
    user_agent = request.headers.get("user-agent")

    if user is None:
        # Claimed before the call; released again if the call never reaches Gemini.
        try:
            claimed = claim_anonymous_search(db, ip, search_text, search_type, user_agent=user_agent)
        except QuotaExceeded as exc:
            raise _quota_denied(exc.search_count)
        result = run()
        if claimed is not None and not result.ok and result.error_kind in _UNRECORDED_FAILURES:
            release_search(db, claimed)
        return result

    result = run()
    if result.ok or result.error_kind not in _UNRECORDED_FAILURES:
        record_search(
            db,
            ip_address=ip,
            search_query=search_text,
            search_type=search_type,
            user_id=user.id,
            user_agent=user_agent,
        )
    return result


def _quote_label(description: str | None, has_image: bool) -> str:
    text = (description or "").strip()
    if text:
        return text
    return "[image]" if has_image else ""


@router.get("/search/quota", response_model=QuotaOut)
def search_quota(
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
    ip: str = Depends(get_client_ip),
) -> QuotaOut:
    status = quota_status(db, ip, user)
    return QuotaOut(
        search_count=status.search_count,
        can_search=status.can_search,
        requires_auth=status.requires_auth,
    )


@router.post("/search/gifts", response_model=GiftSearchResponse)
def search_gifts(
    payload: GiftSearchRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
    ip: str = Depends(get_client_ip),
    pipeline: RecommendationPipeline = Depends(get_pipeline),
) -> GiftSearchResponse:
    query = payload.query.strip()
    result = _run_recorded(db, request, ip, user, "ai_search", query, lambda: pipeline.recommend_gifts(query))
    raise_for_failure(result)
    return GiftSearchResponse(
        recommendations=[GiftRecommendationOut.model_validate(g.to_dict()) for g in result.value],
        used_fallback=result.used_fallback,
    )


@router.post("/quote", response_model=ProductQuoteResponse)
def product_quote(
    payload: ProductQuoteRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
    ip: str = Depends(get_client_ip),
    pipeline: RecommendationPipeline = Depends(get_pipeline),
) -> ProductQuoteResponse:
    label = _quote_label(payload.description, bool(payload.image_base64))
    result = _run_recorded(
        db,
        request,
        ip,
        user,
        "product_quote",
        label,
        lambda: pipeline.quote_product(image_data=payload.image_base64, description=payload.description),
    )
    raise_for_failure(result)
    return ProductQuoteResponse(
        quote=ProductQuoteOut.model_validate(result.value.to_dict()),
        used_fallback=result.used_fallback,
    )


@router.post("/quote/from-image", response_model=ProductQuoteResponse)
def product_quote_from_image(
    request: Request,
    image: UploadFile = File(...),
    description: str | None = Form(default=None),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
    ip: str = Depends(get_client_ip),
    pipeline: RecommendationPipeline = Depends(get_pipeline),
) -> ProductQuoteResponse:
    content_type = image.content_type or "application/octet-stream"
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Unsupported content type: {content_type}")

    data = image.file.read(settings.max_upload_bytes + 1)
    if not data:
        raise HTTPException(status_code=400, detail="Empty image payload")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Image exceeds the upload size limit")

    image_data = f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"
    result = _run_recorded(
        db,
        request,
        ip,
        user,
        "product_quote",
        _quote_label(description, True),
        lambda: pipeline.quote_product(image_data=image_data, description=description),
    )
    raise_for_failure(result)
    return ProductQuoteResponse(
        quote=ProductQuoteOut.model_validate(result.value.to_dict()),
        used_fallback=result.used_fallback,
    )


@router.post("/gemini-ai")
def gemini_dispatch(
    payload: GeminiDispatchRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
    ip: str = Depends(get_client_ip),
    pipeline: RecommendationPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Single entry point taking `type: gifts | product-quote`, answering `{success, data | error}`."""
    if payload.type == "gifts":
        query = (payload.query or "").strip()
        result = _run_recorded(db, request, ip, user, "ai_search", query, lambda: pipeline.recommend_gifts(query))
        data = [g.to_dict() for g in result.value] if result.ok else None
    else:
        result = _run_recorded(
            db,
            request,
            ip,
            user,
            "product_quote",
            _quote_label(payload.description, bool(payload.image_base64)),
            lambda: pipeline.quote_product(image_data=payload.image_base64, description=payload.description),
        )
        data = result.value.to_dict() if result.ok else None

    if not result.ok:
        kind = result.error_kind or ErrorKind.TRANSPORT
        return JSONResponse(
            status_code=FAILURE_STATUS.get(kind, 500),
            content={"success": False, "error": result.message, "kind": kind.value},
        )
    return JSONResponse(content={"success": True, "data": data, "usedFallback": result.used_fallback})
