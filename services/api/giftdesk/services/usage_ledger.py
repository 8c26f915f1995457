from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from giftdesk.core.config import settings
from giftdesk.models import SEARCH_TYPES, SearchRecord, User

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class QuotaStatus:
    search_count: int
    can_search: bool
    requires_auth: bool


def count_searches(db: Session, ip_address: str) -> int:
    return int(
        db.query(func.count(SearchRecord.id)).filter(SearchRecord.ip_address == ip_address).scalar() or 0
    )


def quota_status(db: Session, ip_address: str, user: User | None) -> QuotaStatus:
    """Signed-in callers are unlimited; anonymous callers get a fixed number of searches per IP, ever."""
    count = count_searches(db, ip_address)
    if user is not None:
        return QuotaStatus(search_count=count, can_search=True, requires_auth=False)
    exhausted = count >= settings.anonymous_search_limit
    return QuotaStatus(search_count=count, can_search=not exhausted, requires_auth=exhausted)


def record_search(
    db: Session,
    ip_address: str,
    search_query: str,
    search_type: str,
    user_id: str | None = None,
    user_agent: str | None = None,
) -> SearchRecord | None:
    """Append one row to `user_searches`. Storage failures are logged, not raised."""
    if search_type not in SEARCH_TYPES:
        raise ValueError(f"Unknown search type: {search_type}")

    row = SearchRecord(
        user_id=user_id,
        ip_address=ip_address,
        search_query=search_query[:2000],
        search_type=search_type,
        user_agent=user_agent[:512] if user_agent else None,
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("search_record_failed search_type=%s", search_type)
        return None
    logger.info("search_recorded search_type=%s user_id=%s", search_type, user_id)
    return row


class QuotaExceeded(Exception):
    def __init__(self, search_count: int) -> None:
        super().__init__(f"Anonymous search limit reached ({search_count} searches)")
        self.search_count = search_count


def claim_anonymous_search(
    db: Session,
    ip_address: str,
    search_query: str,
    search_type: str,
    user_agent: str | None = None,
) -> SearchRecord | None:
    """Record an anonymous search before it runs, then re-count.

    Concurrent requests from one IP each insert their row first, so whichever
    finds the count over the limit backs its own row out and raises
    QuotaExceeded. Returns None when the row could not be stored, in which
    case the search is let through.
    """
    row = record_search(db, ip_address, search_query, search_type, user_agent=user_agent)
    if row is None:
        return None
    count = count_searches(db, ip_address)
    if count > settings.anonymous_search_limit:
        release_search(db, row)
        logger.info("search_claim_refused search_count=%d", count - 1)
        raise QuotaExceeded(count - 1)
    return row


def release_search(db: Session, row: SearchRecord) -> None:
    """Drop a claimed row for a search that never reached Gemini."""
    try:
        db.delete(row)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("search_release_failed search_id=%s", row.id)
        return
    logger.info("search_released search_id=%s", row.id)
