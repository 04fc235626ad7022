"""Industry insight cache.

Insights are shared across users and keyed by industry. Generation is slow
and happens outside any write transaction; storing the result is a
conditional insert inside a savepoint. When another request stored the same
industry first, the unique constraint rejects our row, the savepoint is
rolled back and the winner's row is returned instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from careercoach.db.engine import begin_write
from careercoach.exceptions import DatabaseError
from careercoach.insights.models import IndustryInsight
from careercoach.insights.schemas import InsightPayload

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_DAYS = 7


class InsightSource(Protocol):
    """Anything that can produce an InsightPayload for an industry."""

    def generate(self, industry: str, timeout: Optional[float] = None) -> InsightPayload:
        ...


def get_industry_insight(db: Session, industry: str) -> Optional[IndustryInsight]:
    """Return the cached insight for industry, or None."""
    return (
        db.query(IndustryInsight)
        .filter(IndustryInsight.industry == industry)
        .first()
    )


def compute_next_update(
    now: datetime, refresh_days: int = DEFAULT_REFRESH_DAYS
) -> datetime:
    return now + timedelta(days=refresh_days)


def store_generated_insight(
    db: Session,
    industry: str,
    payload: InsightPayload,
    refresh_days: int = DEFAULT_REFRESH_DAYS,
    now: Optional[datetime] = None,
) -> tuple[IndustryInsight, bool]:
    """Insert a generated insight unless one already exists.

    Runs inside the caller's transaction; does not commit.

    Returns:
        (insight, created). created is False when a concurrent writer stored
        the industry first and its row was returned instead.

    Raises:
        DatabaseError: the insert failed for a reason other than a duplicate
            industry, or the conflicting row could not be re-read.
    """
    now = now or datetime.now(timezone.utc)
    insight = IndustryInsight(
        industry=industry,
        salary_ranges=[r.model_dump() for r in payload.salary_ranges],
        growth_rate=payload.growth_rate,
        demand_level=payload.demand_level,
        top_skills=payload.top_skills,
        market_outlook=payload.market_outlook,
        key_trends=payload.key_trends,
        recommended_skills=payload.recommended_skills,
        last_updated=now,
        next_update=compute_next_update(now, refresh_days),
    )

    try:
        with db.begin_nested():
            db.add(insight)
    except IntegrityError as e:
        logger.info("Insight for %r was stored concurrently; using existing row", industry)
        existing = get_industry_insight(db, industry)
        if existing is None:
            raise DatabaseError(
                message="Failed to store industry insight",
                detail=str(e.orig),
            ) from e
        return existing, False

    return insight, True


def ensure_industry_insight(
    db: Session,
    industry: str,
    generator: InsightSource,
    refresh_days: int = DEFAULT_REFRESH_DAYS,
    budget: Optional[Callable[[], float]] = None,
) -> tuple[IndustryInsight, bool]:
    """Find-or-generate the insight for industry.

    The lookup's read transaction is committed before anything else, so the
    caller must have nothing pending. The generator is only called on a cache
    miss and runs with no transaction open; budget() supplies its timeout and
    is checked again once it returns. The function returns with a write
    transaction open (see begin_write) for the caller to extend and commit.

    Returns:
        (insight, created). created is False on a cache hit and when a
        concurrent writer stored the industry first.
    """
    existing = get_industry_insight(db, industry)
    db.commit()
    if existing is not None:
        begin_write(db)
        return existing, False

    payload = generator.generate(industry, timeout=budget() if budget else None)
    if budget is not None:
        budget()

    begin_write(db)
    return store_generated_insight(db, industry, payload, refresh_days=refresh_days)
