"""User provisioning, profile onboarding and onboarding status.

ensure_local_user: idempotent local mirror of an identity-provider account.
update_user: profile update plus industry insight, within a time budget.
get_user_onboarding_status: industry presence as the onboarding signal.

All functions take a Session as first argument (dependency injection).
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from careercoach.cache import PageCache, page_cache as default_page_cache
from careercoach.db.engine import begin_write
from careercoach.exceptions import (
    DatabaseError,
    ProfileUpdateError,
    TransactionTimeoutError,
)
from careercoach.insights.service import (
    DEFAULT_REFRESH_DAYS,
    InsightSource,
    ensure_industry_insight,
)
from careercoach.users.models import User
from careercoach.users.schemas import IdentityProfile, OnboardingStatus, ProfileUpdate

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class IdentitySource(Protocol):
    """Anything that can fetch a provider profile for an external id."""

    def fetch_user(self, external_id: str) -> IdentityProfile:
        ...


def get_user_by_external_id(db: Session, external_id: str) -> Optional[User]:
    return db.query(User).filter(User.clerk_user_id == external_id).first()


def ensure_local_user(
    db: Session, external_id: str, identity_client: IdentitySource
) -> User:
    """Return the local user for external_id, provisioning it on first sight.

    The provider is only contacted when no local row exists. A concurrent
    first request that wins the insert is detected through the unique
    constraint on clerk_user_id and its row is returned.

    On a miss the lookup's read transaction is committed before the provider
    call, so the caller must have nothing pending. The insert then runs in a
    write transaction of its own (see begin_write).

    Raises:
        IdentityProviderError subclasses from the provider fetch.
        DatabaseError: insert failed and no row could be re-read.
    """
    user = get_user_by_external_id(db, external_id)
    if user is not None:
        return user
    db.commit()

    profile = identity_client.fetch_user(external_id)

    begin_write(db)
    user = User(
        clerk_user_id=external_id,
        email=profile.email,
        name=profile.name,
        image_url=profile.image_url,
        skills=[],
    )
    try:
        with db.begin_nested():
            db.add(user)
    except IntegrityError as e:
        existing = get_user_by_external_id(db, external_id)
        if existing is None:
            db.rollback()
            raise DatabaseError(
                message="Failed to provision user",
                detail=str(e.orig),
            ) from e
        db.commit()
        logger.info("user_provisioned_concurrently", external_id=external_id)
        return existing

    db.commit()
    db.refresh(user)
    logger.info("user_provisioned", external_id=external_id, user_id=user.id)
    return user


def update_user(
    db: Session,
    external_id: str,
    data: ProfileUpdate,
    identity_client: IdentitySource,
    generator: InsightSource,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    refresh_days: int = DEFAULT_REFRESH_DAYS,
    cache: Optional[PageCache] = None,
    clock: Callable[[], float] = time.monotonic,
) -> User:
    """Update the caller's onboarding profile and ensure its industry insight.

    Steps:
    1. Resolve (or provision) the local user.
    2. Find-or-generate the industry insight. The generator runs with no
       transaction open and gets the remaining budget as its timeout.
    3. In one transaction: conditionally insert the insight, then overwrite
       industry, experience, bio and skills (last write wins).
    4. Abort if the budget ran out before commit; otherwise commit and
       revalidate the root page.

    Raises:
        IdentityProviderError subclasses when provisioning fails.
        ProfileUpdateError: any failure after provisioning. The original
            exception is chained as __cause__.
    """
    user = ensure_local_user(db, external_id, identity_client)
    cache = cache or default_page_cache
    deadline = clock() + timeout_seconds

    def remaining() -> float:
        left = deadline - clock()
        if left <= 0:
            raise TransactionTimeoutError(
                detail=f"budget={timeout_seconds}s, industry={data.industry!r}",
            )
        return left

    try:
        insight, created = ensure_industry_insight(
            db,
            data.industry,
            generator,
            refresh_days=refresh_days,
            budget=remaining,
        )
        if created:
            logger.info(
                "industry_insight_stored", industry=data.industry, insight_id=insight.id
            )

        user.industry = data.industry
        user.experience = data.experience
        user.bio = data.bio
        user.skills = list(data.skills)
        db.flush()

        remaining()
        db.commit()
        db.refresh(user)

        cache.revalidate_path("/")
    except Exception as e:
        db.rollback()
        logger.error(
            "profile_update_failed",
            external_id=external_id,
            industry=data.industry,
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        raise ProfileUpdateError(detail=type(e).__name__) from e

    logger.info(
        "profile_updated",
        user_id=user.id,
        industry=user.industry,
        skills=len(user.skills),
    )
    return user


def get_user_onboarding_status(
    db: Session, external_id: str, identity_client: IdentitySource
) -> OnboardingStatus:
    """Report whether the caller has completed onboarding.

    Provisions the local user on first sight, like update_user.
    """
    user = ensure_local_user(db, external_id, identity_client)
    return OnboardingStatus(is_onboarded=bool(user.industry))
