"""User onboarding REST router.

Endpoints are sync functions and run in FastAPI's threadpool.
Error handling: UnauthorizedError -> 401, IdentityNotFoundError -> 404,
other IdentityProviderError -> 502, ProfileUpdateError and DatabaseError
-> 500 with a stable message.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from careercoach.auth import get_current_user_id
from careercoach.config import get_settings
from careercoach.exceptions import (
    CareerCoachError,
    DatabaseError,
    IdentityNotFoundError,
    IdentityProviderError,
    ProfileUpdateError,
    UnauthorizedError,
)
from careercoach.insights.generator import InsightGenerator
from careercoach.insights.schemas import IndustryInsightResponse
from careercoach.insights.service import get_industry_insight
from careercoach.users.identity import IdentityClient
from careercoach.users.schemas import OnboardingStatus, ProfileUpdate, UserResponse
from careercoach.users.service import (
    ensure_local_user,
    get_user_onboarding_status,
    update_user,
)

users_router = APIRouter(prefix="/api/users", tags=["users"])


# -- Dependencies --------------------------------------------------------------


def _get_db():
    """Yield a SQLAlchemy session. Lazy-imports the engine so importing the router needs no config."""
    from careercoach.db.engine import get_sessionmaker

    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


@lru_cache(maxsize=1)
def get_identity_client() -> IdentityClient:
    return IdentityClient.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_insight_generator() -> InsightGenerator:
    return InsightGenerator.from_settings(get_settings())


@dataclass(frozen=True)
class UpdateOptions:
    """Per-request tuning for update_user, read from Settings."""

    timeout_seconds: float
    refresh_days: int


def get_update_options() -> UpdateOptions:
    settings = get_settings()
    return UpdateOptions(
        timeout_seconds=settings.transaction_timeout_seconds,
        refresh_days=settings.insight_refresh_days,
    )


def _identity_http_error(e: IdentityProviderError) -> HTTPException:
    if isinstance(e, IdentityNotFoundError):
        return HTTPException(status_code=404, detail=e.message)
    return HTTPException(status_code=502, detail=e.message)


# -- Endpoints -----------------------------------------------------------------


@users_router.put("/profile")
def update_profile_endpoint(
    request: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(_get_db),
    identity_client: IdentityClient = Depends(get_identity_client),
    generator: InsightGenerator = Depends(get_insight_generator),
    options: UpdateOptions = Depends(get_update_options),
) -> UserResponse:
    """Save the onboarding profile and make sure the industry insight exists."""
    try:
        user = update_user(
            db,
            user_id,
            request,
            identity_client,
            generator,
            timeout_seconds=options.timeout_seconds,
            refresh_days=options.refresh_days,
        )
    except IdentityProviderError as e:
        raise _identity_http_error(e)
    except ProfileUpdateError as e:
        # Cause stays in the logs; callers only get the stable message
        raise HTTPException(status_code=500, detail=e.message)
    return UserResponse.model_validate(user)


@users_router.get("/onboarding-status")
def onboarding_status_endpoint(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(_get_db),
    identity_client: IdentityClient = Depends(get_identity_client),
) -> OnboardingStatus:
    """Report whether the caller has completed onboarding."""
    try:
        return get_user_onboarding_status(db, user_id, identity_client)
    except IdentityProviderError as e:
        raise _identity_http_error(e)


@users_router.get("/industry-insight")
def industry_insight_endpoint(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(_get_db),
    identity_client: IdentityClient = Depends(get_identity_client),
) -> IndustryInsightResponse:
    """Return the cached insight for the caller's industry."""
    try:
        user = ensure_local_user(db, user_id, identity_client)
    except IdentityProviderError as e:
        raise _identity_http_error(e)

    if not user.industry:
        raise HTTPException(status_code=404, detail="Complete onboarding to see industry insights")

    insight = get_industry_insight(db, user.industry)
    if insight is None:
        raise HTTPException(status_code=404, detail=f"No insight for industry '{user.industry}'")
    return IndustryInsightResponse.model_validate(insight)


def register_exception_handlers(app) -> None:
    """Map guard and domain errors raised outside endpoint bodies."""
    from fastapi.responses import JSONResponse

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request, exc: UnauthorizedError):
        return JSONResponse(status_code=401, content={"detail": exc.message})

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request, exc: DatabaseError):
        return JSONResponse(status_code=500, content={"detail": exc.message})

    @app.exception_handler(CareerCoachError)
    async def domain_error_handler(request, exc: CareerCoachError):
        return JSONResponse(status_code=400, content={"detail": exc.message})
