"""Creator dashboard routes: donations, earnings and Stripe links."""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from apoio.core.auth import SessionUser, require_auth
from apoio.core.exceptions import DONATIONS_FETCH_FAILED_MESSAGE, STATS_FETCH_FAILED_MESSAGE
from apoio.db.base import get_session_factory
from apoio.schemas.dashboard import CreatorStats, DonationListResponse, LinkResponse
from apoio.services import dashboard_service, profile_service

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _connected_account_id(user_id: str) -> str | None:
    """Raises on database failure; callers map it to their fixed response."""
    factory = get_session_factory()
    async with factory() as session:
        profile = await profile_service.get_own_profile(session, user_id)
    return profile.connected_stripe_account_id if profile else None


@router.get("/donates", response_model=DonationListResponse)
async def list_donations(user: SessionUser = Depends(require_auth)):
    """The caller's PAID donations, newest first."""
    try:
        factory = get_session_factory()
        async with factory() as session:
            donations = await dashboard_service.list_paid_donations(session, user.user_id)
    except Exception as exc:
        logger.error("donations_list_failed", user_id=user.user_id, error=str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": DONATIONS_FETCH_FAILED_MESSAGE})

    return DonationListResponse(data=donations)


@router.get("/dashboard/stats", response_model=CreatorStats, response_model_exclude_none=True)
async def get_stats(user: SessionUser = Depends(require_auth)):
    """Donation count, total received and pending Stripe balance."""
    try:
        account_id = await _connected_account_id(user.user_id)
    except Exception as exc:
        logger.error("creator_account_lookup_failed", user_id=user.user_id, error=str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": STATS_FETCH_FAILED_MESSAGE})

    factory = get_session_factory()
    async with factory() as session:
        stats = await dashboard_service.get_stats(session, user.user_id, account_id)

    if stats.error:
        return JSONResponse(status_code=500, content={"error": stats.error})
    return stats


async def _link_for(user_id: str, fetch_link) -> LinkResponse:
    try:
        account_id = await _connected_account_id(user_id)
    except Exception as exc:
        logger.warning("creator_account_lookup_failed", user_id=user_id, error=str(exc))
        return LinkResponse(url=None)
    return LinkResponse(url=await fetch_link(account_id))


@router.get("/dashboard/stripe-login", response_model=LinkResponse)
async def get_stripe_login(user: SessionUser = Depends(require_auth)):
    """Login link into the caller's Stripe Express dashboard (``url`` is null without one)."""
    return await _link_for(user.user_id, dashboard_service.get_dashboard_login_link)


@router.get("/dashboard/onboarding-link", response_model=LinkResponse)
async def get_onboarding_link(user: SessionUser = Depends(require_auth)):
    """Resume Stripe onboarding for an account that already exists."""
    return await _link_for(user.user_id, dashboard_service.get_onboarding_link)
