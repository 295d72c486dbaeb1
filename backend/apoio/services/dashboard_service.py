"""DashboardService: read-only aggregates over a creator's donations.

Every function tolerates a missing identifier by returning an empty or zero
result. Stripe link failures map to None and stats failures to a fixed
error message.
"""

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from apoio.core.exceptions import STATS_FETCH_FAILED_MESSAGE
from apoio.db.models.donation import Donation
from apoio.domain.donations import DonationStatus
from apoio.integrations import stripe_gateway
from apoio.schemas.dashboard import CreatorStats, DonationItem

logger = structlog.get_logger(__name__)


async def list_paid_donations(session: AsyncSession, user_id: str | None) -> list[DonationItem]:
    """PAID donations received by ``user_id``, newest first.

    DB errors propagate; the route maps them to a fixed message.
    """
    if not user_id:
        return []

    result = await session.execute(
        select(Donation)
        .where(
            Donation.user_id == user_id,
            Donation.status == DonationStatus.PAID.value,
        )
        .order_by(Donation.created_at.desc())
    )
    return [DonationItem.model_validate(row) for row in result.scalars().all()]


async def count_and_sum_paid(session: AsyncSession, user_id: str | None) -> tuple[int, int]:
    """(count, sum of net amount) over PAID donations. Raises on DB failure."""
    if not user_id:
        return 0, 0

    result = await session.execute(
        select(
            func.count(Donation.id),
            func.coalesce(func.sum(Donation.amount), 0),
        ).where(
            Donation.user_id == user_id,
            Donation.status == DonationStatus.PAID.value,
        )
    )
    count, total = result.one()
    return int(count), int(total)


async def get_pending_balance(account_id: str | None) -> int:
    """Stripe pending balance for a connected account; 0 without an account."""
    if not account_id:
        return 0
    return await stripe_gateway.retrieve_pending_balance(account_id)


async def get_stats(
    session: AsyncSession,
    user_id: str | None,
    account_id: str | None,
) -> CreatorStats:
    """Donation count, total received and pending balance for the dashboard header."""
    if not user_id:
        return CreatorStats()

    try:
        total_donations, total_amount = await count_and_sum_paid(session, user_id)
        balance = await get_pending_balance(account_id)
    except Exception as exc:
        logger.error(
            "creator_stats_failed",
            user_id=user_id,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return CreatorStats(error=STATS_FETCH_FAILED_MESSAGE)

    return CreatorStats(
        total_donations=total_donations,
        total_amount=total_amount,
        balance=balance,
    )


async def get_dashboard_login_link(account_id: str | None) -> str | None:
    """Login link into the creator's Stripe Express dashboard, or None."""
    if not account_id:
        return None
    try:
        return await stripe_gateway.create_login_link(account_id)
    except Exception as exc:
        logger.warning("stripe_login_link_failed", account_id=account_id, error=str(exc))
        return None


async def get_onboarding_link(account_id: str | None) -> str | None:
    """Fresh onboarding link for a creator who has not finished Stripe onboarding."""
    if not account_id:
        return None
    try:
        return await stripe_gateway.create_onboarding_link(account_id)
    except Exception as exc:
        logger.warning("stripe_onboarding_link_failed", account_id=account_id, error=str(exc))
        return None
