"""Stale donation expiry.

Donations stay PENDING when the donor abandons checkout or when checkout
creation failed after the row was written. This is the only code path that
produces CANCELLED. PAID rows are never touched, and the webhook may still
mark a CANCELLED donation as PAID if Stripe later confirms the payment.
"""

from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from apoio.db.models.donation import Donation
from apoio.domain.donations import DonationStatus

logger = structlog.get_logger(__name__)


async def expire_stale_donations(
    session: AsyncSession,
    ttl: timedelta,
    now: datetime | None = None,
) -> int:
    """Mark PENDING donations created before ``now - ttl`` as CANCELLED.

    Returns the number of donations cancelled.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - ttl

    result = await session.execute(
        update(Donation)
        .where(
            Donation.status == DonationStatus.PENDING.value,
            Donation.created_at < cutoff,
        )
        .values(status=DonationStatus.CANCELLED.value, updated_at=now)
    )
    await session.commit()

    expired = result.rowcount or 0
    logger.info("stale_donations_expired", count=expired, cutoff=cutoff.isoformat())
    return expired
