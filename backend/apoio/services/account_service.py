"""Stripe Connect provisioning for creators."""

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from apoio.core.exceptions import AccountProvisioningError
from apoio.db.models.user import User
from apoio.integrations import stripe_gateway

logger = structlog.get_logger(__name__)


async def provision_connected_account(session: AsyncSession, user_id: str) -> str:
    """Create a connected account for ``user_id`` and return its onboarding URL.

    Order: create account, persist its id on the user, request the
    onboarding link. Raises AccountProvisioningError when Stripe returns an
    account without an id; Stripe and database errors propagate.
    """
    account = await stripe_gateway.create_connected_account()
    account_id = account.id
    if not account_id:
        raise AccountProvisioningError("Stripe returned an account without an id")

    await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(connected_stripe_account_id=account_id)
    )
    await session.commit()
    logger.info("connected_account_created", user_id=user_id, account_id=account_id)

    return await stripe_gateway.create_onboarding_link(account_id)
