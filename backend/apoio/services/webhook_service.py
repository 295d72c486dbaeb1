"""Stripe webhook reconciliation: PENDING donations become PAID.

Signature verification happens in the route. Everything here runs after
verification and never raises; failures are logged and the donation stays
PENDING. The route acknowledges the event regardless.

Redelivery of the same event re-applies the same overwrite.
"""

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apoio.db.base import get_session_factory
from apoio.db.models.donation import Donation
from apoio.domain.donations import (
    DEFAULT_DONOR_MESSAGE,
    DEFAULT_DONOR_NAME,
    DonationStatus,
)
from apoio.integrations import stripe_gateway

logger = structlog.get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


def _payment_intent_id(reference: Any) -> str | None:
    """Checkout sessions carry the intent as an id, or as an object when expanded."""
    if reference is None or isinstance(reference, str):
        return reference
    return reference.get("id")


async def mark_donation_paid(
    session: AsyncSession,
    donation_id: str,
    donor_name: str,
    donor_message: str,
) -> Donation | None:
    """Flip a donation to PAID and overwrite its donor fields.

    Returns None when no donation matches ``donation_id``.
    """
    result = await session.execute(select(Donation).where(Donation.id == donation_id))
    donation = result.scalar_one_or_none()
    if donation is None:
        return None

    donation.status = DonationStatus.PAID.value
    donation.donor_name = donor_name
    donation.donor_message = donor_message
    await session.commit()
    return donation


async def handle_checkout_completed(checkout_session: dict) -> None:
    """Re-fetch the payment intent and mark its donation as paid."""
    payment_intent_id = _payment_intent_id(checkout_session.get("payment_intent"))

    try:
        payment_intent = await stripe_gateway.retrieve_payment_intent(payment_intent_id)
    except Exception as exc:
        logger.error(
            "payment_intent_retrieve_failed",
            payment_intent_id=payment_intent_id,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return

    metadata = payment_intent.get("metadata") or {}
    donation_id = metadata.get("donationId")
    donor_name = metadata.get("donorName")
    donor_message = metadata.get("donorMessage")
    if donor_name is None:
        donor_name = DEFAULT_DONOR_NAME
    if donor_message is None:
        donor_message = DEFAULT_DONOR_MESSAGE

    if not donation_id:
        logger.warning("payment_intent_missing_donation_id", payment_intent_id=payment_intent_id)
        return

    try:
        factory = get_session_factory()
        async with factory() as session:
            donation = await mark_donation_paid(session, donation_id, donor_name, donor_message)
    except Exception as exc:
        logger.error(
            "donation_update_failed",
            donation_id=donation_id,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return

    if donation is None:
        logger.warning("donation_not_found", donation_id=donation_id)
        return

    logger.info("donation_paid", donation_id=donation_id, amount=donation.amount)


async def handle_event(event: dict) -> None:
    """Dispatch a verified Stripe event. Unknown types are logged and ignored."""
    event_type = event["type"]
    logger.info("stripe_webhook_received", event_type=event_type, event_id=event.get("id"))

    if event_type == CHECKOUT_COMPLETED:
        await handle_checkout_completed(event["data"]["object"])
    else:
        logger.info("stripe_event_unhandled", event_type=event_type)
