"""PaymentService: turns a donor's request into a pending donation plus a Stripe checkout.

The donation row is committed before Stripe is called. If checkout creation
fails the row stays PENDING until stale-donation expiry cancels it.
"""

from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apoio.core.config import get_settings
from apoio.core.exceptions import (
    PAYMENT_FAILED_MESSAGE,
    CreatorNotFoundError,
    DonationValidationError,
)
from apoio.db.models.donation import Donation
from apoio.db.models.user import User
from apoio.domain.donations import DonationStatus, split_fee
from apoio.integrations import stripe_gateway
from apoio.schemas.payments import (
    CreatePaymentRequest,
    CreatePaymentResponse,
    first_error_message,
)

logger = structlog.get_logger(__name__)


def parse_payment_request(payload: Any) -> CreatePaymentRequest:
    """Validate raw input, raising DonationValidationError with the first failure."""
    if not isinstance(payload, dict):
        raise DonationValidationError(PAYMENT_FAILED_MESSAGE)
    try:
        request = CreatePaymentRequest.model_validate(payload)
    except ValidationError as exc:
        raise DonationValidationError(first_error_message(exc)) from exc

    if not request.creator_id:
        raise DonationValidationError(PAYMENT_FAILED_MESSAGE)
    return request


async def find_creator_by_account(session: AsyncSession, account_id: str) -> User:
    result = await session.execute(
        select(User).where(User.connected_stripe_account_id == account_id)
    )
    creator = result.scalars().first()
    if creator is None:
        raise CreatorNotFoundError(account_id)
    return creator


async def create_payment(session: AsyncSession, payload: Any) -> CreatePaymentResponse:
    """Create a PENDING donation and a hosted checkout session for it.

    Returns ``sessionId`` on success. Every failure is reported as ``error``:
    the first validation message, or one fixed generic message for creator
    lookup, database and Stripe failures.
    """
    try:
        request = parse_payment_request(payload)
    except DonationValidationError as exc:
        return CreatePaymentResponse(error=exc.message)

    settings = get_settings()

    try:
        creator = await find_creator_by_account(session, request.creator_id)

        fee, net_amount = split_fee(request.price, settings.platform_fee_rate)

        donation = Donation(
            user_id=creator.id,
            donor_name=request.name,
            donor_message=request.message,
            status=DonationStatus.PENDING.value,
            amount=net_amount,
        )
        session.add(donation)
        await session.commit()
        await session.refresh(donation)

        logger.info(
            "donation_created",
            donation_id=donation.id,
            creator_id=creator.id,
            price=request.price,
            amount=net_amount,
        )

        checkout_session = await stripe_gateway.create_donation_checkout_session(
            slug=request.slug,
            creator_name=creator.name,
            price=request.price,
            application_fee=fee,
            destination_account=creator.connected_stripe_account_id,
            metadata={
                "donorName": request.name,
                "donorMessage": request.message,
                "donationId": donation.id,
            },
        )
    except CreatorNotFoundError as exc:
        logger.warning("payment_creator_not_found", account_id=exc.account_id)
        return CreatePaymentResponse(error=PAYMENT_FAILED_MESSAGE)
    except Exception as exc:
        logger.error(
            "payment_creation_failed",
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return CreatePaymentResponse(error=PAYMENT_FAILED_MESSAGE)

    logger.info("checkout_session_created", donation_id=donation.id, session_id=checkout_session.id)
    return CreatePaymentResponse(session_id=checkout_session.id)
