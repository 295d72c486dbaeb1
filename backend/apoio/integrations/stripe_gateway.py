"""Stripe integration: checkout, Connect accounts, balances.

Thin async wrappers over the Stripe SDK so services never build request
payloads inline. Errors propagate as ``stripe.StripeError``; callers decide
how to map them.
"""

import stripe

from apoio.core.config import get_settings

# Connected accounts: platform absorbs losses and fees, creator gets the
# Stripe-hosted Express dashboard.
CONNECTED_ACCOUNT_CONTROLLER = {
    "losses": {"payments": "application"},
    "fees": {"payer": "application"},
    "stripe_dashboard": {"type": "express"},
}


def _get_stripe() -> None:
    """Configure the stripe module with the secret key."""
    settings = get_settings()
    stripe.api_key = settings.stripe_secret_key


async def create_donation_checkout_session(
    *,
    slug: str,
    creator_name: str | None,
    price: int,
    application_fee: int,
    destination_account: str,
    metadata: dict[str, str],
) -> stripe.checkout.Session:
    """Create a one-off hosted checkout for ``price`` minor units.

    ``application_fee`` stays with the platform, the rest is transferred to
    ``destination_account``. ``metadata`` is attached to the payment intent
    so the webhook can correlate the payment with its donation.
    """
    settings = get_settings()
    _get_stripe()

    return_url = f"{settings.host_url}/creator/{slug}"
    return await stripe.checkout.Session.create_async(
        payment_method_types=["card"],
        mode="payment",
        success_url=return_url,
        cancel_url=return_url,
        line_items=[
            {
                "price_data": {
                    "currency": settings.donation_currency,
                    "product_data": {"name": f"Apoiar {creator_name or ''}".strip()},
                    "unit_amount": price,
                },
                "quantity": 1,
            }
        ],
        payment_intent_data={
            "application_fee_amount": application_fee,
            "transfer_data": {"destination": destination_account},
            "metadata": metadata,
        },
    )


async def retrieve_payment_intent(payment_intent_id: str) -> stripe.PaymentIntent:
    _get_stripe()
    return await stripe.PaymentIntent.retrieve_async(payment_intent_id)


async def create_connected_account() -> stripe.Account:
    _get_stripe()
    return await stripe.Account.create_async(controller=CONNECTED_ACCOUNT_CONTROLLER)


async def create_onboarding_link(account_id: str) -> str:
    """Return a one-time Connect onboarding URL that comes back to the dashboard."""
    settings = get_settings()
    _get_stripe()

    account_link = await stripe.AccountLink.create_async(
        account=account_id,
        refresh_url=f"{settings.host_url}/dashboard",
        return_url=f"{settings.host_url}/dashboard",
        type="account_onboarding",
    )
    return account_link.url


async def create_login_link(account_id: str) -> str:
    _get_stripe()
    login_link = await stripe.Account.create_login_link_async(account_id)
    return login_link.url


async def retrieve_pending_balance(account_id: str) -> int:
    """Pending balance (first currency bucket) of a connected account, in minor units."""
    _get_stripe()
    balance = await stripe.Balance.retrieve_async(stripe_account=account_id)
    pending = balance.get("pending") or []
    if not pending:
        return 0
    return pending[0].get("amount") or 0
