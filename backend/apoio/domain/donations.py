"""Donation lifecycle states and fee arithmetic."""

import math
from enum import Enum

# Applied by the webhook when the payment metadata carries no donor fields
DEFAULT_DONOR_NAME = "Anônimo"
DEFAULT_DONOR_MESSAGE = "Sem mensagem"


class DonationStatus(str, Enum):
    """Donation lifecycle.

    PENDING -> PAID happens only through the Stripe webhook.
    PENDING -> CANCELLED happens only through stale-donation expiry.
    """

    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


def split_fee(price: int, fee_rate: float) -> tuple[int, int]:
    """Split a gross price into (platform_fee, creator_amount).

    Both values are in minor currency units; the fee is floored so the
    creator never receives less than ``price - price * fee_rate``.

    >>> split_fee(2000, 0.10)
    (200, 1800)
    """
    fee = math.floor(price * fee_rate)
    return fee, price - fee
