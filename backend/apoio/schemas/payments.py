"""Pydantic schemas for donor-facing payment initiation."""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from apoio.core.config import get_settings
from apoio.core.exceptions import PAYMENT_FAILED_MESSAGE

# Human-readable message per offending field, reported for the first error only
FIELD_ERROR_MESSAGES = {
    "slug": "Slug do creator é obrigatório",
    "name": "O nome precisa ter pelo menos 1 letra",
    "message": "A mensagem precisa ter pelo menos 5 letras",
    "creatorId": PAYMENT_FAILED_MESSAGE,
}


def min_price_message() -> str:
    minimum = get_settings().min_donation_amount
    return f"Selecione um valor maior que R${minimum // 100}"


class CreatePaymentRequest(BaseModel):
    """Donation request submitted from a creator's public page.

    ``creatorId`` is the creator's Stripe connected account id, not the
    user id.
    """

    model_config = ConfigDict(populate_by_name=True)

    slug: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    message: str = Field(..., min_length=5)
    price: int = Field(..., strict=True, description="Gross amount in minor units")
    creator_id: str = Field(..., alias="creatorId")

    @field_validator("price")
    @classmethod
    def price_above_minimum(cls, value: int) -> int:
        if value < get_settings().min_donation_amount:
            raise ValueError("price below minimum donation")
        return value


def first_error_message(exc: ValidationError) -> str:
    """Map the first validation error onto its fixed user-facing message."""
    errors = exc.errors()
    if not errors or not errors[0]["loc"]:
        return PAYMENT_FAILED_MESSAGE
    field = errors[0]["loc"][0]
    if field == "price":
        return min_price_message()
    return FIELD_ERROR_MESSAGES.get(field, PAYMENT_FAILED_MESSAGE)


class CreatePaymentResponse(BaseModel):
    """Either ``sessionId`` (success) or ``error`` is set, never both."""

    session_id: str | None = Field(None, serialization_alias="sessionId")
    error: str | None = None
