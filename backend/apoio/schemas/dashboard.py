"""Pydantic schemas for creator dashboard API responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DonationItem(BaseModel):
    """Donation as shown in the creator's dashboard list."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Donation id")
    amount: int = Field(..., description="Net amount in minor units")
    donor_name: str = Field(..., serialization_alias="donorName")
    donor_message: str = Field(..., serialization_alias="donorMessage")
    status: str = Field(..., description="PENDING, PAID or CANCELLED")
    created_at: datetime = Field(..., serialization_alias="createdAt")


class DonationListResponse(BaseModel):
    data: list[DonationItem] = Field(default_factory=list)


class CreatorStats(BaseModel):
    """Aggregates for the dashboard header.

    All numbers default to zero (never null). ``error`` is set only when a
    downstream call failed.
    """

    total_donations: int = Field(0, serialization_alias="totalQtdDonations")
    total_amount: int = Field(0, serialization_alias="totalAmountResults")
    balance: int = Field(0, description="Pending Stripe balance in minor units")
    error: str | None = None


class LinkResponse(BaseModel):
    """URL returned by Stripe link endpoints (onboarding, dashboard login)."""

    url: str | None = None
