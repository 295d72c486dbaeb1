"""Pydantic schemas for creator profiles."""

from pydantic import BaseModel, ConfigDict, Field


class CreatorProfile(BaseModel):
    """Public creator profile rendered on /creator/{username}."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str | None = None
    username: str | None = None
    bio: str | None = None
    image: str | None = None
    connected_stripe_account_id: str | None = Field(None, serialization_alias="connectedStripeAccountId")


class NameUpdateRequest(BaseModel):
    name: str | None = None


class BioUpdateRequest(BaseModel):
    description: str | None = None


class UsernameRequest(BaseModel):
    username: str | None = None


class ProfileUpdateResult(BaseModel):
    """Outcome of a profile action: ``data`` on success, ``error`` otherwise."""

    data: str | None = None
    error: str | None = None
