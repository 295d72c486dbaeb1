"""User model - creator accounts that can receive donations."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from apoio.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Profile (initially from session claims, editable from the dashboard)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    image = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)

    # Public slug for /creator/{username}; uniqueness lives in the index
    username = Column(String(255), nullable=True, unique=True, index=True)

    # Stripe Connect sub-account, null until onboarding starts
    connected_stripe_account_id = Column(String(255), nullable=True, unique=True, index=True)

    donations = relationship("Donation", back_populates="user")

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
