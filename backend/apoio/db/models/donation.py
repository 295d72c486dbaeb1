"""Donation model - one payment attempt from a donor to a creator."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from apoio.db.base import Base
from apoio.domain.donations import DonationStatus


class Donation(Base):
    __tablename__ = "donations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    user = relationship("User", back_populates="donations")

    # Net of the platform fee, in minor units; fixed at creation
    amount = Column(Integer, nullable=False)

    donor_name = Column(String(255), nullable=False)
    donor_message = Column(Text, nullable=False)

    status = Column(String(20), nullable=False, default=DonationStatus.PENDING.value, index=True)  # DonationStatus values

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
