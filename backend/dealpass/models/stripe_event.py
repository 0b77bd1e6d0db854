"""Processed Stripe event ids, used to drop duplicate webhook deliveries."""

from sqlalchemy import Column, DateTime, String

from dealpass.core.database import Base
from dealpass.models.shared import utc_now


class ProcessedStripeEvent(Base):
    __tablename__ = "processed_stripe_events"

    id = Column(String(255), primary_key=True)
    event_type = Column(String(100), nullable=False)
    processed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
