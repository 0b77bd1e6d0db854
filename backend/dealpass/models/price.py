"""Price model for credit packs, one-time purchases and subscriptions."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid


class PriceType(str, Enum):
    ONE_TIME = "one_time"
    CREDIT = "credit"
    SUBSCRIPTION = "subscription"


class Price(Base):
    """A purchasable price mirrored from Stripe."""

    __tablename__ = "prices"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    organization_id = Column(
        UUIDType,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_ORGANIZATION_ID,
    )
    name = Column(String(255), nullable=False)
    price_type = Column(String(20), nullable=False, default=PriceType.ONE_TIME.value)
    stripe_price_id = Column(String(255), nullable=False, unique=True, index=True)
    unit_amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    interval = Column(String(20), nullable=True)
    credit_amount = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
