"""Payment model for recording Stripe payments."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid


class PaymentStatus(str, Enum):
    """Payment status enum."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PaymentProvider(str, Enum):
    """Supported payment providers."""

    STRIPE = "stripe"


class Payment(Base):
    """Payment model - one row per settled checkout session or paid invoice."""

    __tablename__ = "payments"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    organization_id = Column(
        UUIDType,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_ORGANIZATION_ID,
    )
    customer_id = Column(
        UUIDType, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    price_id = Column(
        UUIDType, ForeignKey("prices.id", ondelete="RESTRICT"), nullable=True, index=True
    )

    # Amount in the smallest currency unit, as Stripe reports it
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="usd")
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)

    provider = Column(String(50), nullable=False, default=PaymentProvider.STRIPE.value)
    provider_payment_id = Column(String(255), nullable=False, unique=True, index=True)

    payment_metadata = Column(JSON, nullable=True, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
