from sqlalchemy import Column, DateTime, ForeignKey, String, func

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid


class Customer(Base):
    """Marketplace user who buys deals, credits and subscriptions."""

    __tablename__ = "customers"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    organization_id = Column(
        UUIDType,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_ORGANIZATION_ID,
    )
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    stripe_customer_id = Column(String(255), nullable=True, unique=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
