"""Credit balance per customer."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint, func

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid


class UserCredit(Base):
    """Prepaid credit balance. Mutated only through atomic increments."""

    __tablename__ = "user_credits"
    __table_args__ = (UniqueConstraint("customer_id", name="uq_user_credits_customer_id"),)

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
    balance = Column(Integer, nullable=False, default=0)
    credits_purchased = Column(Integer, nullable=False, default=0)
    credits_used = Column(Integer, nullable=False, default=0)
    last_purchase_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
