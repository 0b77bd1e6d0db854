"""Discount deal model: the catalog entry customers buy coupons from."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid


class DiscountDeal(Base):
    __tablename__ = "discount_deals"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    organization_id = Column(
        UUIDType,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_ORGANIZATION_ID,
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    store_name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    discount_value = Column(String(50), nullable=False)
    coupon_prefix = Column(String(32), nullable=False)
    credit_cost = Column(Integer, nullable=False, default=0)
    redeem_policy = Column(Text, nullable=True)
    views = Column(Integer, nullable=False, default=0)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
