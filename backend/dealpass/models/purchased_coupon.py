"""Purchased coupon model: one row per redeemable code in the coupon ledger."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, func

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid


class CouponStatus(str, Enum):
    UNREDEEMED = "unredeemed"
    REDEEMED = "redeemed"
    EXPIRED = "expired"


class PurchasedCoupon(Base):
    """Ledger row for a purchased discount code.

    Rows are never deleted. ``status`` only moves from ``unredeemed`` to
    ``redeemed`` or ``expired``, and only through the ledger's conditional write.
    """

    __tablename__ = "purchased_coupons"
    __table_args__ = (
        UniqueConstraint("organization_id", "code", name="uq_purchased_coupons_org_code"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    organization_id = Column(
        UUIDType,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_ORGANIZATION_ID,
    )
    customer_id = Column(
        UUIDType, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    discount_deal_id = Column(
        UUIDType, ForeignKey("discount_deals.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    code = Column(String(64), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=CouponStatus.UNREDEEMED.value)

    # Snapshot of the deal and purchaser at purchase time
    deal_title = Column(String(255), nullable=False)
    discount_value = Column(String(50), nullable=False)
    store_name = Column(String(255), nullable=True)
    customer_name = Column(String(255), nullable=True)

    purchase_date = Column(DateTime(timezone=True), nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=False)
    redemption_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
