"""Append-only log of redemption attempts."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid, utc_now


class TransactionOutcome(str, Enum):
    SUCCESS = "success"
    ALREADY_REDEEMED = "already-redeemed"
    EXPIRED = "expired"
    INVALID = "invalid"


class RedemptionTransaction(Base):
    __tablename__ = "redemption_transactions"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    organization_id = Column(
        UUIDType,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_ORGANIZATION_ID,
    )
    code = Column(String(64), nullable=False, index=True)
    deal_title = Column(String(255), nullable=True)
    discount_display = Column(String(50), nullable=True)
    customer_name = Column(String(255), nullable=True)
    outcome = Column(String(20), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
