"""CreditTransaction model for tracking credit movements."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid


class CreditTransactionType(str, Enum):
    PURCHASE = "purchase"
    SPEND = "spend"


class CreditTransaction(Base):
    __tablename__ = "credit_transactions"

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
    amount = Column(Integer, nullable=False)
    transaction_type = Column(String(20), nullable=False)
    reference_id = Column(String(255), nullable=True, index=True)
    transaction_metadata = Column(JSON, nullable=True, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
