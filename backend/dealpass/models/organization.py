from sqlalchemy import Column, DateTime, String, func

from dealpass.core.database import Base
from dealpass.models.shared import UUIDType, generate_uuid


class Organization(Base):
    """Account scope owning a coupon ledger and its redemption log."""

    __tablename__ = "organizations"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
