"""Brand deal model: a paid collaboration brands offer to content creators."""

from enum import Enum

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from dealpass.core.database import Base
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid


class BrandDealStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class BrandDeal(Base):
    __tablename__ = "brand_deals"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    organization_id = Column(
        UUIDType,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        default=DEFAULT_ORGANIZATION_ID,
    )
    title = Column(String(255), nullable=False)
    brand_name = Column(String(255), nullable=False)
    industry = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    benefits = Column(Text, nullable=False)
    promotion_type = Column(String(50), nullable=False)
    platform = Column(String(50), nullable=False)
    collaboration_type = Column(String(50), nullable=False)
    content_type = Column(String(50), nullable=False, default="Post")
    location = Column(String(255), nullable=False)
    address = Column(String(255), nullable=True)
    followers_required = Column(Integer, nullable=False, default=0)
    creators_needed = Column(Integer, nullable=False, default=1)
    guests_allowed = Column(Integer, nullable=False, default=0)
    # Compensation in the smallest currency unit
    price = Column(Integer, nullable=False, default=0)
    deal_value = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default=BrandDealStatus.ACTIVE.value)
    is_featured = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(2048), nullable=True)
    special_instructions = Column(Text, nullable=True)
    hashtags = Column(JSON, nullable=False, default=list)
    accounts_to_mention = Column(JSON, nullable=False, default=list)
    dos_and_donts = Column(JSON, nullable=False, default=list)
    reference_images = Column(JSON, nullable=False, default=list)
    reference_videos = Column(JSON, nullable=False, default=list)
    views = Column(Integer, nullable=False, default=0)
    deadline_to_apply = Column(DateTime(timezone=True), nullable=False)
    deadline_to_post = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
