"""Brand deal schemas."""

from datetime import datetime
from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dealpass.models.brand_deal import BrandDealStatus
from dealpass.models.shared import as_utc


class BrandDealCreate(BaseModel):
    title: str = Field(max_length=255)
    brand_name: str = Field(max_length=255)
    industry: str = Field(max_length=100)
    category: str = Field(max_length=100)
    description: str
    benefits: str
    promotion_type: str = Field(max_length=50)
    platform: str = Field(max_length=50)
    collaboration_type: str = Field(max_length=50)
    content_type: str = Field(default="Post", max_length=50)
    location: str = Field(max_length=255)
    address: str | None = Field(default=None, max_length=255)
    followers_required: int = Field(default=0, ge=0)
    creators_needed: int = Field(default=1, ge=1)
    guests_allowed: int = Field(default=0, ge=0)
    price: int = Field(default=0, ge=0)
    deal_value: str = Field(max_length=50)
    status: BrandDealStatus = BrandDealStatus.ACTIVE
    is_featured: bool = False
    image_url: str | None = Field(default=None, max_length=2048)
    special_instructions: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    accounts_to_mention: list[str] = Field(default_factory=list)
    dos_and_donts: list[str] = Field(default_factory=list)
    reference_images: list[str] = Field(default_factory=list)
    reference_videos: list[Any] = Field(default_factory=list)
    deadline_to_apply: datetime
    deadline_to_post: datetime
    expires_at: datetime

    @field_validator("hashtags")
    @classmethod
    def normalize_hashtags(cls, value: list[str]) -> list[str]:
        """Drop blanks and prefix every tag with ``#``."""
        tags = [tag.strip() for tag in value if tag.strip()]
        return [tag if tag.startswith("#") else f"#{tag}" for tag in tags]

    @field_validator("accounts_to_mention", "dos_and_donts", "reference_images")
    @classmethod
    def drop_blank_entries(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item.strip()]

    @model_validator(mode="after")
    def validate_deadlines(self) -> Self:
        """Creators post after they apply."""
        if as_utc(self.deadline_to_post) < as_utc(self.deadline_to_apply):
            msg = "deadline_to_post must not be before deadline_to_apply"
            raise ValueError(msg)
        return self


class BrandDealResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    brand_name: str
    industry: str
    category: str
    description: str
    benefits: str
    promotion_type: str
    platform: str
    collaboration_type: str
    content_type: str
    location: str
    address: str | None = None
    followers_required: int
    creators_needed: int
    guests_allowed: int
    price: int
    deal_value: str
    status: str
    is_featured: bool
    image_url: str | None = None
    special_instructions: str | None = None
    hashtags: list[str]
    accounts_to_mention: list[str]
    dos_and_donts: list[str]
    reference_images: list[str]
    reference_videos: list[Any]
    views: int
    deadline_to_apply: datetime
    deadline_to_post: datetime
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
