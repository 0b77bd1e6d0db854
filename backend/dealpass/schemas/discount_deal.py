"""Discount deal schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DiscountDealCreate(BaseModel):
    title: str = Field(max_length=255)
    description: str | None = None
    store_name: str = Field(max_length=255)
    category: str | None = Field(default=None, max_length=100)
    discount_value: str = Field(max_length=50)
    coupon_prefix: str = Field(min_length=1, max_length=32, pattern=r"^[A-Za-z0-9]+$")
    credit_cost: int = Field(default=0, ge=0)
    redeem_policy: str | None = None
    expires_at: datetime | None = None


class DiscountDealResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None = None
    store_name: str
    category: str | None = None
    discount_value: str
    coupon_prefix: str
    credit_cost: int
    redeem_policy: str | None = None
    views: int
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PurchaseDealRequest(BaseModel):
    customer_id: UUID
