"""Redemption request and response schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ScanRequest(BaseModel):
    code: str
    customer_name: str | None = Field(default=None, max_length=255)


class DealDetails(BaseModel):
    id: UUID | None = None
    title: str | None = None
    discount_value: str | None = None
    coupon_code: str | None = None
    customer_name: str | None = None
    expiry_date: datetime | None = None
    redemption_date: datetime | None = None


class RedemptionSuccessResponse(BaseModel):
    type: Literal["success"] = "success"
    message: str
    dealDetails: DealDetails  # noqa: N815


class RedemptionErrorResponse(BaseModel):
    type: Literal["error"] = "error"
    error_code: Literal[
        "already-redeemed", "expired", "invalid", "not-found", "store-unavailable"
    ]
    message: str
    dealDetails: DealDetails | None = None  # noqa: N815


class ValidationResponse(BaseModel):
    code: str
    classification: str
    dealDetails: DealDetails | None = None  # noqa: N815


class RedemptionTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    deal_title: str | None = None
    discount_display: str | None = None
    customer_name: str | None = None
    outcome: str
    timestamp: datetime
