from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CheckoutSessionCreate(BaseModel):
    """Request to start a Stripe checkout for a price."""

    price_id: UUID
    customer_id: UUID
    success_url: str = Field(max_length=2048)
    cancel_url: str = Field(max_length=2048)
    deal_id: UUID | None = None
    trial_days: int | None = Field(default=None, ge=1, le=730)


class CheckoutSessionResponse(BaseModel):
    session_id: str
    checkout_url: str
    mode: str
    expires_at: datetime | None = None


class WebhookAck(BaseModel):
    received: bool = True
    status: str
    event_type: str
