from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr | None = None


class CustomerResponse(BaseModel):
    id: UUID
    name: str
    email: str | None
    stripe_customer_id: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
