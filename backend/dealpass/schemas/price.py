from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dealpass.models.price import PriceType


class PriceCreate(BaseModel):
    name: str = Field(max_length=255)
    price_type: PriceType = PriceType.ONE_TIME
    stripe_price_id: str = Field(max_length=255)
    unit_amount: int = Field(ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    interval: str | None = Field(default=None, max_length=20)
    credit_amount: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_type_fields(self) -> "PriceCreate":
        if self.price_type == PriceType.CREDIT and not self.credit_amount:
            raise ValueError("credit prices require credit_amount")
        if self.price_type == PriceType.SUBSCRIPTION and not self.interval:
            raise ValueError("subscription prices require interval")
        return self


class PriceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    price_type: str
    stripe_price_id: str
    unit_amount: int
    currency: str
    interval: str | None = None
    credit_amount: int | None = None
    active: bool
    created_at: datetime
