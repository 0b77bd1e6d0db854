from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PurchasedCouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    status: str
    customer_id: UUID | None = None
    discount_deal_id: UUID | None = None
    deal_title: str
    discount_value: str
    store_name: str | None = None
    customer_name: str | None = None
    purchase_date: datetime
    expiry_date: datetime
    redemption_date: datetime | None = None
