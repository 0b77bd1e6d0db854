from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CreditBalanceResponse(BaseModel):
    customer_id: UUID
    balance: int
    credits_purchased: int
    credits_used: int
    last_purchase_date: datetime | None = None


class CreditTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_id: UUID
    amount: int
    transaction_type: str
    reference_id: str | None = None
    created_at: datetime
