"""Payment repository. Writes flush only; the reconciliation service commits."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from dealpass.models.payment import Payment, PaymentStatus


class PaymentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_provider_payment_id(self, provider_payment_id: str) -> Payment | None:
        return (
            self.db.query(Payment)
            .filter(Payment.provider_payment_id == provider_payment_id)
            .first()
        )

    def get_by_customer_id(self, customer_id: UUID) -> list[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.customer_id == customer_id)
            .order_by(Payment.created_at.desc())
            .all()
        )

    def create(
        self,
        *,
        organization_id: UUID,
        customer_id: UUID,
        provider_payment_id: str,
        amount: int,
        currency: str,
        price_id: UUID | None = None,
        status: PaymentStatus = PaymentStatus.SUCCEEDED,
        metadata: dict[str, Any] | None = None,
    ) -> Payment:
        payment = Payment(
            organization_id=organization_id,
            customer_id=customer_id,
            price_id=price_id,
            provider_payment_id=provider_payment_id,
            amount=amount,
            currency=currency,
            status=status.value,
            payment_metadata=metadata or {},
        )
        self.db.add(payment)
        self.db.flush()
        return payment
