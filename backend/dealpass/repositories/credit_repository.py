"""Credit balance and credit transaction repository.

Balances change only through single-statement increments and guarded
decrements, never read-modify-write. Writes flush only.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from dealpass.models.credit_transaction import CreditTransaction, CreditTransactionType
from dealpass.models.user_credit import UserCredit


class CreditRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_customer_id(self, customer_id: UUID) -> UserCredit | None:
        return (
            self.db.query(UserCredit)
            .filter(UserCredit.customer_id == customer_id)
            .populate_existing()
            .first()
        )

    def increment(self, customer_id: UUID, amount: int, purchased_at: datetime) -> bool:
        """Atomically add ``amount`` credits. Returns False if no balance row exists."""
        result = self.db.execute(
            update(UserCredit)
            .where(UserCredit.customer_id == customer_id)
            .values(
                balance=UserCredit.balance + amount,
                credits_purchased=UserCredit.credits_purchased + amount,
                last_purchase_date=purchased_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    def create_balance(
        self, customer_id: UUID, organization_id: UUID, amount: int, purchased_at: datetime
    ) -> UserCredit:
        credit = UserCredit(
            customer_id=customer_id,
            organization_id=organization_id,
            balance=amount,
            credits_purchased=amount,
            credits_used=0,
            last_purchase_date=purchased_at,
        )
        self.db.add(credit)
        self.db.flush()
        return credit

    def decrement_if_sufficient(self, customer_id: UUID, amount: int) -> bool:
        """Atomically spend ``amount`` credits only when the balance covers it."""
        result = self.db.execute(
            update(UserCredit)
            .where(UserCredit.customer_id == customer_id, UserCredit.balance >= amount)
            .values(
                balance=UserCredit.balance - amount,
                credits_used=UserCredit.credits_used + amount,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    def add_transaction(
        self,
        *,
        customer_id: UUID,
        organization_id: UUID,
        amount: int,
        transaction_type: CreditTransactionType,
        reference_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> CreditTransaction:
        txn = CreditTransaction(
            customer_id=customer_id,
            organization_id=organization_id,
            amount=amount,
            transaction_type=transaction_type.value,
            reference_id=reference_id,
            transaction_metadata=metadata or {},
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def get_transactions(
        self, customer_id: UUID, skip: int = 0, limit: int = 100
    ) -> list[CreditTransaction]:
        return (
            self.db.query(CreditTransaction)
            .filter(CreditTransaction.customer_id == customer_id)
            .order_by(CreditTransaction.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
