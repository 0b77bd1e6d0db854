"""Credit service for granting and spending prepaid credits."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from dealpass.models.credit_transaction import CreditTransactionType
from dealpass.models.shared import utc_now
from dealpass.models.user_credit import UserCredit
from dealpass.repositories.credit_repository import CreditRepository


class CreditService:
    """Credit balance business logic.

    Methods flush but do not commit, so grants and spends join the caller's
    transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.credit_repo = CreditRepository(db)

    def get_balance(self, customer_id: UUID) -> UserCredit | None:
        return self.credit_repo.get_by_customer_id(customer_id)

    def grant(
        self,
        customer_id: UUID,
        organization_id: UUID,
        amount: int,
        reference_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        granted_at: datetime | None = None,
    ) -> None:
        """Add purchased credits with an atomic increment.

        The balance row is created on first purchase.
        """
        if amount <= 0:
            raise ValueError("Credit amount must be positive")

        granted_at = granted_at or utc_now()
        if not self.credit_repo.increment(customer_id, amount, granted_at):
            self.credit_repo.create_balance(customer_id, organization_id, amount, granted_at)

        self.credit_repo.add_transaction(
            customer_id=customer_id,
            organization_id=organization_id,
            amount=amount,
            transaction_type=CreditTransactionType.PURCHASE,
            reference_id=reference_id,
            metadata=metadata,
        )

    def spend(
        self,
        customer_id: UUID,
        organization_id: UUID,
        amount: int,
        reference_id: str | None = None,
    ) -> bool:
        """Spend credits if the balance covers ``amount``. Returns False otherwise."""
        if amount <= 0:
            raise ValueError("Credit amount must be positive")

        if not self.credit_repo.decrement_if_sufficient(customer_id, amount):
            return False

        self.credit_repo.add_transaction(
            customer_id=customer_id,
            organization_id=organization_id,
            amount=-amount,
            transaction_type=CreditTransactionType.SPEND,
            reference_id=reference_id,
        )
        return True
