from uuid import UUID

from sqlalchemy.orm import Session

from dealpass.models.redemption_transaction import RedemptionTransaction


class RedemptionTransactionRepository:
    """Append-only access to the redemption log. There is no update or delete."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, transaction: RedemptionTransaction) -> RedemptionTransaction:
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def get_recent(self, organization_id: UUID, limit: int = 50) -> list[RedemptionTransaction]:
        return (
            self.db.query(RedemptionTransaction)
            .filter(RedemptionTransaction.organization_id == organization_id)
            .order_by(RedemptionTransaction.timestamp.desc())
            .limit(limit)
            .all()
        )
