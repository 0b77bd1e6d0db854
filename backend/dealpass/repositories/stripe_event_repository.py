"""Repository for processed Stripe event ids."""

from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from dealpass.models.stripe_event import ProcessedStripeEvent


class StripeEventRepository:
    def __init__(self, db: Session):
        self.db = db

    def exists(self, event_id: str) -> bool:
        return (
            self.db.query(ProcessedStripeEvent.id)
            .filter(ProcessedStripeEvent.id == event_id)
            .first()
            is not None
        )

    def add(self, event_id: str, event_type: str) -> ProcessedStripeEvent:
        record = ProcessedStripeEvent(id=event_id, event_type=event_type)
        self.db.add(record)
        self.db.flush()
        return record

    def delete_older_than(self, max_age_days: int) -> int:
        cutoff = datetime.now(UTC) - timedelta(days=max_age_days)
        count = (
            self.db.query(ProcessedStripeEvent)
            .filter(ProcessedStripeEvent.processed_at < cutoff)
            .delete()
        )
        self.db.commit()
        return int(count)
