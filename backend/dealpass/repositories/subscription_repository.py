"""Subscription repository. Writes flush only; the reconciliation service commits."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from dealpass.models.subscription import Subscription


class SubscriptionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_stripe_id(self, stripe_subscription_id: str) -> Subscription | None:
        return (
            self.db.query(Subscription)
            .filter(Subscription.stripe_subscription_id == stripe_subscription_id)
            .first()
        )

    def get_by_customer_id(self, customer_id: UUID) -> list[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(Subscription.customer_id == customer_id)
            .order_by(Subscription.created_at.desc())
            .all()
        )

    def create(self, **fields: Any) -> Subscription:
        subscription = Subscription(**fields)
        self.db.add(subscription)
        self.db.flush()
        return subscription

    def update(self, subscription: Subscription, **fields: Any) -> Subscription:
        for key, value in fields.items():
            setattr(subscription, key, value)
        self.db.flush()
        return subscription
