"""Price repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from dealpass.models.price import Price
from dealpass.schemas.price import PriceCreate


class PriceRepository:
    """Repository for Price model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, organization_id: UUID, active_only: bool = True) -> list[Price]:
        query = self.db.query(Price).filter(Price.organization_id == organization_id)
        if active_only:
            query = query.filter(Price.active.is_(True))
        return query.order_by(Price.unit_amount.asc()).all()

    def get_by_id(self, price_id: UUID, organization_id: UUID | None = None) -> Price | None:
        query = self.db.query(Price).filter(Price.id == price_id)
        if organization_id is not None:
            query = query.filter(Price.organization_id == organization_id)
        return query.first()

    def get_by_stripe_price_id(self, stripe_price_id: str) -> Price | None:
        return self.db.query(Price).filter(Price.stripe_price_id == stripe_price_id).first()

    def create(self, data: PriceCreate, organization_id: UUID) -> Price:
        price = Price(
            organization_id=organization_id,
            name=data.name,
            price_type=data.price_type.value,
            stripe_price_id=data.stripe_price_id,
            unit_amount=data.unit_amount,
            currency=data.currency,
            interval=data.interval,
            credit_amount=data.credit_amount,
        )
        self.db.add(price)
        self.db.commit()
        self.db.refresh(price)
        return price
