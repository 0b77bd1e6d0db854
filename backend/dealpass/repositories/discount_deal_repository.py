"""Discount deal repository for data access."""

from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from dealpass.models.discount_deal import DiscountDeal
from dealpass.schemas.discount_deal import DiscountDealCreate


class DiscountDealRepository:
    """Repository for DiscountDeal model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        organization_id: UUID,
        skip: int = 0,
        limit: int = 100,
        category: str | None = None,
    ) -> list[DiscountDeal]:
        """Get all deals with an optional category filter."""
        query = self.db.query(DiscountDeal).filter(DiscountDeal.organization_id == organization_id)

        if category:
            query = query.filter(DiscountDeal.category == category)

        return query.order_by(DiscountDeal.created_at.desc()).offset(skip).limit(limit).all()

    def count(self, organization_id: UUID) -> int:
        return (
            self.db.query(DiscountDeal)
            .filter(DiscountDeal.organization_id == organization_id)
            .count()
        )

    def get_by_id(self, deal_id: UUID, organization_id: UUID | None = None) -> DiscountDeal | None:
        query = self.db.query(DiscountDeal).filter(DiscountDeal.id == deal_id)
        if organization_id is not None:
            query = query.filter(DiscountDeal.organization_id == organization_id)
        return query.first()

    def create(self, data: DiscountDealCreate, organization_id: UUID) -> DiscountDeal:
        deal = DiscountDeal(
            organization_id=organization_id,
            title=data.title,
            description=data.description,
            store_name=data.store_name,
            category=data.category,
            discount_value=data.discount_value,
            coupon_prefix=data.coupon_prefix.upper(),
            credit_cost=data.credit_cost,
            redeem_policy=data.redeem_policy,
            expires_at=data.expires_at,
        )
        self.db.add(deal)
        self.db.commit()
        self.db.refresh(deal)
        return deal

    def increment_views(self, deal_id: UUID, organization_id: UUID) -> bool:
        """Bump the view counter in a single UPDATE."""
        result = self.db.execute(
            update(DiscountDeal)
            .where(DiscountDeal.id == deal_id, DiscountDeal.organization_id == organization_id)
            .values(views=DiscountDeal.views + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1  # type: ignore[attr-defined]
