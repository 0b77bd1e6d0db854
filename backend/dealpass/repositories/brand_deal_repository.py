"""Brand deal repository for data access."""

from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from dealpass.models.brand_deal import BrandDeal
from dealpass.schemas.brand_deal import BrandDealCreate


class BrandDealRepository:
    """Repository for BrandDeal model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        organization_id: UUID,
        skip: int = 0,
        limit: int = 100,
        category: str | None = None,
        status: str | None = None,
    ) -> list[BrandDeal]:
        """Featured deals first, then newest first."""
        query = self.db.query(BrandDeal).filter(BrandDeal.organization_id == organization_id)

        if category:
            query = query.filter(BrandDeal.category == category)
        if status:
            query = query.filter(BrandDeal.status == status)

        return (
            query.order_by(BrandDeal.is_featured.desc(), BrandDeal.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(
        self,
        organization_id: UUID,
        category: str | None = None,
        status: str | None = None,
    ) -> int:
        query = self.db.query(BrandDeal).filter(BrandDeal.organization_id == organization_id)
        if category:
            query = query.filter(BrandDeal.category == category)
        if status:
            query = query.filter(BrandDeal.status == status)
        return query.count()

    def get_categories(self, organization_id: UUID) -> list[str]:
        rows = (
            self.db.query(BrandDeal.category)
            .filter(BrandDeal.organization_id == organization_id)
            .distinct()
            .order_by(BrandDeal.category)
            .all()
        )
        return [row[0] for row in rows]

    def get_by_id(self, deal_id: UUID, organization_id: UUID | None = None) -> BrandDeal | None:
        query = self.db.query(BrandDeal).filter(BrandDeal.id == deal_id)
        if organization_id is not None:
            query = query.filter(BrandDeal.organization_id == organization_id)
        return query.first()

    def create(self, data: BrandDealCreate, organization_id: UUID) -> BrandDeal:
        fields = data.model_dump()
        fields["status"] = data.status.value
        deal = BrandDeal(organization_id=organization_id, **fields)
        self.db.add(deal)
        self.db.commit()
        self.db.refresh(deal)
        return deal

    def increment_views(self, deal_id: UUID, organization_id: UUID) -> bool:
        """Bump the view counter in a single UPDATE."""
        result = self.db.execute(
            update(BrandDeal)
            .where(BrandDeal.id == deal_id, BrandDeal.organization_id == organization_id)
            .values(views=BrandDeal.views + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1  # type: ignore[attr-defined]
