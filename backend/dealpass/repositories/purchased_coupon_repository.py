"""Purchased coupon repository.

Writes here only flush; the caller owns the transaction boundary.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from dealpass.models.purchased_coupon import CouponStatus, PurchasedCoupon


class PurchasedCouponRepository:
    """Repository for PurchasedCoupon model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str, organization_id: UUID) -> PurchasedCoupon | None:
        """Get a coupon by exact code, bypassing any stale identity-map copy."""
        return (
            self.db.query(PurchasedCoupon)
            .filter(
                PurchasedCoupon.organization_id == organization_id,
                PurchasedCoupon.code == code,
            )
            .populate_existing()
            .first()
        )

    def get_all(
        self,
        organization_id: UUID,
        customer_id: UUID | None = None,
        status: CouponStatus | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[PurchasedCoupon]:
        query = self.db.query(PurchasedCoupon).filter(
            PurchasedCoupon.organization_id == organization_id
        )
        if customer_id:
            query = query.filter(PurchasedCoupon.customer_id == customer_id)
        if status:
            query = query.filter(PurchasedCoupon.status == status.value)
        query = query.order_by(PurchasedCoupon.purchase_date.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.populate_existing().all()

    def get_overdue(self, organization_id: UUID, now: datetime, limit: int = 500) -> list[PurchasedCoupon]:
        """Unredeemed coupons whose expiry date has passed."""
        return (
            self.db.query(PurchasedCoupon)
            .filter(
                PurchasedCoupon.organization_id == organization_id,
                PurchasedCoupon.status == CouponStatus.UNREDEEMED.value,
                PurchasedCoupon.expiry_date < now,
            )
            .order_by(PurchasedCoupon.expiry_date.asc())
            .limit(limit)
            .all()
        )

    def get_overdue_organization_ids(self, now: datetime) -> list[UUID]:
        rows = (
            self.db.query(PurchasedCoupon.organization_id)
            .filter(
                PurchasedCoupon.status == CouponStatus.UNREDEEMED.value,
                PurchasedCoupon.expiry_date < now,
            )
            .distinct()
            .all()
        )
        return [row[0] for row in rows]

    def create(self, coupon: PurchasedCoupon) -> PurchasedCoupon:
        self.db.add(coupon)
        self.db.flush()
        return coupon

    def compare_and_swap_status(
        self,
        code: str,
        organization_id: UUID,
        expected: CouponStatus,
        new: CouponStatus,
        changed_at: datetime,
    ) -> bool:
        """Move ``code`` from ``expected`` to ``new`` in one conditional UPDATE.

        Returns False when no row matched, i.e. another writer changed the
        status first or the code does not exist.
        """
        values: dict[str, object] = {"status": new.value}
        if new == CouponStatus.REDEEMED:
            values["redemption_date"] = changed_at

        result = self.db.execute(
            update(PurchasedCoupon)
            .where(
                PurchasedCoupon.organization_id == organization_id,
                PurchasedCoupon.code == code,
                PurchasedCoupon.status == expected.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
