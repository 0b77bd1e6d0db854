"""Deal purchase: turns a paid-for deal into a redeemable coupon."""

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from dealpass.core.config import settings
from dealpass.models.customer import Customer
from dealpass.models.discount_deal import DiscountDeal
from dealpass.models.purchased_coupon import CouponStatus
from dealpass.models.shared import as_utc, generate_uuid, utc_now
from dealpass.repositories.customer_repository import CustomerRepository
from dealpass.repositories.discount_deal_repository import DiscountDealRepository
from dealpass.services.coupon_ledger import CouponLedger, CouponRecord
from dealpass.services.credit_service import CreditService

logger = logging.getLogger(__name__)

_CODE_ATTEMPTS = 5


class DealNotFoundError(ValueError):
    pass


class CustomerNotFoundError(ValueError):
    pass


class DealUnavailableError(ValueError):
    pass


class InsufficientCreditsError(ValueError):
    pass


class PurchaseService:
    def __init__(
        self,
        db: Session,
        ledger: CouponLedger,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.ledger = ledger
        self.clock = clock
        self.deal_repo = DiscountDealRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.credit_service = CreditService(db)

    def purchase_with_credits(
        self,
        deal_id: UUID,
        customer_id: UUID,
        organization_id: UUID,
    ) -> CouponRecord:
        """Spend the deal's credit cost and issue a coupon in one transaction.

        Raises:
            DealNotFoundError, CustomerNotFoundError, DealUnavailableError,
            InsufficientCreditsError.
        """
        deal = self.deal_repo.get_by_id(deal_id, organization_id)
        if not deal:
            raise DealNotFoundError(f"Discount deal {deal_id} not found")

        customer = self.customer_repo.get_by_id(customer_id, organization_id)
        if not customer:
            raise CustomerNotFoundError(f"Customer {customer_id} not found")

        now = self.clock()
        if deal.expires_at is not None and now > as_utc(deal.expires_at):  # type: ignore[arg-type]
            raise DealUnavailableError("Discount deal is no longer available")

        try:
            cost = int(deal.credit_cost or 0)
            if cost > 0 and not self.credit_service.spend(
                customer_id, organization_id, cost, reference_id=f"deal:{deal.id}"
            ):
                raise InsufficientCreditsError(
                    f"Deal costs {cost} credits, which exceeds the available balance"
                )
            record = self.issue_coupon(deal, customer, now)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Customer %s purchased deal %s as %s", customer.id, deal.id, record.code)
        return record

    def issue_coupon(
        self,
        deal: DiscountDeal,
        customer: Customer,
        purchased_at: datetime,
    ) -> CouponRecord:
        """Add a fresh ``unredeemed`` coupon for ``deal`` to the ledger.

        Does not commit; the caller's transaction does.
        """
        expiry_date = purchased_at + timedelta(days=settings.COUPON_VALIDITY_DAYS)
        if deal.expires_at is not None:
            expiry_date = min(expiry_date, as_utc(deal.expires_at))  # type: ignore[arg-type]

        record = CouponRecord(
            id=generate_uuid(),
            code=self._new_code(str(deal.coupon_prefix)),
            status=CouponStatus.UNREDEEMED,
            purchase_date=purchased_at,
            expiry_date=expiry_date,
            deal_title=str(deal.title),
            discount_value=str(deal.discount_value),
            store_name=deal.store_name,  # type: ignore[arg-type]
            customer_id=customer.id,  # type: ignore[arg-type]
            customer_name=customer.name,  # type: ignore[arg-type]
            discount_deal_id=deal.id,  # type: ignore[arg-type]
        )
        return self.ledger.add(record)

    def _new_code(self, prefix: str) -> str:
        for _ in range(_CODE_ATTEMPTS):
            code = f"{prefix.upper()}{secrets.token_hex(4).upper()}"
            if self.ledger.get_by_code(code) is None:
                return code
        raise RuntimeError(f"Could not allocate a unique coupon code for prefix {prefix}")
