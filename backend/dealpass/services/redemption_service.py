"""Coupon redemption: classify a scanned code, then redeem it exactly once.

Nothing here raises to the caller. Every path ends in a ``Validation`` or a
``RedemptionResult`` carrying one of the outcomes below.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

from dealpass.core.config import settings
from dealpass.models.purchased_coupon import CouponStatus
from dealpass.models.redemption_transaction import TransactionOutcome
from dealpass.models.shared import utc_now
from dealpass.services.coupon_ledger import (
    CouponLedger,
    CouponRecord,
    LedgerUnavailableError,
    RedemptionEntry,
    RedemptionLog,
)

logger = logging.getLogger(__name__)

# Printable ASCII without spaces
CODE_PATTERN = re.compile(r"^[\x21-\x7e]{1,64}$")


class Classification(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    NOT_FOUND = "not-found"
    ALREADY_REDEEMED = "already-redeemed"
    EXPIRED = "expired"
    STORE_UNAVAILABLE = "store-unavailable"


class RedemptionOutcome(str, Enum):
    SUCCESS = "success"
    ALREADY_REDEEMED = "already-redeemed"
    EXPIRED = "expired"
    INVALID = "invalid"
    NOT_FOUND = "not-found"
    STORE_UNAVAILABLE = "store-unavailable"


MESSAGES = {
    RedemptionOutcome.SUCCESS: "Discount code successfully redeemed!",
    RedemptionOutcome.ALREADY_REDEEMED: "This discount code has already been redeemed.",
    RedemptionOutcome.EXPIRED: "This discount code has expired.",
    RedemptionOutcome.INVALID: "The scanned code is not a valid discount code.",
    RedemptionOutcome.NOT_FOUND: "No purchase records found with this code.",
    RedemptionOutcome.STORE_UNAVAILABLE: "Failed to redeem discount code. Please try again.",
}

_OUTCOME_FOR_CLASSIFICATION = {
    Classification.INVALID: RedemptionOutcome.INVALID,
    Classification.NOT_FOUND: RedemptionOutcome.NOT_FOUND,
    Classification.ALREADY_REDEEMED: RedemptionOutcome.ALREADY_REDEEMED,
    Classification.EXPIRED: RedemptionOutcome.EXPIRED,
    Classification.STORE_UNAVAILABLE: RedemptionOutcome.STORE_UNAVAILABLE,
}


@dataclass(frozen=True)
class Validation:
    classification: Classification
    code: str
    record: CouponRecord | None = None


@dataclass(frozen=True)
class RedemptionResult:
    outcome: RedemptionOutcome
    code: str
    record: CouponRecord | None = None
    customer_name: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome == RedemptionOutcome.SUCCESS

    @property
    def message(self) -> str:
        return MESSAGES[self.outcome]

    def to_payload(self) -> dict[str, Any]:
        """Wire shape consumed by the scanner front-end."""
        record = self.record
        if self.success and record is not None:
            return {
                "type": "success",
                "message": self.message,
                "dealDetails": {
                    "id": record.id,
                    "title": record.deal_title,
                    "discount_value": record.discount_value,
                    "coupon_code": record.code,
                    "customer_name": self.customer_name,
                    "redemption_date": record.redemption_date,
                },
            }

        payload: dict[str, Any] = {
            "type": "error",
            "error_code": self.outcome.value,
            "message": self.message,
        }
        if record is not None:
            details: dict[str, Any] = {
                "title": record.deal_title,
                "discount_value": record.discount_value,
                "coupon_code": record.code,
            }
            if self.outcome == RedemptionOutcome.ALREADY_REDEEMED:
                details["redemption_date"] = record.redemption_date
            elif self.outcome == RedemptionOutcome.EXPIRED:
                details["expiry_date"] = record.expiry_date
            payload["dealDetails"] = details
        return payload


class RedemptionValidator:
    """Classifies a scanned code against the ledger without mutating it."""

    def __init__(self, ledger: CouponLedger, clock: Callable[[], datetime] = utc_now):
        self.ledger = ledger
        self.clock = clock

    def validate(self, raw_code: str | None) -> Validation:
        code = (raw_code or "").strip()
        if not code or not CODE_PATTERN.match(code):
            return Validation(Classification.INVALID, code)

        try:
            record = self.ledger.get_by_code(code)
        except LedgerUnavailableError:
            logger.warning("Ledger unavailable while validating %s", code)
            return Validation(Classification.STORE_UNAVAILABLE, code)

        if record is None:
            return Validation(Classification.NOT_FOUND, code)

        # Redeemed is terminal, so it wins over expiry.
        if record.status == CouponStatus.REDEEMED:
            return Validation(Classification.ALREADY_REDEEMED, code, record)

        if record.status == CouponStatus.EXPIRED or self.clock() > record.expiry_date:
            return Validation(Classification.EXPIRED, code, record)

        return Validation(Classification.VALID, code, record)


class RedemptionMutator:
    """Single entry point for moving a coupon to ``redeemed``."""

    def __init__(
        self,
        ledger: CouponLedger,
        log: RedemptionLog,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ledger = ledger
        self.log = log
        self.clock = clock

    def redeem(self, record: CouponRecord, customer_name: str | None = None) -> RedemptionResult:
        """Redeem a record previously classified as valid.

        The status swap and the ``success`` log entry are written together.
        If another caller redeemed the code first, the swap fails and the
        result reports the state that caller left behind.
        """
        now = self.clock()
        display_name = customer_name or record.customer_name

        if record.status == CouponStatus.UNREDEEMED and now > record.expiry_date:
            return RedemptionResult(RedemptionOutcome.EXPIRED, record.code, record)

        try:
            with self.ledger.unit_of_work():
                swapped = self.ledger.compare_and_swap_status(
                    record.code, CouponStatus.UNREDEEMED, CouponStatus.REDEEMED, now
                )
                if swapped:
                    self.log.append(
                        RedemptionEntry(
                            code=record.code,
                            outcome=TransactionOutcome.SUCCESS,
                            timestamp=now,
                            deal_title=record.deal_title,
                            discount_display=record.discount_value,
                            customer_name=display_name,
                        )
                    )
        except LedgerUnavailableError:
            return RedemptionResult(RedemptionOutcome.STORE_UNAVAILABLE, record.code, record)

        if not swapped:
            return self._lost_race(record)

        redeemed = replace(record, status=CouponStatus.REDEEMED, redemption_date=now)
        logger.info("Redeemed coupon %s", record.code)
        return RedemptionResult(
            RedemptionOutcome.SUCCESS, record.code, redeemed, customer_name=display_name
        )

    def expire(self, record: CouponRecord) -> bool:
        """Move an overdue unredeemed record to ``expired``."""
        now = self.clock()
        if record.status != CouponStatus.UNREDEEMED or now <= record.expiry_date:
            return False
        with self.ledger.unit_of_work():
            return self.ledger.compare_and_swap_status(
                record.code, CouponStatus.UNREDEEMED, CouponStatus.EXPIRED, now
            )

    def _lost_race(self, record: CouponRecord) -> RedemptionResult:
        try:
            current = self.ledger.get_by_code(record.code)
        except LedgerUnavailableError:
            return RedemptionResult(RedemptionOutcome.STORE_UNAVAILABLE, record.code, record)

        if current is not None and current.status == CouponStatus.EXPIRED:
            return RedemptionResult(RedemptionOutcome.EXPIRED, record.code, current)
        logger.info("Coupon %s was redeemed by a concurrent request", record.code)
        return RedemptionResult(RedemptionOutcome.ALREADY_REDEEMED, record.code, current or record)


class RedemptionService:
    """Validator plus mutator, as called by the scanner."""

    def __init__(
        self,
        ledger: CouponLedger,
        log: RedemptionLog,
        clock: Callable[[], datetime] = utc_now,
        log_unknown_codes: bool | None = None,
    ):
        self.ledger = ledger
        self.log = log
        self.clock = clock
        self.validator = RedemptionValidator(ledger, clock)
        self.mutator = RedemptionMutator(ledger, log, clock)
        self.log_unknown_codes = (
            settings.REDEMPTION_LOG_UNKNOWN_CODES if log_unknown_codes is None else log_unknown_codes
        )

    def validate(self, raw_code: str | None) -> Validation:
        return self.validator.validate(raw_code)

    def scan(self, raw_code: str | None, customer_name: str | None = None) -> RedemptionResult:
        validation = self.validator.validate(raw_code)

        if validation.classification == Classification.VALID and validation.record is not None:
            result = self.mutator.redeem(validation.record, customer_name)
        else:
            outcome = _OUTCOME_FOR_CLASSIFICATION[validation.classification]
            result = RedemptionResult(outcome, validation.code, validation.record)

        if not result.success:
            logger.info("Redemption of %r rejected: %s", result.code, result.outcome.value)
            self._record_rejection(result, customer_name)
        return result

    def history(self, limit: int = 50) -> list[RedemptionEntry]:
        return self.log.recent(limit)

    def _record_rejection(self, result: RedemptionResult, customer_name: str | None) -> None:
        if result.outcome in (RedemptionOutcome.ALREADY_REDEEMED, RedemptionOutcome.EXPIRED):
            outcome = TransactionOutcome(result.outcome.value)
        elif result.outcome == RedemptionOutcome.NOT_FOUND and self.log_unknown_codes:
            outcome = TransactionOutcome.INVALID
        else:
            return

        record = result.record
        entry = RedemptionEntry(
            code=result.code,
            outcome=outcome,
            timestamp=self.clock(),
            deal_title=record.deal_title if record else None,
            discount_display=record.discount_value if record else None,
            customer_name=customer_name or (record.customer_name if record else None),
        )
        try:
            with self.ledger.unit_of_work():
                self.log.append(entry)
        except LedgerUnavailableError:
            logger.warning("Could not log rejected redemption of %s", result.code)


def expire_overdue_coupons(
    ledger: CouponLedger,
    log: RedemptionLog,
    clock: Callable[[], datetime] = utc_now,
    batch_size: int = 500,
) -> int:
    """Sweep overdue unredeemed coupons to ``expired``. Returns the number moved."""
    mutator = RedemptionMutator(ledger, log, clock)
    count = 0
    for record in ledger.list_overdue(clock(), batch_size):
        if mutator.expire(record):
            count += 1
    return count
