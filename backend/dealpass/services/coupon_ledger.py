"""Coupon ledger and redemption log backends.

Two implementations share one contract: an in-memory backend for local
development and tests, and a SQLAlchemy backend. Every status change goes
through ``compare_and_swap_status``, which succeeds for exactly one writer.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dealpass.core.config import settings
from dealpass.models.purchased_coupon import CouponStatus, PurchasedCoupon
from dealpass.models.redemption_transaction import RedemptionTransaction, TransactionOutcome
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, as_utc, generate_uuid
from dealpass.repositories.purchased_coupon_repository import PurchasedCouponRepository
from dealpass.repositories.redemption_transaction_repository import (
    RedemptionTransactionRepository,
)

logger = logging.getLogger(__name__)


class LedgerUnavailableError(RuntimeError):
    """The backing store could not be read or written."""


@dataclass(frozen=True)
class CouponRecord:
    """Snapshot of one purchased coupon."""

    id: UUID
    code: str
    status: CouponStatus
    purchase_date: datetime
    expiry_date: datetime
    deal_title: str
    discount_value: str
    store_name: str | None = None
    customer_id: UUID | None = None
    customer_name: str | None = None
    discount_deal_id: UUID | None = None
    redemption_date: datetime | None = None

    def effective_status(self, now: datetime) -> CouponStatus:
        """Status as a reader should see it, with lazy expiry applied."""
        if self.status == CouponStatus.UNREDEEMED and now > self.expiry_date:
            return CouponStatus.EXPIRED
        return self.status


@dataclass(frozen=True)
class RedemptionEntry:
    """One immutable line of the redemption log."""

    code: str
    outcome: TransactionOutcome
    timestamp: datetime
    deal_title: str | None = None
    discount_display: str | None = None
    customer_name: str | None = None
    id: UUID | None = None


class CouponLedger(ABC):
    """Authoritative record of coupon state for one organization."""

    @abstractmethod
    def get_by_code(self, code: str) -> CouponRecord | None:
        """Exact, case-sensitive lookup."""
        pass  # pragma: no cover

    @abstractmethod
    def add(self, record: CouponRecord) -> CouponRecord:
        """Insert a freshly purchased coupon."""
        pass  # pragma: no cover

    @abstractmethod
    def list_records(
        self,
        customer_id: UUID | None = None,
        status: CouponStatus | None = None,
    ) -> list[CouponRecord]:
        pass  # pragma: no cover

    @abstractmethod
    def list_overdue(self, now: datetime, limit: int = 500) -> list[CouponRecord]:
        """Unredeemed records whose expiry date is before ``now``."""
        pass  # pragma: no cover

    @abstractmethod
    def compare_and_swap_status(
        self,
        code: str,
        expected: CouponStatus,
        new: CouponStatus,
        changed_at: datetime,
    ) -> bool:
        """Set ``status = new`` only if it is currently ``expected``.

        ``redemption_date`` is set to ``changed_at`` when ``new`` is redeemed.
        """
        pass  # pragma: no cover

    @abstractmethod
    def unit_of_work(self) -> Iterator[None]:
        """Context manager making the writes inside it all-or-nothing."""
        pass  # pragma: no cover


class RedemptionLog(ABC):
    """Append-only list of redemption attempts."""

    @abstractmethod
    def append(self, entry: RedemptionEntry) -> RedemptionEntry:
        pass  # pragma: no cover

    @abstractmethod
    def recent(self, limit: int = 50) -> list[RedemptionEntry]:
        """Most recent first."""
        pass  # pragma: no cover


@dataclass
class LedgerBackend:
    ledger: CouponLedger
    log: RedemptionLog


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class MemoryLedgerStore:
    """Process-local storage shared by in-memory ledgers and logs."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.records: dict[tuple[UUID, str], CouponRecord] = {}
        self.entries: dict[UUID, list[RedemptionEntry]] = {}

    def clear(self) -> None:
        with self.lock:
            self.records.clear()
            self.entries.clear()

    def restore(
        self,
        records: dict[tuple[UUID, str], CouponRecord],
        entry_counts: dict[UUID, int],
    ) -> None:
        """Put records and log lengths back to an earlier snapshot."""
        with self.lock:
            self.records.clear()
            self.records.update(records)
            for org_id in list(self.entries):
                if org_id in entry_counts:
                    del self.entries[org_id][entry_counts[org_id]:]
                else:
                    del self.entries[org_id]

    def overdue_organization_ids(self, now: datetime) -> list[UUID]:
        with self.lock:
            return sorted(
                {
                    org_id
                    for (org_id, _), record in self.records.items()
                    if record.status == CouponStatus.UNREDEEMED and record.expiry_date < now
                },
                key=str,
            )


memory_store = MemoryLedgerStore()


class InMemoryCouponLedger(CouponLedger):
    def __init__(
        self,
        organization_id: UUID = DEFAULT_ORGANIZATION_ID,
        store: MemoryLedgerStore | None = None,
    ):
        self.organization_id = organization_id
        self.store = store or memory_store

    def get_by_code(self, code: str) -> CouponRecord | None:
        with self.store.lock:
            return self.store.records.get((self.organization_id, code))

    def add(self, record: CouponRecord) -> CouponRecord:
        key = (self.organization_id, record.code)
        with self.store.lock:
            if key in self.store.records:
                raise ValueError(f"Coupon code '{record.code}' already exists")
            self.store.records[key] = record
        return record

    def list_records(
        self,
        customer_id: UUID | None = None,
        status: CouponStatus | None = None,
    ) -> list[CouponRecord]:
        with self.store.lock:
            records = [
                r for (org_id, _), r in self.store.records.items() if org_id == self.organization_id
            ]
        if customer_id:
            records = [r for r in records if r.customer_id == customer_id]
        if status:
            records = [r for r in records if r.status == status]
        return sorted(records, key=lambda r: r.purchase_date, reverse=True)

    def list_overdue(self, now: datetime, limit: int = 500) -> list[CouponRecord]:
        overdue = [
            r
            for r in self.list_records(status=CouponStatus.UNREDEEMED)
            if r.expiry_date < now
        ]
        return sorted(overdue, key=lambda r: r.expiry_date)[:limit]

    def compare_and_swap_status(
        self,
        code: str,
        expected: CouponStatus,
        new: CouponStatus,
        changed_at: datetime,
    ) -> bool:
        key = (self.organization_id, code)
        with self.store.lock:
            current = self.store.records.get(key)
            if current is None or current.status != expected:
                return False
            redemption_date = changed_at if new == CouponStatus.REDEEMED else None
            self.store.records[key] = replace(
                current, status=new, redemption_date=redemption_date
            )
            return True

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        with self.store.lock:
            records = dict(self.store.records)
            entry_counts = {org_id: len(e) for org_id, e in self.store.entries.items()}
            try:
                yield
            except Exception:
                self.store.restore(records, entry_counts)
                raise


class InMemoryRedemptionLog(RedemptionLog):
    def __init__(
        self,
        organization_id: UUID = DEFAULT_ORGANIZATION_ID,
        store: MemoryLedgerStore | None = None,
    ):
        self.organization_id = organization_id
        self.store = store or memory_store

    def append(self, entry: RedemptionEntry) -> RedemptionEntry:
        stored = replace(entry, id=entry.id or generate_uuid())
        with self.store.lock:
            self.store.entries.setdefault(self.organization_id, []).append(stored)
        return stored

    def recent(self, limit: int = 50) -> list[RedemptionEntry]:
        with self.store.lock:
            entries = list(self.store.entries.get(self.organization_id, []))
        return list(reversed(entries))[:limit]


# ---------------------------------------------------------------------------
# SQLAlchemy backend
# ---------------------------------------------------------------------------


def _to_record(row: PurchasedCoupon) -> CouponRecord:
    return CouponRecord(
        id=row.id,  # type: ignore[arg-type]
        code=str(row.code),
        status=CouponStatus(row.status),
        purchase_date=as_utc(row.purchase_date),  # type: ignore[arg-type]
        expiry_date=as_utc(row.expiry_date),  # type: ignore[arg-type]
        deal_title=str(row.deal_title),
        discount_value=str(row.discount_value),
        store_name=row.store_name,  # type: ignore[arg-type]
        customer_id=row.customer_id,  # type: ignore[arg-type]
        customer_name=row.customer_name,  # type: ignore[arg-type]
        discount_deal_id=row.discount_deal_id,  # type: ignore[arg-type]
        redemption_date=(
            as_utc(row.redemption_date) if row.redemption_date is not None else None  # type: ignore[arg-type]
        ),
    )


def _to_entry(row: RedemptionTransaction) -> RedemptionEntry:
    return RedemptionEntry(
        id=row.id,  # type: ignore[arg-type]
        code=str(row.code),
        outcome=TransactionOutcome(row.outcome),
        timestamp=as_utc(row.timestamp),  # type: ignore[arg-type]
        deal_title=row.deal_title,  # type: ignore[arg-type]
        discount_display=row.discount_display,  # type: ignore[arg-type]
        customer_name=row.customer_name,  # type: ignore[arg-type]
    )


class SqlCouponLedger(CouponLedger):
    """Ledger over the ``purchased_coupons`` table.

    Writes only flush. They become durable when the enclosing
    ``unit_of_work`` commits.
    """

    def __init__(self, db: Session, organization_id: UUID = DEFAULT_ORGANIZATION_ID):
        self.db = db
        self.organization_id = organization_id
        self.repo = PurchasedCouponRepository(db)

    def get_by_code(self, code: str) -> CouponRecord | None:
        try:
            row = self.repo.get_by_code(code, self.organization_id)
        except SQLAlchemyError as e:
            raise LedgerUnavailableError(str(e)) from e
        return _to_record(row) if row is not None else None

    def add(self, record: CouponRecord) -> CouponRecord:
        row = PurchasedCoupon(
            id=record.id,
            organization_id=self.organization_id,
            customer_id=record.customer_id,
            discount_deal_id=record.discount_deal_id,
            code=record.code,
            status=record.status.value,
            deal_title=record.deal_title,
            discount_value=record.discount_value,
            store_name=record.store_name,
            customer_name=record.customer_name,
            purchase_date=record.purchase_date,
            expiry_date=record.expiry_date,
            redemption_date=record.redemption_date,
        )
        self.repo.create(row)
        return record

    def list_records(
        self,
        customer_id: UUID | None = None,
        status: CouponStatus | None = None,
    ) -> list[CouponRecord]:
        rows = self.repo.get_all(self.organization_id, customer_id=customer_id, status=status)
        return [_to_record(row) for row in rows]

    def list_overdue(self, now: datetime, limit: int = 500) -> list[CouponRecord]:
        return [_to_record(row) for row in self.repo.get_overdue(self.organization_id, now, limit)]

    def compare_and_swap_status(
        self,
        code: str,
        expected: CouponStatus,
        new: CouponStatus,
        changed_at: datetime,
    ) -> bool:
        try:
            return self.repo.compare_and_swap_status(
                code, self.organization_id, expected, new, changed_at
            )
        except SQLAlchemyError as e:
            raise LedgerUnavailableError(str(e)) from e

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Coupon ledger transaction rolled back: %s", e)
            raise LedgerUnavailableError(str(e)) from e
        except Exception:
            self.db.rollback()
            raise


class SqlRedemptionLog(RedemptionLog):
    def __init__(self, db: Session, organization_id: UUID = DEFAULT_ORGANIZATION_ID):
        self.db = db
        self.organization_id = organization_id
        self.repo = RedemptionTransactionRepository(db)

    def append(self, entry: RedemptionEntry) -> RedemptionEntry:
        row = RedemptionTransaction(
            id=entry.id or generate_uuid(),
            organization_id=self.organization_id,
            code=entry.code,
            deal_title=entry.deal_title,
            discount_display=entry.discount_display,
            customer_name=entry.customer_name,
            outcome=entry.outcome.value,
            timestamp=entry.timestamp,
        )
        self.repo.create(row)
        return replace(entry, id=row.id)

    def recent(self, limit: int = 50) -> list[RedemptionEntry]:
        try:
            rows = self.repo.get_recent(self.organization_id, limit)
        except SQLAlchemyError as e:
            raise LedgerUnavailableError(str(e)) from e
        return [_to_entry(row) for row in rows]


def get_ledger_backend(db: Session, organization_id: UUID) -> LedgerBackend:
    """Build the configured ledger and log for one organization."""
    if settings.memory_ledger_enabled:
        return LedgerBackend(
            ledger=InMemoryCouponLedger(organization_id),
            log=InMemoryRedemptionLog(organization_id),
        )
    return LedgerBackend(
        ledger=SqlCouponLedger(db, organization_id),
        log=SqlRedemptionLog(db, organization_id),
    )


def list_overdue_organization_ids(db: Session, now: datetime) -> list[UUID]:
    """Organizations holding unredeemed coupons past their expiry date."""
    if settings.memory_ledger_enabled:
        return memory_store.overdue_organization_ids(now)
    return PurchasedCouponRepository(db).get_overdue_organization_ids(now)
