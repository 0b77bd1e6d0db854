"""Tests for the in-memory and SQL coupon ledger backends."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from dealpass.core.config import settings
from dealpass.models.purchased_coupon import CouponStatus, PurchasedCoupon
from dealpass.models.redemption_transaction import TransactionOutcome
from dealpass.services.coupon_ledger import (
    CouponRecord,
    InMemoryCouponLedger,
    InMemoryRedemptionLog,
    LedgerUnavailableError,
    MemoryLedgerStore,
    RedemptionEntry,
    SqlCouponLedger,
    SqlRedemptionLog,
    get_ledger_backend,
    list_overdue_organization_ids,
)
from tests.conftest import DEFAULT_ORG_ID

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def make_record(code: str, expires_in_days: int = 7, **overrides) -> CouponRecord:
    fields = {
        "id": uuid.uuid4(),
        "code": code,
        "status": CouponStatus.UNREDEEMED,
        "purchase_date": NOW - timedelta(days=1),
        "expiry_date": NOW + timedelta(days=expires_in_days),
        "deal_title": "Nike Running Sale",
        "discount_value": "50%",
        "store_name": "Nike",
        "customer_name": "Jamie",
    }
    fields.update(overrides)
    return CouponRecord(**fields)


@pytest.fixture
def memory_ledger():
    return InMemoryCouponLedger(DEFAULT_ORG_ID, MemoryLedgerStore())


@pytest.fixture
def sql_ledger(db_session):
    return SqlCouponLedger(db_session, DEFAULT_ORG_ID)


@pytest.fixture(params=["memory", "sql"])
def ledger(request, db_session):
    if request.param == "memory":
        return InMemoryCouponLedger(DEFAULT_ORG_ID, MemoryLedgerStore())
    return SqlCouponLedger(db_session, DEFAULT_ORG_ID)


def _add(ledger, record):
    with ledger.unit_of_work():
        ledger.add(record)


class TestCouponRecord:
    def test_effective_status_applies_lazy_expiry(self):
        record = make_record("OLD1", expires_in_days=-1)
        assert record.status == CouponStatus.UNREDEEMED
        assert record.effective_status(NOW) == CouponStatus.EXPIRED

    def test_effective_status_keeps_redeemed(self):
        record = make_record(
            "DONE1",
            expires_in_days=-1,
            status=CouponStatus.REDEEMED,
            redemption_date=NOW - timedelta(days=3),
        )
        assert record.effective_status(NOW) == CouponStatus.REDEEMED

    def test_effective_status_valid_until_expiry_instant(self):
        record = make_record("EDGE1", expiry_date=NOW)
        assert record.effective_status(NOW) == CouponStatus.UNREDEEMED


class TestLedgerContract:
    def test_add_and_get_by_code(self, ledger):
        record = make_record("NIKE50RUN")
        _add(ledger, record)

        found = ledger.get_by_code("NIKE50RUN")
        assert found is not None
        assert found.id == record.id
        assert found.status == CouponStatus.UNREDEEMED
        assert found.expiry_date == record.expiry_date
        assert found.deal_title == "Nike Running Sale"

    def test_get_by_code_is_case_sensitive(self, ledger):
        _add(ledger, make_record("NIKE50RUN"))
        assert ledger.get_by_code("nike50run") is None

    def test_get_by_code_missing(self, ledger):
        assert ledger.get_by_code("NOPE") is None

    def test_compare_and_swap_succeeds_once(self, ledger):
        _add(ledger, make_record("NIKE50RUN"))

        with ledger.unit_of_work():
            first = ledger.compare_and_swap_status(
                "NIKE50RUN", CouponStatus.UNREDEEMED, CouponStatus.REDEEMED, NOW
            )
        with ledger.unit_of_work():
            second = ledger.compare_and_swap_status(
                "NIKE50RUN", CouponStatus.UNREDEEMED, CouponStatus.REDEEMED, NOW + timedelta(1)
            )

        assert first is True
        assert second is False
        record = ledger.get_by_code("NIKE50RUN")
        assert record.status == CouponStatus.REDEEMED
        assert record.redemption_date == NOW

    def test_compare_and_swap_to_expired_leaves_redemption_date_empty(self, ledger):
        _add(ledger, make_record("AIRPODS30", expires_in_days=-1))

        with ledger.unit_of_work():
            assert ledger.compare_and_swap_status(
                "AIRPODS30", CouponStatus.UNREDEEMED, CouponStatus.EXPIRED, NOW
            )

        record = ledger.get_by_code("AIRPODS30")
        assert record.status == CouponStatus.EXPIRED
        assert record.redemption_date is None

    def test_compare_and_swap_unknown_code(self, ledger):
        with ledger.unit_of_work():
            assert not ledger.compare_and_swap_status(
                "GHOST", CouponStatus.UNREDEEMED, CouponStatus.REDEEMED, NOW
            )

    def test_list_records_filters(self, ledger):
        customer_a = uuid.uuid4()
        _add(ledger, make_record("A1", customer_id=None, purchase_date=NOW - timedelta(days=2)))
        _add(ledger, make_record("A2", status=CouponStatus.REDEEMED, redemption_date=NOW))
        _add(ledger, make_record("A3"))

        codes = [r.code for r in ledger.list_records()]
        assert set(codes) == {"A1", "A2", "A3"}
        assert codes[-1] == "A1"

        redeemed = ledger.list_records(status=CouponStatus.REDEEMED)
        assert [r.code for r in redeemed] == ["A2"]

        assert ledger.list_records(customer_id=customer_a) == []

    def test_list_overdue(self, ledger):
        _add(ledger, make_record("LATE1", expires_in_days=-2))
        _add(ledger, make_record("LATE2", expires_in_days=-1))
        _add(ledger, make_record("FRESH", expires_in_days=3))
        _add(
            ledger,
            make_record(
                "USED", expires_in_days=-5, status=CouponStatus.REDEEMED, redemption_date=NOW
            ),
        )

        overdue = ledger.list_overdue(NOW)
        assert [r.code for r in overdue] == ["LATE1", "LATE2"]
        assert [r.code for r in ledger.list_overdue(NOW, limit=1)] == ["LATE1"]


class TestInMemoryLedger:
    def test_duplicate_code_rejected(self, memory_ledger):
        memory_ledger.add(make_record("DUP1"))
        with pytest.raises(ValueError, match="already exists"):
            memory_ledger.add(make_record("DUP1"))

    def test_codes_scoped_per_organization(self):
        store = MemoryLedgerStore()
        other_org = uuid.uuid4()
        InMemoryCouponLedger(DEFAULT_ORG_ID, store).add(make_record("SHARED"))
        InMemoryCouponLedger(other_org, store).add(make_record("SHARED"))

        assert InMemoryCouponLedger(other_org, store).get_by_code("SHARED") is not None
        assert len(store.records) == 2

    def test_overdue_organization_ids(self):
        store = MemoryLedgerStore()
        other_org = uuid.uuid4()
        InMemoryCouponLedger(DEFAULT_ORG_ID, store).add(make_record("LATE", expires_in_days=-1))
        InMemoryCouponLedger(other_org, store).add(make_record("FRESH"))

        assert store.overdue_organization_ids(NOW) == [DEFAULT_ORG_ID]

    def test_clear(self, memory_ledger):
        memory_ledger.add(make_record("X1"))
        memory_ledger.store.clear()
        assert memory_ledger.get_by_code("X1") is None


class TestRedemptionLogs:
    @pytest.fixture(params=["memory", "sql"])
    def log_and_ledger(self, request, db_session):
        if request.param == "memory":
            store = MemoryLedgerStore()
            return (
                InMemoryRedemptionLog(DEFAULT_ORG_ID, store),
                InMemoryCouponLedger(DEFAULT_ORG_ID, store),
            )
        return SqlRedemptionLog(db_session, DEFAULT_ORG_ID), SqlCouponLedger(db_session, DEFAULT_ORG_ID)

    def test_recent_is_most_recent_first(self, log_and_ledger):
        log, ledger = log_and_ledger
        with ledger.unit_of_work():
            for i, outcome in enumerate(
                [TransactionOutcome.SUCCESS, TransactionOutcome.EXPIRED, TransactionOutcome.INVALID]
            ):
                log.append(
                    RedemptionEntry(
                        code=f"CODE{i}", outcome=outcome, timestamp=NOW + timedelta(minutes=i)
                    )
                )

        entries = log.recent()
        assert [e.code for e in entries] == ["CODE2", "CODE1", "CODE0"]
        assert entries[0].outcome == TransactionOutcome.INVALID
        assert all(e.id is not None for e in entries)
        assert [e.code for e in log.recent(limit=1)] == ["CODE2"]


class TestSqlLedgerFailures:
    def test_read_failure_becomes_ledger_unavailable(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
        ledger = SqlCouponLedger(db, DEFAULT_ORG_ID)

        with pytest.raises(LedgerUnavailableError):
            ledger.get_by_code("NIKE50RUN")

    def test_write_failure_becomes_ledger_unavailable(self):
        db = MagicMock()
        db.execute.side_effect = OperationalError("UPDATE", {}, Exception("locked"))
        ledger = SqlCouponLedger(db, DEFAULT_ORG_ID)

        with pytest.raises(LedgerUnavailableError):
            ledger.compare_and_swap_status(
                "NIKE50RUN", CouponStatus.UNREDEEMED, CouponStatus.REDEEMED, NOW
            )

    def test_unit_of_work_rolls_back_on_database_error(self, sql_ledger, db_session):
        with pytest.raises(LedgerUnavailableError), sql_ledger.unit_of_work():
            sql_ledger.add(make_record("ROLLBACK1"))
            raise OperationalError("INSERT", {}, Exception("disk full"))

        assert db_session.query(PurchasedCoupon).count() == 0

    def test_unit_of_work_reraises_other_errors(self, sql_ledger, db_session):
        with pytest.raises(RuntimeError), sql_ledger.unit_of_work():
            sql_ledger.add(make_record("ROLLBACK2"))
            raise RuntimeError("boom")

        assert db_session.query(PurchasedCoupon).count() == 0

    def test_overdue_organization_ids_from_database(self, sql_ledger, db_session):
        _add(sql_ledger, make_record("LATE", expires_in_days=-1))
        _add(sql_ledger, make_record("FRESH"))

        assert list_overdue_organization_ids(db_session, NOW) == [DEFAULT_ORG_ID]


class TestBackendSelection:
    def test_database_backend(self, db_session):
        with patch.object(settings, "LEDGER_BACKEND", "database"):
            backend = get_ledger_backend(db_session, DEFAULT_ORG_ID)
        assert isinstance(backend.ledger, SqlCouponLedger)
        assert isinstance(backend.log, SqlRedemptionLog)

    def test_memory_backend(self, db_session):
        with patch.object(settings, "LEDGER_BACKEND", "memory"):
            backend = get_ledger_backend(db_session, DEFAULT_ORG_ID)
        assert isinstance(backend.ledger, InMemoryCouponLedger)
        assert isinstance(backend.log, InMemoryRedemptionLog)
        assert backend.ledger.organization_id == DEFAULT_ORG_ID
