"""Tests for redemption validation, mutation and the scan flow."""

import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from dealpass.core.database import Base
from dealpass.models.organization import Organization
from dealpass.models.purchased_coupon import CouponStatus
from dealpass.models.redemption_transaction import TransactionOutcome
from dealpass.services.coupon_ledger import (
    CouponLedger,
    CouponRecord,
    InMemoryCouponLedger,
    InMemoryRedemptionLog,
    LedgerUnavailableError,
    MemoryLedgerStore,
    RedemptionEntry,
    SqlCouponLedger,
    SqlRedemptionLog,
)
from dealpass.services.redemption_service import (
    Classification,
    RedemptionMutator,
    RedemptionOutcome,
    RedemptionResult,
    RedemptionService,
    RedemptionValidator,
    expire_overdue_coupons,
)
from tests.conftest import DEFAULT_ORG_ID

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def clock():
    return NOW


def make_record(code: str, **overrides) -> CouponRecord:
    fields = {
        "id": uuid.uuid4(),
        "code": code,
        "status": CouponStatus.UNREDEEMED,
        "purchase_date": NOW - timedelta(days=10),
        "expiry_date": NOW + timedelta(days=7),
        "deal_title": "Deal " + code,
        "discount_value": "50%",
        "store_name": "Store",
        "customer_name": "Jamie",
    }
    fields.update(overrides)
    return CouponRecord(**fields)


def seed_scenarios(ledger: CouponLedger) -> None:
    with ledger.unit_of_work():
        ledger.add(make_record("NIKE50RUN", deal_title="Nike Running Sale"))
        ledger.add(
            make_record(
                "ADIDAS20OFF",
                deal_title="Adidas 20% Off",
                discount_value="20%",
                status=CouponStatus.REDEEMED,
                redemption_date=NOW - timedelta(days=7),
            )
        )
        ledger.add(
            make_record(
                "AIRPODS30",
                deal_title="AirPods Deal",
                discount_value="$30",
                expiry_date=NOW - timedelta(days=1),
            )
        )


@pytest.fixture
def store():
    return MemoryLedgerStore()


@pytest.fixture
def memory_service(store):
    ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, store)
    log = InMemoryRedemptionLog(DEFAULT_ORG_ID, store)
    seed_scenarios(ledger)
    return RedemptionService(ledger, log, clock, log_unknown_codes=False)


@pytest.fixture
def sql_service(db_session):
    ledger = SqlCouponLedger(db_session, DEFAULT_ORG_ID)
    log = SqlRedemptionLog(db_session, DEFAULT_ORG_ID)
    seed_scenarios(ledger)
    return RedemptionService(ledger, log, clock, log_unknown_codes=False)


@pytest.fixture(params=["memory", "sql"])
def service(request):
    return request.getfixturevalue(f"{request.param}_service")


class TestValidator:
    def test_valid_code(self, service):
        validation = service.validate("NIKE50RUN")
        assert validation.classification == Classification.VALID
        assert validation.record.deal_title == "Nike Running Sale"

    def test_redeemed_code(self, service):
        validation = service.validate("ADIDAS20OFF")
        assert validation.classification == Classification.ALREADY_REDEEMED
        assert validation.record.redemption_date == NOW - timedelta(days=7)

    def test_expired_code(self, service):
        validation = service.validate("AIRPODS30")
        assert validation.classification == Classification.EXPIRED

    def test_unknown_code(self, service):
        assert service.validate("UNKNOWN123").classification == Classification.NOT_FOUND

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
    def test_blank_input_is_invalid(self, raw):
        ledger = MagicMock(spec=CouponLedger)
        validation = RedemptionValidator(ledger, clock).validate(raw)

        assert validation.classification == Classification.INVALID
        ledger.get_by_code.assert_not_called()

    def test_input_is_trimmed(self, service):
        validation = service.validate("  NIKE50RUN\n")
        assert validation.classification == Classification.VALID
        assert validation.code == "NIKE50RUN"

    def test_code_with_inner_space_is_invalid(self, service):
        assert service.validate("NIKE 50").classification == Classification.INVALID

    def test_overlong_code_is_invalid(self, service):
        assert service.validate("A" * 65).classification == Classification.INVALID

    def test_redeemed_wins_over_expired(self):
        store = MemoryLedgerStore()
        ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, store)
        ledger.add(
            make_record(
                "OLDUSED",
                status=CouponStatus.REDEEMED,
                redemption_date=NOW - timedelta(days=40),
                expiry_date=NOW - timedelta(days=30),
            )
        )
        validation = RedemptionValidator(ledger, clock).validate("OLDUSED")
        assert validation.classification == Classification.ALREADY_REDEEMED

    def test_valid_at_expiry_instant(self):
        ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, MemoryLedgerStore())
        ledger.add(make_record("EDGE", expiry_date=NOW))
        validation = RedemptionValidator(ledger, clock).validate("EDGE")
        assert validation.classification == Classification.VALID

    def test_store_failure(self):
        ledger = MagicMock(spec=CouponLedger)
        ledger.get_by_code.side_effect = LedgerUnavailableError("down")
        validation = RedemptionValidator(ledger, clock).validate("NIKE50RUN")
        assert validation.classification == Classification.STORE_UNAVAILABLE

    def test_validate_does_not_mutate(self, service):
        service.validate("NIKE50RUN")
        service.validate("NIKE50RUN")
        assert service.ledger.get_by_code("NIKE50RUN").status == CouponStatus.UNREDEEMED
        assert service.history() == []


class TestScan:
    def test_scan_valid_code(self, service):
        result = service.scan("NIKE50RUN", customer_name="Alex")

        assert result.outcome == RedemptionOutcome.SUCCESS
        assert result.success
        assert result.record.status == CouponStatus.REDEEMED
        assert result.record.redemption_date == NOW

        stored = service.ledger.get_by_code("NIKE50RUN")
        assert stored.status == CouponStatus.REDEEMED
        assert stored.redemption_date == NOW

        history = service.history()
        assert len(history) == 1
        assert history[0].outcome == TransactionOutcome.SUCCESS
        assert history[0].customer_name == "Alex"
        assert history[0].discount_display == "50%"

    def test_scan_twice(self, service):
        first = service.scan("NIKE50RUN")
        second = service.scan("NIKE50RUN")

        assert first.outcome == RedemptionOutcome.SUCCESS
        assert second.outcome == RedemptionOutcome.ALREADY_REDEEMED
        assert second.record.redemption_date == NOW

        outcomes = sorted(e.outcome.value for e in service.history())
        assert outcomes == ["already-redeemed", "success"]

    def test_scan_redeemed_code(self, service):
        result = service.scan("ADIDAS20OFF")

        assert result.outcome == RedemptionOutcome.ALREADY_REDEEMED
        stored = service.ledger.get_by_code("ADIDAS20OFF")
        assert stored.redemption_date == NOW - timedelta(days=7)
        assert [e.outcome for e in service.history()] == [TransactionOutcome.ALREADY_REDEEMED]

    def test_scan_expired_code(self, service):
        result = service.scan("AIRPODS30")

        assert result.outcome == RedemptionOutcome.EXPIRED
        assert service.ledger.get_by_code("AIRPODS30").redemption_date is None
        assert [e.outcome for e in service.history()] == [TransactionOutcome.EXPIRED]

    def test_scan_blank_input(self, service):
        result = service.scan("   ")
        assert result.outcome == RedemptionOutcome.INVALID
        assert service.history() == []

    def test_scan_unknown_code_not_logged_by_default(self, service):
        result = service.scan("UNKNOWN123")
        assert result.outcome == RedemptionOutcome.NOT_FOUND
        assert service.history() == []

    def test_scan_unknown_code_logged_when_enabled(self, store):
        ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, store)
        log = InMemoryRedemptionLog(DEFAULT_ORG_ID, store)
        service = RedemptionService(ledger, log, clock, log_unknown_codes=True)

        service.scan("UNKNOWN123")

        entries = service.history()
        assert len(entries) == 1
        assert entries[0].outcome == TransactionOutcome.INVALID
        assert entries[0].code == "UNKNOWN123"

    def test_scan_store_unavailable(self):
        ledger = MagicMock(spec=CouponLedger)
        ledger.get_by_code.side_effect = LedgerUnavailableError("down")
        log = InMemoryRedemptionLog(DEFAULT_ORG_ID, MemoryLedgerStore())

        result = RedemptionService(ledger, log, clock).scan("NIKE50RUN")

        assert result.outcome == RedemptionOutcome.STORE_UNAVAILABLE
        assert result.message == "Failed to redeem discount code. Please try again."


class TestConcurrentRedemption:
    def test_exactly_one_success_in_memory(self, store):
        ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, store)
        log = InMemoryRedemptionLog(DEFAULT_ORG_ID, store)
        ledger.add(make_record("NIKE50RUN"))
        service = RedemptionService(ledger, log, clock)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: service.scan("NIKE50RUN"), range(32)))

        outcomes = [r.outcome for r in results]
        assert outcomes.count(RedemptionOutcome.SUCCESS) == 1
        assert outcomes.count(RedemptionOutcome.ALREADY_REDEEMED) == 31

        successes = [e for e in log.recent(100) if e.outcome == TransactionOutcome.SUCCESS]
        assert len(successes) == 1

    def test_exactly_one_success_in_sql(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'ledger.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        SessionFactory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        with SessionFactory() as session:
            session.add(Organization(id=DEFAULT_ORG_ID, name="Race Org"))
            session.commit()
            ledger = SqlCouponLedger(session, DEFAULT_ORG_ID)
            with ledger.unit_of_work():
                ledger.add(make_record("NIKE50RUN"))

        def scan_in_own_session(_):
            with SessionFactory() as session:
                service = RedemptionService(
                    SqlCouponLedger(session, DEFAULT_ORG_ID),
                    SqlRedemptionLog(session, DEFAULT_ORG_ID),
                    clock,
                )
                return service.scan("NIKE50RUN")

        try:
            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(scan_in_own_session, range(32)))

            outcomes = [r.outcome for r in results]
            assert outcomes.count(RedemptionOutcome.SUCCESS) == 1
            assert outcomes.count(RedemptionOutcome.ALREADY_REDEEMED) == 31

            with SessionFactory() as session:
                stored = SqlCouponLedger(session, DEFAULT_ORG_ID).get_by_code("NIKE50RUN")
                entries = SqlRedemptionLog(session, DEFAULT_ORG_ID).recent(100)
            assert stored.status == CouponStatus.REDEEMED
            assert stored.redemption_date == NOW
            successes = [e for e in entries if e.outcome == TransactionOutcome.SUCCESS]
            assert len(successes) == 1
        finally:
            engine.dispose()

    def test_lost_race_reports_already_redeemed(self, sql_service):
        validation = sql_service.validate("NIKE50RUN")
        assert validation.classification == Classification.VALID

        # Another request redeems between this caller's validation and its write.
        winner = sql_service.scan("NIKE50RUN", customer_name="Winner")
        assert winner.success

        later = RedemptionMutator(
            sql_service.ledger, sql_service.log, lambda: NOW + timedelta(minutes=5)
        )
        loser = later.redeem(validation.record, customer_name="Loser")

        assert loser.outcome == RedemptionOutcome.ALREADY_REDEEMED
        assert loser.record.redemption_date == NOW
        stored = sql_service.ledger.get_by_code("NIKE50RUN")
        assert stored.redemption_date == NOW
        successes = [
            e for e in sql_service.history() if e.outcome == TransactionOutcome.SUCCESS
        ]
        assert [e.customer_name for e in successes] == ["Winner"]

    def test_lost_race_to_expiry_sweep_reports_expired(self, store):
        ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, store)
        log = InMemoryRedemptionLog(DEFAULT_ORG_ID, store)
        record = make_record("LASTCALL", expiry_date=NOW)
        ledger.add(record)

        # The sweep moved it to expired after the scanner read it.
        ledger.compare_and_swap_status(
            "LASTCALL", CouponStatus.UNREDEEMED, CouponStatus.EXPIRED, NOW
        )
        result = RedemptionMutator(ledger, log, clock).redeem(record)

        assert result.outcome == RedemptionOutcome.EXPIRED
        assert log.recent() == []


class TestAtomicity:
    def test_log_failure_rolls_back_status_change(self, db_session):
        ledger = SqlCouponLedger(db_session, DEFAULT_ORG_ID)
        with ledger.unit_of_work():
            ledger.add(make_record("NIKE50RUN"))

        failing_log = MagicMock()
        failing_log.append.side_effect = OperationalError("INSERT", {}, Exception("disk full"))

        record = ledger.get_by_code("NIKE50RUN")
        result = RedemptionMutator(ledger, failing_log, clock).redeem(record)

        assert result.outcome == RedemptionOutcome.STORE_UNAVAILABLE
        stored = ledger.get_by_code("NIKE50RUN")
        assert stored.status == CouponStatus.UNREDEEMED
        assert stored.redemption_date is None

    def test_log_failure_rolls_back_status_change_in_memory(self, store):
        ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, store)
        log = InMemoryRedemptionLog(DEFAULT_ORG_ID, store)
        ledger.add(make_record("NIKE50RUN"))
        log.append(RedemptionEntry("OLDCODE", TransactionOutcome.INVALID, NOW))

        failing_log = MagicMock()
        failing_log.append.side_effect = LedgerUnavailableError("down")

        record = ledger.get_by_code("NIKE50RUN")
        result = RedemptionMutator(ledger, failing_log, clock).redeem(record)

        assert result.outcome == RedemptionOutcome.STORE_UNAVAILABLE
        stored = ledger.get_by_code("NIKE50RUN")
        assert stored.status == CouponStatus.UNREDEEMED
        assert stored.redemption_date is None
        assert [e.code for e in log.recent()] == ["OLDCODE"]

        retry = RedemptionMutator(ledger, log, clock).redeem(stored)
        assert retry.outcome == RedemptionOutcome.SUCCESS

    def test_memory_unit_of_work_discards_partial_log_writes(self, store):
        ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, store)
        log = InMemoryRedemptionLog(DEFAULT_ORG_ID, store)
        other_log = InMemoryRedemptionLog(uuid.uuid4(), store)
        log.append(RedemptionEntry("KEEP", TransactionOutcome.INVALID, NOW))

        with pytest.raises(LedgerUnavailableError):
            with ledger.unit_of_work():
                ledger.add(make_record("NEWCODE"))
                log.append(RedemptionEntry("DROP", TransactionOutcome.SUCCESS, NOW))
                other_log.append(RedemptionEntry("DROP", TransactionOutcome.SUCCESS, NOW))
                raise LedgerUnavailableError("down")

        assert ledger.get_by_code("NEWCODE") is None
        assert [e.code for e in log.recent()] == ["KEEP"]
        assert other_log.recent() == []

    def test_write_failure_in_memory_is_store_unavailable(self, store):
        ledger = InMemoryCouponLedger(DEFAULT_ORG_ID, store)
        ledger.add(make_record("NIKE50RUN"))
        ledger.compare_and_swap_status = MagicMock(side_effect=LedgerUnavailableError("down"))
        log = InMemoryRedemptionLog(DEFAULT_ORG_ID, store)

        result = RedemptionMutator(ledger, log, clock).redeem(ledger.get_by_code("NIKE50RUN"))

        assert result.outcome == RedemptionOutcome.STORE_UNAVAILABLE
        assert log.recent() == []


class TestPayload:
    def test_success_payload(self, memory_service):
        payload = memory_service.scan("NIKE50RUN", customer_name="Alex").to_payload()

        assert payload["type"] == "success"
        assert payload["message"] == "Discount code successfully redeemed!"
        details = payload["dealDetails"]
        assert details["title"] == "Nike Running Sale"
        assert details["coupon_code"] == "NIKE50RUN"
        assert details["customer_name"] == "Alex"
        assert details["redemption_date"] == NOW

    def test_success_payload_falls_back_to_purchaser_name(self, memory_service):
        payload = memory_service.scan("NIKE50RUN").to_payload()
        assert payload["dealDetails"]["customer_name"] == "Jamie"

    def test_already_redeemed_payload(self, memory_service):
        payload = memory_service.scan("ADIDAS20OFF").to_payload()

        assert payload["type"] == "error"
        assert payload["error_code"] == "already-redeemed"
        assert payload["message"] == "This discount code has already been redeemed."
        assert payload["dealDetails"]["redemption_date"] == NOW - timedelta(days=7)

    def test_expired_payload(self, memory_service):
        payload = memory_service.scan("AIRPODS30").to_payload()

        assert payload["error_code"] == "expired"
        assert payload["dealDetails"]["expiry_date"] == NOW - timedelta(days=1)
        assert "redemption_date" not in payload["dealDetails"]

    def test_not_found_payload_has_no_details(self, memory_service):
        payload = memory_service.scan("UNKNOWN123").to_payload()

        assert payload == {
            "type": "error",
            "error_code": "not-found",
            "message": "No purchase records found with this code.",
        }

    def test_result_without_record(self):
        result = RedemptionResult(RedemptionOutcome.INVALID, "")
        assert not result.success
        assert "dealDetails" not in result.to_payload()


class TestExpirySweep:
    def test_expires_overdue_only(self, service):
        count = expire_overdue_coupons(service.ledger, service.log, clock)

        assert count == 1
        assert service.ledger.get_by_code("AIRPODS30").status == CouponStatus.EXPIRED
        assert service.ledger.get_by_code("NIKE50RUN").status == CouponStatus.UNREDEEMED
        assert service.ledger.get_by_code("ADIDAS20OFF").status == CouponStatus.REDEEMED

    def test_sweep_is_idempotent(self, service):
        expire_overdue_coupons(service.ledger, service.log, clock)
        assert expire_overdue_coupons(service.ledger, service.log, clock) == 0

    def test_expired_coupon_cannot_be_redeemed_after_sweep(self, service):
        expire_overdue_coupons(service.ledger, service.log, clock)
        result = service.scan("AIRPODS30")
        assert result.outcome == RedemptionOutcome.EXPIRED
