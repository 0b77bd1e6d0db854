"""Tests for CreditService and CreditRepository."""

from datetime import UTC, datetime

import pytest

from dealpass.models.credit_transaction import CreditTransactionType
from dealpass.repositories.credit_repository import CreditRepository
from dealpass.repositories.customer_repository import CustomerRepository
from dealpass.schemas.customer import CustomerCreate
from dealpass.services.credit_service import CreditService
from tests.conftest import DEFAULT_ORG_ID

PURCHASED_AT = datetime(2026, 10, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def customer(db_session):
    return CustomerRepository(db_session).create(
        CustomerCreate(name="Credit Customer", email="credits@example.com"), DEFAULT_ORG_ID
    )


class TestGrant:
    def test_first_grant_creates_balance(self, db_session, customer):
        service = CreditService(db_session)
        service.grant(customer.id, DEFAULT_ORG_ID, 100, reference_id="cs_1", granted_at=PURCHASED_AT)
        db_session.commit()

        credit = service.get_balance(customer.id)
        assert credit.balance == 100
        assert credit.credits_purchased == 100
        assert credit.credits_used == 0

    def test_grants_accumulate(self, db_session, customer):
        service = CreditService(db_session)
        service.grant(customer.id, DEFAULT_ORG_ID, 100, reference_id="cs_1")
        service.grant(customer.id, DEFAULT_ORG_ID, 50, reference_id="cs_2")
        db_session.commit()

        credit = service.get_balance(customer.id)
        assert credit.balance == 150
        assert credit.credits_purchased == 150

        txns = CreditRepository(db_session).get_transactions(customer.id)
        assert len(txns) == 2
        assert {t.reference_id for t in txns} == {"cs_1", "cs_2"}
        assert all(t.transaction_type == CreditTransactionType.PURCHASE.value for t in txns)

    def test_grant_rejects_non_positive_amount(self, db_session, customer):
        with pytest.raises(ValueError, match="positive"):
            CreditService(db_session).grant(customer.id, DEFAULT_ORG_ID, 0)

    def test_grant_does_not_commit(self, db_session, customer):
        service = CreditService(db_session)
        service.grant(customer.id, DEFAULT_ORG_ID, 100)
        db_session.rollback()

        assert service.get_balance(customer.id) is None


class TestSpend:
    def test_spend_within_balance(self, db_session, customer):
        service = CreditService(db_session)
        service.grant(customer.id, DEFAULT_ORG_ID, 100)

        assert service.spend(customer.id, DEFAULT_ORG_ID, 30, reference_id="deal:1") is True
        db_session.commit()

        credit = service.get_balance(customer.id)
        assert credit.balance == 70
        assert credit.credits_used == 30

        spends = [
            t
            for t in CreditRepository(db_session).get_transactions(customer.id)
            if t.transaction_type == CreditTransactionType.SPEND.value
        ]
        assert len(spends) == 1
        assert spends[0].amount == -30

    def test_spend_more_than_balance(self, db_session, customer):
        service = CreditService(db_session)
        service.grant(customer.id, DEFAULT_ORG_ID, 20)

        assert service.spend(customer.id, DEFAULT_ORG_ID, 21) is False
        db_session.commit()
        assert service.get_balance(customer.id).balance == 20

    def test_spend_without_balance_row(self, db_session, customer):
        assert CreditService(db_session).spend(customer.id, DEFAULT_ORG_ID, 1) is False

    def test_spend_exact_balance(self, db_session, customer):
        service = CreditService(db_session)
        service.grant(customer.id, DEFAULT_ORG_ID, 10)
        assert service.spend(customer.id, DEFAULT_ORG_ID, 10) is True
        db_session.commit()
        assert service.get_balance(customer.id).balance == 0

    def test_spend_rejects_non_positive_amount(self, db_session, customer):
        with pytest.raises(ValueError):
            CreditService(db_session).spend(customer.id, DEFAULT_ORG_ID, -5)
