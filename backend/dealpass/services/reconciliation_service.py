"""Apply Stripe webhook events to customers, subscriptions, payments and credits.

Each event id is applied at most once: the id is recorded in the same
transaction as the event's effects, so a failed handler leaves nothing behind
and Stripe's retry starts clean.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dealpass.models.customer import Customer
from dealpass.models.shared import utc_now
from dealpass.models.subscription import Subscription, SubscriptionStatus
from dealpass.repositories.customer_repository import CustomerRepository
from dealpass.repositories.discount_deal_repository import DiscountDealRepository
from dealpass.repositories.payment_repository import PaymentRepository
from dealpass.repositories.price_repository import PriceRepository
from dealpass.repositories.stripe_event_repository import StripeEventRepository
from dealpass.repositories.subscription_repository import SubscriptionRepository
from dealpass.services.coupon_ledger import LedgerBackend, get_ledger_backend
from dealpass.services.credit_service import CreditService
from dealpass.services.purchase_service import PurchaseService
from dealpass.services.stripe_events import (
    CheckoutSessionCompleted,
    InvoicePaid,
    InvoicePaymentFailed,
    StripeEvent,
    SubscriptionCreated,
    SubscriptionDeleted,
    SubscriptionSnapshot,
    SubscriptionUpdated,
    UnhandledEvent,
)

logger = logging.getLogger(__name__)

PROCESSED = "processed"
IGNORED = "ignored"
DUPLICATE = "duplicate"


@dataclass
class ReconciliationResult:
    status: str
    event_type: str
    event_id: str


def _parse_uuid(value: str | None) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


def _parse_credit_amount(value: str | None) -> int | None:
    """Whole, non-negative credit count from checkout metadata."""
    if value is None or value == "":
        return None
    amount = int(value)
    if amount < 0:
        raise ValueError(f"negative credit amount: {value}")
    return amount


class WebhookReconciliationService:
    """Dispatches typed Stripe events to their handlers."""

    def __init__(
        self,
        db: Session,
        ledger_factory: Callable[[Session, UUID], LedgerBackend] = get_ledger_backend,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.ledger_factory = ledger_factory
        self.clock = clock
        self.event_repo = StripeEventRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.price_repo = PriceRepository(db)
        self.deal_repo = DiscountDealRepository(db)
        self.payment_repo = PaymentRepository(db)
        self.subscription_repo = SubscriptionRepository(db)
        self.credit_service = CreditService(db)
        self._handlers: dict[type, Callable[[Any], str]] = {
            CheckoutSessionCompleted: self._handle_checkout_completed,
            InvoicePaid: self._handle_invoice_paid,
            InvoicePaymentFailed: self._handle_invoice_payment_failed,
            SubscriptionCreated: self._handle_subscription_upsert,
            SubscriptionUpdated: self._handle_subscription_upsert,
            SubscriptionDeleted: self._handle_subscription_deleted,
            UnhandledEvent: self._handle_unhandled,
        }

    def process(self, event: StripeEvent) -> ReconciliationResult:
        """Apply ``event`` once. Redeliveries return ``duplicate``."""
        if self.event_repo.exists(event.event_id):
            logger.info("Skipping duplicate Stripe event %s", event.event_id)
            return ReconciliationResult(DUPLICATE, event.event_type, event.event_id)

        handler = self._handlers[type(event)]
        try:
            self.event_repo.add(event.event_id, event.event_type)
            status = handler(event)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.event_repo.exists(event.event_id):
                logger.info("Stripe event %s applied by a concurrent delivery", event.event_id)
                return ReconciliationResult(DUPLICATE, event.event_type, event.event_id)
            raise
        except Exception:
            self.db.rollback()
            raise

        return ReconciliationResult(status, event.event_type, event.event_id)

    # -- handlers ----------------------------------------------------------

    def _handle_checkout_completed(self, event: CheckoutSessionCompleted) -> str:
        customer_id = _parse_uuid(event.metadata.get("user_id"))
        price_id = _parse_uuid(event.metadata.get("price_id"))
        if not customer_id or not price_id:
            logger.error("Missing required metadata in session %s", event.session_id)
            return IGNORED

        try:
            metadata_credits = _parse_credit_amount(event.metadata.get("credit_amount"))
        except ValueError:
            logger.error(
                "Invalid credit_amount %r in session %s",
                event.metadata.get("credit_amount"),
                event.session_id,
            )
            return IGNORED

        customer = self.customer_repo.get_by_id(customer_id)
        if not customer:
            logger.error("Customer %s not found for session %s", customer_id, event.session_id)
            return IGNORED

        price = self.price_repo.get_by_id(price_id)
        if not price:
            logger.error("Price %s not found for session %s", price_id, event.session_id)
            return IGNORED

        if event.mode == "subscription":
            logger.info(
                "Subscription checkout %s completed, waiting for subscription event",
                event.session_id,
            )
            return PROCESSED

        if not event.paid:
            logger.info(
                "Checkout %s completed with payment status %s, nothing to apply",
                event.session_id,
                event.payment_status,
            )
            return IGNORED

        if event.stripe_customer_id and not customer.stripe_customer_id:
            customer.stripe_customer_id = event.stripe_customer_id  # type: ignore[assignment]

        organization_id: UUID = customer.organization_id  # type: ignore[assignment]
        self.payment_repo.create(
            organization_id=organization_id,
            customer_id=customer_id,
            price_id=price_id,
            provider_payment_id=event.session_id,
            amount=event.amount_total,
            currency=event.currency,
            metadata=dict(event.metadata),
        )

        credit_amount = metadata_credits if metadata_credits is not None else price.credit_amount
        if credit_amount:
            self.credit_service.grant(
                customer_id,
                organization_id,
                int(credit_amount),
                reference_id=event.session_id,
                metadata={"payment_id": event.session_id, "price_id": str(price_id)},
                granted_at=self.clock(),
            )

        deal_id = _parse_uuid(event.metadata.get("deal_id"))
        if deal_id:
            self._issue_deal_coupon(deal_id, customer, event.session_id)

        return PROCESSED

    def _issue_deal_coupon(self, deal_id: UUID, customer: Customer, session_id: str) -> None:
        organization_id: UUID = customer.organization_id  # type: ignore[assignment]
        deal = self.deal_repo.get_by_id(deal_id, organization_id)
        if not deal:
            logger.error("Deal %s from session %s not found", deal_id, session_id)
            return
        backend = self.ledger_factory(self.db, organization_id)
        record = PurchaseService(self.db, backend.ledger, self.clock).issue_coupon(
            deal, customer, self.clock()
        )
        logger.info("Issued coupon %s for session %s", record.code, session_id)

    def _handle_invoice_paid(self, event: InvoicePaid) -> str:
        if not event.stripe_subscription_id or not event.stripe_customer_id:
            logger.info("No subscription or customer in invoice %s", event.invoice_id)
            return IGNORED

        customer = self.customer_repo.get_by_stripe_customer_id(event.stripe_customer_id)
        if not customer:
            logger.error("No customer with Stripe id %s", event.stripe_customer_id)
            return IGNORED

        subscription = self.subscription_repo.get_by_stripe_id(event.stripe_subscription_id)
        if subscription is not None:
            fields: dict[str, Any] = {"status": SubscriptionStatus.ACTIVE.value}
            if event.period_start and event.period_end:
                fields["current_period_start"] = event.period_start
                fields["current_period_end"] = event.period_end
            self.subscription_repo.update(subscription, **fields)

        if self.payment_repo.get_by_provider_payment_id(event.invoice_id) is None:
            self.payment_repo.create(
                organization_id=customer.organization_id,  # type: ignore[arg-type]
                customer_id=customer.id,  # type: ignore[arg-type]
                price_id=subscription.price_id if subscription else None,  # type: ignore[arg-type]
                provider_payment_id=event.invoice_id,
                amount=event.amount_paid,
                currency=event.currency,
                metadata={
                    "invoice_id": event.invoice_id,
                    "subscription_id": event.stripe_subscription_id,
                },
            )
        return PROCESSED

    def _handle_invoice_payment_failed(self, event: InvoicePaymentFailed) -> str:
        if not event.stripe_subscription_id:
            logger.info("No subscription in invoice %s", event.invoice_id)
            return IGNORED

        subscription = self.subscription_repo.get_by_stripe_id(event.stripe_subscription_id)
        if subscription is None:
            logger.error("Subscription %s not found", event.stripe_subscription_id)
            return IGNORED

        self.subscription_repo.update(subscription, status=SubscriptionStatus.PAST_DUE.value)
        return PROCESSED

    def _handle_subscription_upsert(self, event: SubscriptionSnapshot) -> str:
        fields: dict[str, Any] = {
            "status": event.status,
            "current_period_start": event.current_period_start,
            "current_period_end": event.current_period_end,
            "trial_start": event.trial_start,
            "trial_end": event.trial_end,
            "cancel_at": event.cancel_at,
            "canceled_at": event.canceled_at,
        }
        price = (
            self.price_repo.get_by_stripe_price_id(event.stripe_price_id)
            if event.stripe_price_id
            else None
        )
        if price is not None:
            fields["price_id"] = price.id

        subscription = self.subscription_repo.get_by_stripe_id(event.stripe_subscription_id)
        if subscription is not None:
            return self._update_subscription(subscription, fields)

        customer = (
            self.customer_repo.get_by_stripe_customer_id(event.stripe_customer_id)
            if event.stripe_customer_id
            else None
        )
        if not customer:
            logger.error("No customer with Stripe id %s", event.stripe_customer_id)
            return IGNORED

        self.subscription_repo.create(
            organization_id=customer.organization_id,
            customer_id=customer.id,
            stripe_subscription_id=event.stripe_subscription_id,
            **fields,
        )
        return PROCESSED

    def _update_subscription(self, subscription: Subscription, fields: dict[str, Any]) -> str:
        # A late update must not revive a subscription Stripe already deleted.
        if subscription.status == SubscriptionStatus.CANCELED.value:
            fields["status"] = SubscriptionStatus.CANCELED.value
            fields.pop("canceled_at", None)
        self.subscription_repo.update(subscription, **fields)
        return PROCESSED

    def _handle_subscription_deleted(self, event: SubscriptionDeleted) -> str:
        subscription = self.subscription_repo.get_by_stripe_id(event.stripe_subscription_id)
        if subscription is None:
            logger.error("Subscription %s not found", event.stripe_subscription_id)
            return IGNORED

        self.subscription_repo.update(
            subscription,
            status=SubscriptionStatus.CANCELED.value,
            canceled_at=event.canceled_at or self.clock(),
        )
        return PROCESSED

    def _handle_unhandled(self, event: UnhandledEvent) -> str:
        logger.info("Unhandled event type: %s", event.event_type)
        return IGNORED
