"""Typed Stripe webhook events.

``parse_stripe_event`` turns a raw event dict into one variant per handled
event type. Each variant carries only the fields its handler needs.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, ClassVar


def _object_id(value: Any) -> str | None:
    """Stripe fields may hold an id string or an expanded object."""
    if value is None:
        return None
    if isinstance(value, dict):
        return value.get("id")
    return str(value)


def _timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=UTC)


def _first_item(obj: dict[str, Any]) -> dict[str, Any]:
    items = (obj.get("items") or {}).get("data") or []
    return items[0] if items else {}


@dataclass(frozen=True)
class CheckoutSessionCompleted:
    event_type: ClassVar[str] = "checkout.session.completed"

    event_id: str
    session_id: str
    mode: str
    payment_status: str | None = None
    amount_total: int = 0
    currency: str = "usd"
    stripe_customer_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def paid(self) -> bool:
        return self.payment_status in ("paid", "no_payment_required")


@dataclass(frozen=True)
class InvoicePaid:
    event_type: ClassVar[str] = "invoice.paid"

    event_id: str
    invoice_id: str
    stripe_customer_id: str | None
    stripe_subscription_id: str | None
    amount_paid: int = 0
    currency: str = "usd"
    period_start: datetime | None = None
    period_end: datetime | None = None


@dataclass(frozen=True)
class InvoicePaymentFailed:
    event_type: ClassVar[str] = "invoice.payment_failed"

    event_id: str
    invoice_id: str
    stripe_subscription_id: str | None


@dataclass(frozen=True)
class SubscriptionSnapshot:
    event_type: ClassVar[str] = ""

    event_id: str
    stripe_subscription_id: str
    stripe_customer_id: str | None
    status: str
    stripe_price_id: str | None = None
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    trial_start: datetime | None = None
    trial_end: datetime | None = None
    cancel_at: datetime | None = None
    canceled_at: datetime | None = None


@dataclass(frozen=True)
class SubscriptionCreated(SubscriptionSnapshot):
    event_type: ClassVar[str] = "customer.subscription.created"


@dataclass(frozen=True)
class SubscriptionUpdated(SubscriptionSnapshot):
    event_type: ClassVar[str] = "customer.subscription.updated"


@dataclass(frozen=True)
class SubscriptionDeleted:
    event_type: ClassVar[str] = "customer.subscription.deleted"

    event_id: str
    stripe_subscription_id: str
    canceled_at: datetime | None = None


@dataclass(frozen=True)
class UnhandledEvent:
    event_id: str
    event_type: str  # type: ignore[misc]


StripeEvent = (
    CheckoutSessionCompleted
    | InvoicePaid
    | InvoicePaymentFailed
    | SubscriptionCreated
    | SubscriptionUpdated
    | SubscriptionDeleted
    | UnhandledEvent
)


def _invoice_subscription_id(obj: dict[str, Any]) -> str | None:
    # Newer API versions nest the subscription under parent.subscription_details
    if obj.get("subscription"):
        return _object_id(obj["subscription"])
    details = (obj.get("parent") or {}).get("subscription_details") or {}
    return _object_id(details.get("subscription"))


def _invoice_period(obj: dict[str, Any]) -> tuple[datetime | None, datetime | None]:
    lines = (obj.get("lines") or {}).get("data") or []
    if lines and lines[0].get("period"):
        period = lines[0]["period"]
        return _timestamp(period.get("start")), _timestamp(period.get("end"))
    return _timestamp(obj.get("period_start")), _timestamp(obj.get("period_end"))


def _subscription_fields(event_id: str, obj: dict[str, Any]) -> dict[str, Any]:
    item = _first_item(obj)
    # current_period_* moved from the subscription to its items in newer API versions
    period_start = obj.get("current_period_start", item.get("current_period_start"))
    period_end = obj.get("current_period_end", item.get("current_period_end"))
    return {
        "event_id": event_id,
        "stripe_subscription_id": obj["id"],
        "stripe_customer_id": _object_id(obj.get("customer")),
        "status": obj.get("status", "incomplete"),
        "stripe_price_id": _object_id(item.get("price")),
        "current_period_start": _timestamp(period_start),
        "current_period_end": _timestamp(period_end),
        "trial_start": _timestamp(obj.get("trial_start")),
        "trial_end": _timestamp(obj.get("trial_end")),
        "cancel_at": _timestamp(obj.get("cancel_at")),
        "canceled_at": _timestamp(obj.get("canceled_at")),
    }


def parse_stripe_event(payload: dict[str, Any]) -> StripeEvent:
    """Map a raw Stripe event to its typed variant.

    Raises:
        ValueError: If the payload lacks an event id or its object.
    """
    event_id = payload.get("id")
    event_type = payload.get("type", "")
    obj = (payload.get("data") or {}).get("object")
    if not event_id or not isinstance(obj, dict):
        raise ValueError("Malformed Stripe event payload")

    if event_type == CheckoutSessionCompleted.event_type:
        return CheckoutSessionCompleted(
            event_id=event_id,
            session_id=obj["id"],
            mode=obj.get("mode", "payment"),
            payment_status=obj.get("payment_status"),
            amount_total=int(obj.get("amount_total") or 0),
            currency=obj.get("currency") or "usd",
            stripe_customer_id=_object_id(obj.get("customer")),
            metadata={str(k): str(v) for k, v in (obj.get("metadata") or {}).items()},
        )

    if event_type == InvoicePaid.event_type:
        period_start, period_end = _invoice_period(obj)
        return InvoicePaid(
            event_id=event_id,
            invoice_id=obj["id"],
            stripe_customer_id=_object_id(obj.get("customer")),
            stripe_subscription_id=_invoice_subscription_id(obj),
            amount_paid=int(obj.get("amount_paid") or 0),
            currency=obj.get("currency") or "usd",
            period_start=period_start,
            period_end=period_end,
        )

    if event_type == InvoicePaymentFailed.event_type:
        return InvoicePaymentFailed(
            event_id=event_id,
            invoice_id=obj["id"],
            stripe_subscription_id=_invoice_subscription_id(obj),
        )

    if event_type == SubscriptionCreated.event_type:
        return SubscriptionCreated(**_subscription_fields(event_id, obj))

    if event_type == SubscriptionUpdated.event_type:
        return SubscriptionUpdated(**_subscription_fields(event_id, obj))

    if event_type == SubscriptionDeleted.event_type:
        return SubscriptionDeleted(
            event_id=event_id,
            stripe_subscription_id=obj["id"],
            canceled_at=_timestamp(obj.get("canceled_at")),
        )

    return UnhandledEvent(event_id=event_id, event_type=event_type)
