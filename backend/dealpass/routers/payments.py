"""Payment API endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from dealpass.core.auth import get_current_organization
from dealpass.core.database import get_db
from dealpass.models.price import PriceType
from dealpass.repositories.customer_repository import CustomerRepository
from dealpass.repositories.discount_deal_repository import DiscountDealRepository
from dealpass.repositories.price_repository import PriceRepository
from dealpass.schemas.payment import CheckoutSessionCreate, CheckoutSessionResponse, WebhookAck
from dealpass.services.payment_provider import get_payment_provider
from dealpass.services.reconciliation_service import WebhookReconciliationService
from dealpass.services.stripe_events import parse_stripe_event

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/checkout",
    response_model=CheckoutSessionResponse,
    summary="Create a Stripe checkout session",
    responses={
        400: {"description": "Price is not active"},
        404: {"description": "Price, customer or deal not found"},
        502: {"description": "Payment provider rejected the request"},
        503: {"description": "Payment provider not configured"},
    },
)
async def create_checkout_session(
    data: CheckoutSessionCreate,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> CheckoutSessionResponse:
    """Start a hosted checkout for a price.

    Subscription prices open a subscription-mode session, other prices a
    payment-mode session. The Stripe customer is created on first checkout.
    """
    price = PriceRepository(db).get_by_id(data.price_id, organization_id)
    if not price:
        raise HTTPException(status_code=404, detail="Price not found")
    if not price.active:
        raise HTTPException(status_code=400, detail="Price is not active")

    customer_repo = CustomerRepository(db)
    customer = customer_repo.get_by_id(data.customer_id, organization_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    if data.deal_id and not DiscountDealRepository(db).get_by_id(data.deal_id, organization_id):
        raise HTTPException(status_code=404, detail="Discount deal not found")

    provider = get_payment_provider()
    if not provider.configured:
        raise HTTPException(status_code=503, detail="Payment provider not configured")

    mode = "subscription" if price.price_type == PriceType.SUBSCRIPTION.value else "payment"
    metadata = {"user_id": str(customer.id), "price_id": str(price.id)}
    if price.price_type == PriceType.CREDIT.value and price.credit_amount:
        metadata["credit_amount"] = str(price.credit_amount)
    if data.deal_id:
        metadata["deal_id"] = str(data.deal_id)

    try:
        stripe_customer_id = customer.stripe_customer_id
        if not stripe_customer_id:
            stripe_customer_id = provider.create_customer(
                email=customer.email,  # type: ignore[arg-type]
                name=str(customer.name),
                metadata={"user_id": str(customer.id)},
            )
            customer_repo.set_stripe_customer_id(customer, stripe_customer_id)

        session = provider.create_checkout_session(
            provider_customer_id=str(stripe_customer_id),
            provider_price_id=str(price.stripe_price_id),
            mode=mode,
            success_url=data.success_url,
            cancel_url=data.cancel_url,
            metadata=metadata,
            trial_days=data.trial_days if mode == "subscription" else None,
        )
    except ImportError:
        raise HTTPException(
            status_code=503,
            detail="Payment provider not configured",
        ) from None
    except Exception as e:
        logger.exception("Checkout session creation failed for price %s", price.id)
        raise HTTPException(
            status_code=502,
            detail=f"Failed to create checkout session: {e!s}",
        ) from None

    return CheckoutSessionResponse(
        session_id=session.provider_checkout_id,
        checkout_url=session.checkout_url,
        mode=session.mode,
        expires_at=session.expires_at,
    )


@router.post(
    "/webhook/stripe",
    response_model=WebhookAck,
    summary="Receive Stripe webhook events",
    responses={400: {"description": "Invalid signature or payload"}},
)
async def handle_stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
    db: Session = Depends(get_db),
) -> WebhookAck:
    """Verify, parse and apply a Stripe event.

    Redelivered events are acknowledged without being applied again.
    """
    payload = await request.body()

    provider = get_payment_provider()
    if not provider.verify_webhook_signature(payload, stripe_signature or ""):
        raise HTTPException(status_code=400, detail="Invalid signature")

    try:
        payload_json = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload") from None
    if not isinstance(payload_json, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    try:
        event = parse_stripe_event(payload_json)
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Malformed Stripe event") from None

    result = WebhookReconciliationService(db).process(event)
    logger.info(
        "Stripe event %s (%s): %s", result.event_id, result.event_type, result.status
    )
    return WebhookAck(status=result.status, event_type=result.event_type)
