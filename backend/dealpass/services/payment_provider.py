"""Payment provider abstraction layer."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from dealpass.core.config import settings
from dealpass.models.payment import PaymentProvider


@dataclass
class CheckoutSession:
    """Checkout session result from provider."""

    provider_checkout_id: str
    checkout_url: str
    mode: str
    expires_at: datetime | None = None


class PaymentProviderBase(ABC):
    """Abstract base class for payment providers."""

    @property
    @abstractmethod
    def provider_name(self) -> PaymentProvider:
        """Return the provider enum value."""
        pass  # pragma: no cover

    @property
    def configured(self) -> bool:
        """Whether credentials for the provider are present."""
        return True

    @abstractmethod
    def create_customer(self, email: str | None, name: str, metadata: dict[str, str]) -> str:
        """Create a customer at the provider and return its id."""
        pass  # pragma: no cover

    @abstractmethod
    def create_checkout_session(
        self,
        *,
        provider_customer_id: str,
        provider_price_id: str,
        mode: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        trial_days: int | None = None,
    ) -> CheckoutSession:
        """Create a hosted checkout session."""
        pass  # pragma: no cover

    @abstractmethod
    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        """Verify the webhook signature."""
        pass  # pragma: no cover


class StripeProvider(PaymentProviderBase):
    """Stripe payment provider implementation."""

    def __init__(self, api_key: str | None = None, webhook_secret: str | None = None):
        self.api_key = api_key or settings.stripe_api_key
        self.webhook_secret = webhook_secret or settings.stripe_webhook_secret
        self._stripe: Any = None

    @property
    def stripe(self) -> Any:
        """Lazy-load stripe module."""
        if self._stripe is None:
            try:
                import stripe

                stripe.api_key = self.api_key
                self._stripe = stripe
            except ImportError as e:
                raise ImportError("stripe package not installed. Run: pip install stripe") from e
        return self._stripe

    @property
    def provider_name(self) -> PaymentProvider:
        return PaymentProvider.STRIPE

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def create_customer(self, email: str | None, name: str, metadata: dict[str, str]) -> str:
        params: dict[str, Any] = {"name": name, "metadata": metadata}
        if email:
            params["email"] = email
        customer = self.stripe.Customer.create(**params)
        return str(customer.id)

    def create_checkout_session(
        self,
        *,
        provider_customer_id: str,
        provider_price_id: str,
        mode: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        trial_days: int | None = None,
    ) -> CheckoutSession:
        """Create a Stripe Checkout Session for a single price."""
        session_params: dict[str, Any] = {
            "customer": provider_customer_id,
            "payment_method_types": ["card"],
            "line_items": [{"price": provider_price_id, "quantity": 1}],
            "mode": mode,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }

        if mode == "subscription":
            subscription_data: dict[str, Any] = {"metadata": metadata}
            if trial_days:
                subscription_data["trial_period_days"] = trial_days
            session_params["subscription_data"] = subscription_data

        session = self.stripe.checkout.Session.create(**session_params)

        return CheckoutSession(
            provider_checkout_id=session.id,
            checkout_url=session.url,
            mode=mode,
            expires_at=datetime.fromtimestamp(session.expires_at, tz=UTC)
            if session.expires_at
            else None,
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        """Verify Stripe webhook signature."""
        if not self.webhook_secret or not signature:
            return False
        try:
            self.stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
            return True
        except (ValueError, self.stripe.SignatureVerificationError):
            return False


def get_payment_provider(provider: PaymentProvider = PaymentProvider.STRIPE) -> PaymentProviderBase:
    """Factory function to get the appropriate payment provider."""
    providers: dict[PaymentProvider, type[PaymentProviderBase]] = {
        PaymentProvider.STRIPE: StripeProvider,
    }

    provider_class = providers.get(provider)
    if not provider_class:
        raise ValueError(f"Unsupported payment provider: {provider}")

    return provider_class()
