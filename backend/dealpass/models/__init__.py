from dealpass.models.brand_deal import BrandDeal, BrandDealStatus
from dealpass.models.credit_transaction import CreditTransaction, CreditTransactionType
from dealpass.models.customer import Customer
from dealpass.models.discount_deal import DiscountDeal
from dealpass.models.organization import Organization
from dealpass.models.payment import Payment, PaymentProvider, PaymentStatus
from dealpass.models.price import Price, PriceType
from dealpass.models.purchased_coupon import CouponStatus, PurchasedCoupon
from dealpass.models.redemption_transaction import RedemptionTransaction, TransactionOutcome
from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, generate_uuid, utc_now
from dealpass.models.stripe_event import ProcessedStripeEvent
from dealpass.models.subscription import Subscription, SubscriptionStatus
from dealpass.models.user_credit import UserCredit

__all__ = [
    "BrandDeal",
    "BrandDealStatus",
    "CouponStatus",
    "CreditTransaction",
    "CreditTransactionType",
    "Customer",
    "DEFAULT_ORGANIZATION_ID",
    "DiscountDeal",
    "Organization",
    "Payment",
    "PaymentProvider",
    "PaymentStatus",
    "Price",
    "PriceType",
    "ProcessedStripeEvent",
    "PurchasedCoupon",
    "RedemptionTransaction",
    "Subscription",
    "SubscriptionStatus",
    "TransactionOutcome",
    "UUIDType",
    "UserCredit",
    "generate_uuid",
    "utc_now",
]
