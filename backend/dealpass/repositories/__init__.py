from dealpass.repositories.brand_deal_repository import BrandDealRepository
from dealpass.repositories.credit_repository import CreditRepository
from dealpass.repositories.customer_repository import CustomerRepository
from dealpass.repositories.discount_deal_repository import DiscountDealRepository
from dealpass.repositories.payment_repository import PaymentRepository
from dealpass.repositories.price_repository import PriceRepository
from dealpass.repositories.purchased_coupon_repository import PurchasedCouponRepository
from dealpass.repositories.redemption_transaction_repository import (
    RedemptionTransactionRepository,
)
from dealpass.repositories.stripe_event_repository import StripeEventRepository
from dealpass.repositories.subscription_repository import SubscriptionRepository

__all__ = [
    "BrandDealRepository",
    "CreditRepository",
    "CustomerRepository",
    "DiscountDealRepository",
    "PaymentRepository",
    "PriceRepository",
    "PurchasedCouponRepository",
    "RedemptionTransactionRepository",
    "StripeEventRepository",
    "SubscriptionRepository",
]
