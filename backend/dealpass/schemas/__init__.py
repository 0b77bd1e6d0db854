from dealpass.schemas.brand_deal import BrandDealCreate, BrandDealResponse
from dealpass.schemas.credit import CreditBalanceResponse, CreditTransactionResponse
from dealpass.schemas.customer import CustomerCreate, CustomerResponse
from dealpass.schemas.discount_deal import (
    DiscountDealCreate,
    DiscountDealResponse,
    PurchaseDealRequest,
)
from dealpass.schemas.payment import CheckoutSessionCreate, CheckoutSessionResponse, WebhookAck
from dealpass.schemas.price import PriceCreate, PriceResponse
from dealpass.schemas.purchased_coupon import PurchasedCouponResponse
from dealpass.schemas.redemption import (
    DealDetails,
    RedemptionErrorResponse,
    RedemptionSuccessResponse,
    RedemptionTransactionResponse,
    ScanRequest,
    ValidationResponse,
)

__all__ = [
    "BrandDealCreate",
    "BrandDealResponse",
    "CheckoutSessionCreate",
    "CheckoutSessionResponse",
    "CreditBalanceResponse",
    "CreditTransactionResponse",
    "CustomerCreate",
    "CustomerResponse",
    "DealDetails",
    "DiscountDealCreate",
    "DiscountDealResponse",
    "PriceCreate",
    "PriceResponse",
    "PurchaseDealRequest",
    "PurchasedCouponResponse",
    "RedemptionErrorResponse",
    "RedemptionSuccessResponse",
    "RedemptionTransactionResponse",
    "ScanRequest",
    "ValidationResponse",
    "WebhookAck",
]
