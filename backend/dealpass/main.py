from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from dealpass.core.config import settings
from dealpass.routers import (
    brand_deals,
    credits,
    customers,
    discount_deals,
    payments,
    prices,
    purchased_coupons,
    redemptions,
)

OPENAPI_TAGS = [
    {"name": "Redemptions", "description": "Scan, validate and redeem coupon codes."},
    {"name": "Discount Deals", "description": "Publish deals and buy them with credits."},
    {"name": "Brand Deals", "description": "Creator collaborations offered by brands."},
    {"name": "Purchased Coupons", "description": "Look up purchased coupons and their QR codes."},
    {"name": "Customers", "description": "Create and read customers."},
    {"name": "Prices", "description": "Stripe prices for credit packs and subscriptions."},
    {"name": "Credits", "description": "Prepaid credit balances and their history."},
    {"name": "Payments", "description": "Stripe checkout sessions and webhooks."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Deal marketplace API. Sell discount deals, issue coupon codes, "
        "redeem them at the counter and reconcile Stripe payments."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(redemptions.router, prefix="/v1/redemptions", tags=["Redemptions"])
app.include_router(
    discount_deals.router, prefix="/v1/discount_deals", tags=["Discount Deals"]
)
app.include_router(brand_deals.router, prefix="/v1/brand_deals", tags=["Brand Deals"])
app.include_router(
    purchased_coupons.router,
    prefix="/v1/purchased_coupons",
    tags=["Purchased Coupons"],
)
app.include_router(customers.router, prefix="/v1/customers", tags=["Customers"])
app.include_router(prices.router, prefix="/v1/prices", tags=["Prices"])
app.include_router(credits.router, prefix="/v1/credits", tags=["Credits"])
app.include_router(payments.router, prefix="/v1/payments", tags=["Payments"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "ledger": settings.LEDGER_BACKEND,
        "status": "running",
    }
