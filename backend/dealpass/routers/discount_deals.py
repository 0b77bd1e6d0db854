from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from dealpass.core.auth import get_current_organization
from dealpass.core.database import get_db
from dealpass.models.discount_deal import DiscountDeal
from dealpass.repositories.discount_deal_repository import DiscountDealRepository
from dealpass.routers.purchased_coupons import coupon_response
from dealpass.routers.redemptions import get_coupon_backend
from dealpass.schemas.discount_deal import (
    DiscountDealCreate,
    DiscountDealResponse,
    PurchaseDealRequest,
)
from dealpass.schemas.purchased_coupon import PurchasedCouponResponse
from dealpass.services.coupon_ledger import LedgerBackend
from dealpass.services.purchase_service import (
    CustomerNotFoundError,
    DealNotFoundError,
    DealUnavailableError,
    InsufficientCreditsError,
    PurchaseService,
)

router = APIRouter()


@router.post(
    "/",
    response_model=DiscountDealResponse,
    status_code=201,
    summary="Create discount deal",
    responses={422: {"description": "Validation error"}},
)
async def create_discount_deal(
    data: DiscountDealCreate,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> DiscountDeal:
    repo = DiscountDealRepository(db)
    return repo.create(data, organization_id)


@router.get(
    "/",
    response_model=list[DiscountDealResponse],
    summary="List discount deals",
)
async def list_discount_deals(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    category: str | None = Query(default=None),
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> list[DiscountDeal]:
    """List deals, newest first, optionally filtered by category."""
    repo = DiscountDealRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(organization_id))
    return repo.get_all(organization_id, skip=skip, limit=limit, category=category)


@router.get(
    "/{deal_id}",
    response_model=DiscountDealResponse,
    summary="Get discount deal",
    responses={404: {"description": "Discount deal not found"}},
)
async def get_discount_deal(
    deal_id: UUID,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> DiscountDeal:
    repo = DiscountDealRepository(db)
    deal = repo.get_by_id(deal_id, organization_id)
    if not deal:
        raise HTTPException(status_code=404, detail="Discount deal not found")
    return deal


@router.post(
    "/{deal_id}/views",
    response_model=DiscountDealResponse,
    summary="Record a deal view",
    responses={404: {"description": "Discount deal not found"}},
)
async def record_view(
    deal_id: UUID,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> DiscountDeal:
    repo = DiscountDealRepository(db)
    if not repo.increment_views(deal_id, organization_id):
        raise HTTPException(status_code=404, detail="Discount deal not found")
    deal = repo.get_by_id(deal_id, organization_id)
    if not deal:
        raise HTTPException(status_code=404, detail="Discount deal not found")
    return deal


@router.post(
    "/{deal_id}/purchase",
    response_model=PurchasedCouponResponse,
    status_code=201,
    summary="Buy a deal with credits",
    responses={
        402: {"description": "Insufficient credits"},
        404: {"description": "Discount deal or customer not found"},
        410: {"description": "Discount deal has expired"},
    },
)
async def purchase_discount_deal(
    deal_id: UUID,
    data: PurchaseDealRequest,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
    backend: LedgerBackend = Depends(get_coupon_backend),
) -> PurchasedCouponResponse:
    """Spend the deal's credit cost and issue a redeemable coupon."""
    service = PurchaseService(db, backend.ledger)
    try:
        record = service.purchase_with_credits(deal_id, data.customer_id, organization_id)
    except (DealNotFoundError, CustomerNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except DealUnavailableError as e:
        raise HTTPException(status_code=410, detail=str(e)) from None
    except InsufficientCreditsError as e:
        raise HTTPException(status_code=402, detail=str(e)) from None
    return coupon_response(record, service.clock())
