from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from dealpass.core.auth import get_current_organization
from dealpass.core.database import get_db
from dealpass.models.price import Price
from dealpass.repositories.price_repository import PriceRepository
from dealpass.schemas.price import PriceCreate, PriceResponse

router = APIRouter()


@router.post(
    "/",
    response_model=PriceResponse,
    status_code=201,
    summary="Create price",
    responses={
        409: {"description": "A price with this Stripe price id already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_price(
    data: PriceCreate,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> Price:
    """Register a Stripe price that customers can check out with."""
    repo = PriceRepository(db)
    if repo.get_by_stripe_price_id(data.stripe_price_id):
        raise HTTPException(
            status_code=409,
            detail=f"Price with stripe_price_id '{data.stripe_price_id}' already exists",
        )
    return repo.create(data, organization_id)


@router.get(
    "/",
    response_model=list[PriceResponse],
    summary="List prices",
)
async def list_prices(
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> list[Price]:
    repo = PriceRepository(db)
    return repo.get_all(organization_id, active_only=not include_inactive)
