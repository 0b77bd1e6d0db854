from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from dealpass.core.auth import get_current_organization
from dealpass.core.database import get_db
from dealpass.models.brand_deal import BrandDeal, BrandDealStatus
from dealpass.repositories.brand_deal_repository import BrandDealRepository
from dealpass.schemas.brand_deal import BrandDealCreate, BrandDealResponse

router = APIRouter()


@router.post(
    "/",
    response_model=BrandDealResponse,
    status_code=201,
    summary="Create brand deal",
    responses={422: {"description": "Validation error"}},
)
async def create_brand_deal(
    data: BrandDealCreate,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> BrandDeal:
    repo = BrandDealRepository(db)
    return repo.create(data, organization_id)


@router.get(
    "/",
    response_model=list[BrandDealResponse],
    summary="List brand deals",
)
async def list_brand_deals(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    category: str | None = Query(default=None),
    status: BrandDealStatus | None = Query(default=None),
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> list[BrandDeal]:
    """List deals, featured first and then newest first."""
    repo = BrandDealRepository(db)
    status_value = status.value if status else None
    response.headers["X-Total-Count"] = str(
        repo.count(organization_id, category=category, status=status_value)
    )
    return repo.get_all(
        organization_id, skip=skip, limit=limit, category=category, status=status_value
    )


@router.get(
    "/categories",
    response_model=list[str],
    summary="List brand deal categories",
)
async def list_brand_deal_categories(
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> list[str]:
    return BrandDealRepository(db).get_categories(organization_id)


@router.get(
    "/{deal_id}",
    response_model=BrandDealResponse,
    summary="Get brand deal",
    responses={404: {"description": "Brand deal not found"}},
)
async def get_brand_deal(
    deal_id: UUID,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> BrandDeal:
    repo = BrandDealRepository(db)
    deal = repo.get_by_id(deal_id, organization_id)
    if not deal:
        raise HTTPException(status_code=404, detail="Brand deal not found")
    return deal


@router.post(
    "/{deal_id}/views",
    response_model=BrandDealResponse,
    summary="Record a brand deal view",
    responses={404: {"description": "Brand deal not found"}},
)
async def record_brand_deal_view(
    deal_id: UUID,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> BrandDeal:
    repo = BrandDealRepository(db)
    if not repo.increment_views(deal_id, organization_id):
        raise HTTPException(status_code=404, detail="Brand deal not found")
    deal = repo.get_by_id(deal_id, organization_id)
    if not deal:
        raise HTTPException(status_code=404, detail="Brand deal not found")
    return deal
