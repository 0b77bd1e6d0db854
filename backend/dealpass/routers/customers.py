from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from dealpass.core.auth import get_current_organization
from dealpass.core.database import get_db
from dealpass.models.customer import Customer
from dealpass.repositories.customer_repository import CustomerRepository
from dealpass.schemas.customer import CustomerCreate, CustomerResponse

router = APIRouter()


@router.post(
    "/",
    response_model=CustomerResponse,
    status_code=201,
    summary="Create customer",
    responses={422: {"description": "Validation error"}},
)
async def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> Customer:
    repo = CustomerRepository(db)
    return repo.create(data, organization_id)


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Get customer",
    responses={404: {"description": "Customer not found"}},
)
async def get_customer(
    customer_id: UUID,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> Customer:
    repo = CustomerRepository(db)
    customer = repo.get_by_id(customer_id, organization_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer
