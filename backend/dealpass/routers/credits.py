from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from dealpass.core.auth import get_current_organization
from dealpass.core.database import get_db
from dealpass.models.credit_transaction import CreditTransaction
from dealpass.repositories.credit_repository import CreditRepository
from dealpass.repositories.customer_repository import CustomerRepository
from dealpass.schemas.credit import CreditBalanceResponse, CreditTransactionResponse
from dealpass.services.credit_service import CreditService

router = APIRouter()


def _ensure_customer(customer_id: UUID, db: Session, organization_id: UUID) -> None:
    if not CustomerRepository(db).get_by_id(customer_id, organization_id):
        raise HTTPException(status_code=404, detail="Customer not found")


@router.get(
    "/{customer_id}",
    response_model=CreditBalanceResponse,
    summary="Get credit balance",
    responses={404: {"description": "Customer not found"}},
)
async def get_credit_balance(
    customer_id: UUID,
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> CreditBalanceResponse:
    """A customer who never bought credits has a zero balance."""
    _ensure_customer(customer_id, db, organization_id)
    credit = CreditService(db).get_balance(customer_id)
    if credit is None:
        return CreditBalanceResponse(
            customer_id=customer_id, balance=0, credits_purchased=0, credits_used=0
        )
    return CreditBalanceResponse(
        customer_id=customer_id,
        balance=int(credit.balance),
        credits_purchased=int(credit.credits_purchased),
        credits_used=int(credit.credits_used),
        last_purchase_date=credit.last_purchase_date,  # type: ignore[arg-type]
    )


@router.get(
    "/{customer_id}/transactions",
    response_model=list[CreditTransactionResponse],
    summary="List credit transactions",
    responses={404: {"description": "Customer not found"}},
)
async def list_credit_transactions(
    customer_id: UUID,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> list[CreditTransaction]:
    _ensure_customer(customer_id, db, organization_id)
    return CreditRepository(db).get_transactions(customer_id, skip=skip, limit=limit)
