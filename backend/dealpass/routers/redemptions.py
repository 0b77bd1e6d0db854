"""Coupon scan and redemption endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from dealpass.core.auth import get_current_organization
from dealpass.core.database import get_db
from dealpass.schemas.redemption import (
    DealDetails,
    RedemptionErrorResponse,
    RedemptionSuccessResponse,
    RedemptionTransactionResponse,
    ScanRequest,
    ValidationResponse,
)
from dealpass.services.coupon_ledger import LedgerBackend, LedgerUnavailableError, get_ledger_backend
from dealpass.services.redemption_service import RedemptionOutcome, RedemptionService

router = APIRouter()


def get_coupon_backend(
    db: Session = Depends(get_db),
    organization_id: UUID = Depends(get_current_organization),
) -> LedgerBackend:
    return get_ledger_backend(db, organization_id)


@router.post(
    "/scan",
    response_model=RedemptionSuccessResponse | RedemptionErrorResponse,
    summary="Scan and redeem a coupon code",
    responses={503: {"description": "Coupon store unavailable", "model": RedemptionErrorResponse}},
)
async def scan_code(
    data: ScanRequest,
    response: Response,
    backend: LedgerBackend = Depends(get_coupon_backend),
) -> dict[str, Any]:
    """Validate a scanned code and redeem it if it is still valid.

    Rejections (already redeemed, expired, unknown) are regular 200 responses
    with ``type: "error"``.
    """
    result = RedemptionService(backend.ledger, backend.log).scan(data.code, data.customer_name)
    if result.outcome == RedemptionOutcome.STORE_UNAVAILABLE:
        response.status_code = 503
    return result.to_payload()


@router.get(
    "/validate/{code}",
    response_model=ValidationResponse,
    summary="Classify a coupon code without redeeming it",
)
async def validate_code(
    code: str,
    backend: LedgerBackend = Depends(get_coupon_backend),
) -> ValidationResponse:
    validation = RedemptionService(backend.ledger, backend.log).validate(code)
    record = validation.record
    details = None
    if record is not None:
        details = DealDetails(
            id=record.id,
            title=record.deal_title,
            discount_value=record.discount_value,
            coupon_code=record.code,
            customer_name=record.customer_name,
            expiry_date=record.expiry_date,
            redemption_date=record.redemption_date,
        )
    return ValidationResponse(
        code=validation.code,
        classification=validation.classification.value,
        dealDetails=details,
    )


@router.get(
    "/transactions",
    response_model=list[RedemptionTransactionResponse],
    summary="List recent redemption attempts",
    responses={503: {"description": "Coupon store unavailable"}},
)
async def list_transactions(
    limit: int = Query(default=50, ge=1, le=500),
    backend: LedgerBackend = Depends(get_coupon_backend),
) -> list[RedemptionTransactionResponse]:
    """Most recent attempts first."""
    try:
        entries = RedemptionService(backend.ledger, backend.log).history(limit)
    except LedgerUnavailableError:
        raise HTTPException(status_code=503, detail="Coupon store unavailable") from None
    return [
        RedemptionTransactionResponse(
            id=entry.id,
            code=entry.code,
            deal_title=entry.deal_title,
            discount_display=entry.discount_display,
            customer_name=entry.customer_name,
            outcome=entry.outcome.value,
            timestamp=entry.timestamp,
        )
        for entry in entries
    ]
