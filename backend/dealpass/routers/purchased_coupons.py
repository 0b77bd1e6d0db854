from dataclasses import asdict
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from dealpass.models.purchased_coupon import CouponStatus
from dealpass.models.shared import utc_now
from dealpass.routers.redemptions import get_coupon_backend
from dealpass.schemas.purchased_coupon import PurchasedCouponResponse
from dealpass.services.coupon_ledger import CouponRecord, LedgerBackend
from dealpass.services.qr_service import render_qr_png

router = APIRouter()


def coupon_response(record: CouponRecord, now: datetime) -> PurchasedCouponResponse:
    """Serialize a record with lazy expiry applied to its status."""
    fields = asdict(record)
    fields["status"] = record.effective_status(now).value
    return PurchasedCouponResponse(**fields)


@router.get(
    "/",
    response_model=list[PurchasedCouponResponse],
    summary="List purchased coupons",
)
async def list_purchased_coupons(
    response: Response,
    customer_id: UUID | None = Query(default=None),
    status: CouponStatus | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    backend: LedgerBackend = Depends(get_coupon_backend),
) -> list[PurchasedCouponResponse]:
    """List coupons, newest purchase first.

    The ``status`` filter matches the status as displayed, so an overdue
    unredeemed coupon is listed under ``expired``.
    """
    now = utc_now()
    coupons = [
        coupon_response(record, now)
        for record in backend.ledger.list_records(customer_id=customer_id)
    ]
    if status:
        coupons = [c for c in coupons if c.status == status.value]
    response.headers["X-Total-Count"] = str(len(coupons))
    return coupons[skip : skip + limit]


def _get_record(code: str, backend: LedgerBackend) -> CouponRecord:
    record = backend.ledger.get_by_code(code)
    if record is None:
        raise HTTPException(status_code=404, detail="Purchased coupon not found")
    return record


@router.get(
    "/{code}",
    response_model=PurchasedCouponResponse,
    summary="Get purchased coupon",
    responses={404: {"description": "Purchased coupon not found"}},
)
async def get_purchased_coupon(
    code: str,
    backend: LedgerBackend = Depends(get_coupon_backend),
) -> PurchasedCouponResponse:
    return coupon_response(_get_record(code, backend), utc_now())


@router.get(
    "/{code}/qr",
    summary="Get the coupon's QR code",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "PNG QR code"},
        404: {"description": "Purchased coupon not found"},
    },
)
async def get_purchased_coupon_qr(
    code: str,
    backend: LedgerBackend = Depends(get_coupon_backend),
) -> Response:
    record = _get_record(code, backend)
    return Response(content=render_qr_png(record.code), media_type="image/png")
