import logging
from typing import Any

from arq import cron

from dealpass.core.config import settings
from dealpass.core.database import SessionLocal
from dealpass.models.shared import utc_now
from dealpass.repositories.stripe_event_repository import StripeEventRepository
from dealpass.services.coupon_ledger import get_ledger_backend, list_overdue_organization_ids
from dealpass.services.redemption_service import expire_overdue_coupons
from dealpass.tasks import redis_settings

logger = logging.getLogger(__name__)


async def expire_overdue_coupons_task(ctx: dict[str, Any]) -> int:
    """Background task: move unredeemed coupons past their expiry date to ``expired``.

    Each coupon goes through the same conditional status write as a
    redemption, so a coupon redeemed mid-sweep stays redeemed.

    Runs hourly.
    """
    db = SessionLocal()
    try:
        count = 0
        for organization_id in list_overdue_organization_ids(db, utc_now()):
            backend = get_ledger_backend(db, organization_id)
            count += expire_overdue_coupons(backend.ledger, backend.log)

        if count > 0:
            logger.info("Expired %d overdue coupons", count)
        return count
    finally:
        db.close()


async def purge_processed_stripe_events_task(ctx: dict[str, Any]) -> int:
    """Background task: forget Stripe event ids older than the retention window.

    Stripe stops retrying an event after three days, so old ids are no
    longer needed for deduplication.

    Runs daily.
    """
    db = SessionLocal()
    try:
        count = StripeEventRepository(db).delete_older_than(
            settings.PROCESSED_EVENT_RETENTION_DAYS
        )
        if count > 0:
            logger.info("Purged %d processed Stripe event ids", count)
        return count
    finally:
        db.close()


class WorkerSettings:
    functions = [
        expire_overdue_coupons_task,
        purge_processed_stripe_events_task,
    ]
    cron_jobs = [
        cron(expire_overdue_coupons_task, minute={0}),  # hourly
        cron(purge_processed_stripe_events_task, hour=3, minute=0),  # daily
    ]
    redis_settings = redis_settings
