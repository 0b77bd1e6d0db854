from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from arq.jobs import Job

from dealpass.core.config import settings

# Redis connection settings
redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)


async def get_redis_pool() -> ArqRedis:
    """Get or create Redis pool for arq"""
    return await create_pool(redis_settings)


async def enqueue_task(task_name: str, *args: Any, **kwargs: Any) -> Job:
    """Enqueue a task on the arq worker by function name."""
    pool = await get_redis_pool()
    try:
        job = await pool.enqueue_job(task_name, *args, **kwargs)
        return job  # type: ignore[return-value]
    finally:
        await pool.close()


async def enqueue_expire_overdue_coupons() -> Job:
    """Run the coupon expiry sweep now instead of waiting for the hourly cron."""
    return await enqueue_task("expire_overdue_coupons_task")


async def enqueue_purge_processed_events() -> Job:
    return await enqueue_task("purge_processed_stripe_events_task")
