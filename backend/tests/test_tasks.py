"""Tests for enqueueing background tasks."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from dealpass.tasks import (
    enqueue_expire_overdue_coupons,
    enqueue_purge_processed_events,
    enqueue_task,
    get_redis_pool,
)


class TestTasks:
    @pytest.mark.asyncio
    async def test_get_redis_pool(self):
        mock_pool = MagicMock()

        with patch("dealpass.tasks.create_pool", new_callable=AsyncMock) as mock_create:
            mock_create.return_value = mock_pool
            result = await get_redis_pool()

        assert result == mock_pool
        mock_create.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_task_closes_pool(self):
        mock_job = MagicMock()
        mock_pool = MagicMock()
        mock_pool.enqueue_job = AsyncMock(return_value=mock_job)
        mock_pool.close = AsyncMock()

        with patch("dealpass.tasks.get_redis_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = mock_pool
            result = await enqueue_task("my_task", "arg1", kwarg1="value1")

        assert result == mock_job
        mock_pool.enqueue_job.assert_called_once_with("my_task", "arg1", kwarg1="value1")
        mock_pool.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_task_closes_pool_on_error(self):
        mock_pool = MagicMock()
        mock_pool.enqueue_job = AsyncMock(side_effect=Exception("Redis error"))
        mock_pool.close = AsyncMock()

        with patch("dealpass.tasks.get_redis_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = mock_pool
            with pytest.raises(Exception, match="Redis error"):
                await enqueue_task("failing_task")

        mock_pool.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_expiry_sweep(self):
        with patch("dealpass.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            await enqueue_expire_overdue_coupons()
        mock_enqueue.assert_called_once_with("expire_overdue_coupons_task")

    @pytest.mark.asyncio
    async def test_enqueue_purge(self):
        with patch("dealpass.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            await enqueue_purge_processed_events()
        mock_enqueue.assert_called_once_with("purge_processed_stripe_events_task")
