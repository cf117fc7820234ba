"""
Notification Queue
Deferred-job boundary used by the scheduling engines. The production queue is
backed by ARQ; engines receive an instance through dependency injection.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Optional

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from fastapi import Request

logger = logging.getLogger(__name__)


class NotificationQueue(ABC):
    """Interface for enqueueing notification jobs"""

    @abstractmethod
    async def enqueue(
        self, kind: str, payload: dict[str, Any], delay: Optional[timedelta] = None
    ) -> Optional[str]:
        """
        Enqueue a job.

        Args:
            kind: worker function name
            payload: job arguments
            delay: run no earlier than now + delay; None for immediate

        Returns:
            Job ID if the backend assigns one
        """

    async def close(self) -> None:
        return None


class ArqNotificationQueue(NotificationQueue):
    """NotificationQueue on top of an ARQ Redis pool, created on first use"""

    def __init__(self, redis_settings: RedisSettings, pool_timeout: float = 20.0):
        self.redis_settings = redis_settings
        self.pool_timeout = pool_timeout
        self._pool: Optional[ArqRedis] = None
        self._lock = asyncio.Lock()

    async def _get_pool(self) -> ArqRedis:
        async with self._lock:
            if self._pool is None:
                self._pool = await asyncio.wait_for(
                    create_pool(self.redis_settings), timeout=self.pool_timeout
                )
                logger.info("ARQ pool created for notification queue")
        return self._pool

    async def enqueue(
        self, kind: str, payload: dict[str, Any], delay: Optional[timedelta] = None
    ) -> Optional[str]:
        pool = await self._get_pool()
        job = await pool.enqueue_job(kind, payload, _defer_by=delay)
        if job is None:
            # ARQ returns None when a job with the same ID already exists
            logger.warning(f"Job {kind} was not enqueued (duplicate job id)")
            return None
        return job.job_id

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None


def get_notification_queue(request: Request) -> NotificationQueue:
    """Dependency: the queue created in the application lifespan"""
    return request.app.state.notification_queue
