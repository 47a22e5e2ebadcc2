"""Fire-and-forget notification dispatch"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set
from uuid import UUID

from pydantic import BaseModel, Field

from house_ledger.config import get_settings
from house_ledger.services.cache_service import CacheService

logger = logging.getLogger(__name__)

settings = get_settings()


class NotificationRequest(BaseModel):
    """A request to tell one user about something that happened"""

    recipient: UUID
    summary: str
    data: Dict[str, Any] = Field(default_factory=dict)


class BaseNotificationSink(ABC):
    """Where notification requests are handed off for delivery"""

    @abstractmethod
    async def send(self, request: NotificationRequest) -> bool:
        """
        Hand a request to the delivery side.

        Returns:
            True if accepted, False otherwise
        """
        pass


class RedisNotificationSink(BaseNotificationSink):
    """Pushes requests onto a Redis list drained by the push worker"""

    def __init__(self, queue: Optional[str] = None):
        self.queue = queue or settings.notification_queue

    async def send(self, request: NotificationRequest) -> bool:
        message = {
            "recipient": str(request.recipient),
            "summary": request.summary,
            "data": request.data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        client = await CacheService.get_redis_client()
        await client.lpush(self.queue, json.dumps(message, default=str))
        logger.info("Queued notification for %s on %s", request.recipient, self.queue)
        return True


class NotificationDispatcher:
    """
    Schedules notification delivery without blocking the caller.

    Delivery failures are logged and swallowed; they never reach the code
    that dispatched the request.
    """

    def __init__(self, sink: BaseNotificationSink):
        self.sink = sink
        self._pending: Set[asyncio.Task] = set()

    def dispatch(self, request: NotificationRequest) -> asyncio.Task:
        """
        Schedule delivery of a request and return immediately.

        Args:
            request: Notification to deliver

        Returns:
            The background task doing the delivery
        """
        task = asyncio.create_task(self._deliver(request))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, request: NotificationRequest) -> bool:
        try:
            accepted = await self.sink.send(request)
        except Exception:
            logger.exception("Notification to %s failed", request.recipient)
            return False

        if not accepted:
            logger.warning("Notification to %s was rejected by the sink", request.recipient)
        return accepted

    async def drain(self) -> None:
        """Wait for every outstanding delivery to finish"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Get or create the process-wide dispatcher"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher(RedisNotificationSink())
    return _dispatcher
