import json

import redis.asyncio as redis
from rendezvous.core.config import settings
from rendezvous.core.logger import get_logger

logger = get_logger("notifications")

class RedisClient:
    def __init__(self, url: str | None = None, channel: str | None = None):
        self.redis = redis.from_url(url or settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        self.channel = channel or settings.NOTIFICATION_CHANNEL

    async def publish_event(self, event: str, payload: dict) -> None:
        message = json.dumps({"event": event, **payload}, default=str)
        await self.redis.publish(self.channel, message)

    async def close(self):
        await self.redis.aclose()


class Notifier:
    """
    Fire-and-forget dispatch of appointment events.

    A failed publish is logged and dropped; it never fails the operation
    that triggered it.
    """

    def __init__(self, client: RedisClient | None = None, enabled: bool | None = None):
        self.enabled = settings.NOTIFICATIONS_ENABLED if enabled is None else enabled
        self._client = client

    @property
    def client(self) -> RedisClient:
        if self._client is None:
            self._client = RedisClient()
        return self._client

    async def notify(self, event: str, payload: dict) -> bool:
        if not self.enabled:
            return False
        try:
            await self.client.publish_event(event, payload)
        except Exception as exc:
            logger.warning(f"Notification '{event}' not dispatched: {exc}")
            return False
        return True

    async def close(self):
        if self._client is not None:
            await self._client.close()


notifier = Notifier()
