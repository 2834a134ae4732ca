"""Real-time pantry change events using Redis pub/sub."""

import json
import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

import redis
import redis.asyncio as aioredis

from pantry_planner.config import get_settings

if TYPE_CHECKING:
    from redis.asyncio.client import PubSub

logger = logging.getLogger(__name__)
settings = get_settings()


class PantryEventType(StrEnum):
    """Event types for pantry updates."""

    ITEM_CREATED = "item_created"
    ITEM_UPDATED = "item_updated"
    ITEM_DELETED = "item_deleted"
    ITEMS_BULK_ADDED = "items_bulk_added"
    ITEMS_BULK_DELETED = "items_bulk_deleted"
    ITEMS_MOVED = "items_moved"
    ITEMS_CONSUMED = "items_consumed"


def pantry_channel(pantry_id: int) -> str:
    return f"pantry:{pantry_id}"


# Synchronous Redis client for use in API endpoints
_sync_redis: redis.Redis | None = None


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for publishing from API endpoints."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


def publish_pantry_event(
    pantry_id: int, event_type: PantryEventType, data: dict | None = None
) -> None:
    """Publish an event to a pantry's Redis channel.

    Called after pantry mutations. Failures are logged and never propagate,
    so a missing Redis does not fail the request that changed the data.
    """
    try:
        redis_client = get_sync_redis()
        message = {
            "type": event_type,
            "pantry_id": pantry_id,
            "timestamp": datetime.now(UTC).isoformat(),
            "data": data or {},
        }
        redis_client.publish(pantry_channel(pantry_id), json.dumps(message))
        logger.debug(f"Published {event_type} to {pantry_channel(pantry_id)}")
    except Exception as e:
        logger.error(f"Failed to publish pantry event: {e}")


class RealtimeService:
    """Per-connection subscription to pantry change events.

    Each instance owns its own pub/sub connection; `subscribe` returns a lazy
    stream of events that ends when the caller stops iterating, and `cleanup`
    releases the connection (on WebSocket disconnect or logout).
    """

    def __init__(self) -> None:
        self._redis: aioredis.Redis | None = None
        self._pubsub: PubSub | None = None

    async def _get_redis(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(settings.redis_url)
        return self._redis

    async def subscribe(self, channel: str) -> AsyncIterator[dict]:
        """Subscribe to a Redis channel and yield decoded events."""
        redis_conn = await self._get_redis()
        self._pubsub = redis_conn.pubsub()
        await self._pubsub.subscribe(channel)

        try:
            async for message in self._pubsub.listen():
                if message["type"] == "message":
                    try:
                        yield json.loads(message["data"])
                    except json.JSONDecodeError:
                        logger.warning(f"Invalid JSON in pub/sub message: {message['data']}")
        finally:
            if self._pubsub:
                await self._pubsub.unsubscribe(channel)

    def pantry_events(self, pantry_id: int) -> AsyncIterator[dict]:
        """Stream change events for one pantry."""
        return self.subscribe(pantry_channel(pantry_id))

    async def cleanup(self) -> None:
        """Clean up Redis connections."""
        if self._pubsub:
            await self._pubsub.close()
        if self._redis:
            await self._redis.close()
