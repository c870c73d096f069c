"""
Live change channel over Redis pub/sub.

One channel per collection ("{CHANGE_FEED_PREFIX}:{collection}") carrying
JSON-encoded ChangeEvents published by whatever writes to the remote store.
Delivery is fire-and-forget: a subscriber that is disconnected misses the
events published meanwhile, and the only recovery is a fresh bulk load.
"""

import asyncio
from contextlib import suppress
from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError

from slotsync.core.config import get_settings
from slotsync.core.logging import get_logger
from slotsync.infrastructure.redis_client import get_redis
from slotsync.schemas.event import ChangeEvent, ChannelStatus
from slotsync.services.interfaces.remote import EventHandler, StatusHandler, Unsubscribe

logger = get_logger(__name__)


async def _noop() -> None:
    return None


class RedisChangeFeed:
    def __init__(self, client: Optional[redis.Redis] = None, prefix: Optional[str] = None):
        self._client = client
        self.prefix = prefix or get_settings().CHANGE_FEED_PREFIX

    def channel_name(self, collection: str) -> str:
        return f"{self.prefix}:{collection}"

    async def _get_client(self) -> Optional[redis.Redis]:
        if self._client is None:
            self._client = await get_redis()
        return self._client

    async def publish(self, collection: str, event: ChangeEvent) -> int:
        """Publish an event; returns the number of receivers."""
        client = await self._get_client()
        if client is None:
            return 0
        return await client.publish(self.channel_name(collection), event.model_dump_json())

    async def subscribe(
        self,
        collection: str,
        on_event: EventHandler,
        on_status: Optional[StatusHandler] = None,
    ) -> Unsubscribe:
        def report(status: ChannelStatus) -> None:
            if on_status is not None:
                on_status(status)

        channel = self.channel_name(collection)
        client = await self._get_client()
        if client is None:
            logger.warning("change_feed_unavailable", channel=channel)
            report(ChannelStatus.ERRORED)
            return _noop

        pubsub = client.pubsub()
        try:
            await pubsub.subscribe(channel)
        except Exception as e:
            logger.error("change_feed_subscribe_failed", channel=channel, error=str(e))
            report(ChannelStatus.ERRORED)
            await pubsub.aclose()
            return _noop

        report(ChannelStatus.SUBSCRIBED)
        logger.info("change_feed_subscribed", channel=channel)
        task = asyncio.create_task(self._listen(pubsub, channel, on_event, report))

        async def unsubscribe() -> None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
            try:
                await pubsub.unsubscribe(channel)
            finally:
                await pubsub.aclose()
            logger.info("change_feed_unsubscribed", channel=channel)

        return unsubscribe

    async def _listen(self, pubsub, channel: str, on_event: EventHandler, report) -> None:
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    event = ChangeEvent.model_validate_json(message["data"])
                except ValidationError as e:
                    logger.warning("change_event_malformed", channel=channel, error=str(e))
                    continue
                on_event(event)
            report(ChannelStatus.CLOSED)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("change_feed_errored", channel=channel, error=str(e))
            report(ChannelStatus.ERRORED)
