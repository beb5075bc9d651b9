import json
import logging
from typing import AsyncGenerator
from uuid import UUID

from redis.asyncio import Redis

from hideseek.change_feed import round_channel
from hideseek.converter import DataConverter
from hideseek.services.round_service import RoundService

HEART_BEAT = 15

data_converter = DataConverter()


class RedisSubscriber:
    """Redis subscriber class to handle SSE events for one round."""

    def __init__(self, round_service: RoundService, round_id: UUID):
        """Initialize RedisSubscriber with the round service and round_id."""
        self.round_service: RoundService = round_service
        self.round_id: UUID = round_id

    async def event_generator(self, redis: Redis) -> AsyncGenerator[str, None]:
        """Event generator to handle SSE events.

        The first event is a full snapshot for hydration; every change message
        published for the round afterwards is forwarded as ``<entity>_update``.

        Args:
            redis (Redis): Redis connection object.
        """
        pubsub = redis.pubsub()
        channel = round_channel(self.round_id)
        await pubsub.subscribe(channel)
        try:
            state = await self.round_service.read_round(self.round_id)
            snapshot = data_converter.convert_roundstate_to_snapshot(state)
            yield f"event: round_snapshot\ndata: {snapshot.model_dump_json()}\n\n"

            while True:
                msg = await pubsub.get_message(ignore_subscribe_messages=True, timeout=HEART_BEAT)
                if msg is None:
                    yield ": keep-alive\n\n"
                    continue
                if msg["type"] != "message":
                    continue
                payload = msg["data"]
                entity = json.loads(payload).get("entity", "round")
                logging.debug(f"Forwarding {entity} change for round {self.round_id}")
                yield f"event: {entity}_update\ndata: {payload}\n\n"
        finally:
            logging.info("Unsubscribing from channel")
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
