"""Redis change feed: one message per entity row a committed transition changed.

Publishing is fire-and-forget: the transition is already committed, so a
publish failure is logged and viewers catch up from the next snapshot.
"""

import logging
from typing import Any
from uuid import UUID

from pydantic import BaseModel
from redis.asyncio import Redis
from redis.exceptions import RedisError

from hideseek.converter import DataConverter
from hideseek.domain.state import RoundState
from hideseek.models.schema_models import RoundRowsSchema

data_converter = DataConverter()

# entity name -> attribute of RoundRowsSchema and its id field
ENTITIES = {
    "rounds": ("round", "round_id"),
    "decks": ("deck", "round_id"),
    "hider_state": ("hider_state", "round_id"),
    "questions": ("question", "question_id"),
    "pending_draws": ("pending_draw", "pending_draw_id"),
}


class ChangeEventModel(BaseModel):
    entity: str
    entity_id: UUID
    round_id: UUID
    version: int
    fields: dict[str, Any]


def round_channel(round_id) -> str:
    return f"round:{round_id}"


def collect_changes(before: RoundState | None, after: RoundState) -> list[ChangeEventModel]:
    """Compare two versions of a round and describe every row that differs

    Args:
        before (RoundState | None): Aggregate before the transition, None for a new round
        after (RoundState): Aggregate after the transition

    Returns:
        list[ChangeEventModel]: Changed entities with their full new field values
    """
    before_rows: RoundRowsSchema | None = (
        data_converter.convert_roundstate_to_rows(before) if before is not None else None
    )
    after_rows = data_converter.convert_roundstate_to_rows(after)

    events = []
    for entity, (attribute, id_field) in ENTITIES.items():
        new_row = getattr(after_rows, attribute)
        if new_row is None:
            continue
        new_fields = new_row.model_dump(mode="json")
        if before_rows is not None:
            old_row = getattr(before_rows, attribute)
            old_fields = old_row.model_dump(mode="json") if old_row is not None else None
            # the version always moves; only report rounds when something else did
            if entity == "rounds" and old_fields is not None:
                old_fields = {**old_fields, "version": new_fields["version"]}
            if old_fields == new_fields:
                continue
        events.append(
            ChangeEventModel(
                entity=entity,
                entity_id=getattr(new_row, id_field),
                round_id=after.round_id,
                version=after.version,
                fields=new_fields,
            )
        )
    return events


class ChangeFeed:
    def __init__(self, redis: Redis):
        self.redis = redis

    async def publish(self, before: RoundState | None, after: RoundState) -> list[ChangeEventModel]:
        events = collect_changes(before, after)
        channel = round_channel(after.round_id)
        for event in events:
            try:
                await self.redis.publish(channel, event.model_dump_json())
            except (RedisError, OSError) as e:
                logging.error(f"Failed to publish {event.entity} change for round {after.round_id}: {e}")
        return events
