"""DB service layer for round use cases.

- Routers should not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries: each public operation is
  one transaction that reads the round FOR UPDATE, applies one state-machine
  transition and saves it behind an optimistic version check.
- Rule errors are raised to the caller unchanged; nothing is retried here.
- The change feed is published only after the transaction commits.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable
from uuid import UUID

import numpy as np
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from uuid6 import uuid7

from hideseek.change_feed import ChangeFeed
from hideseek.crud import CreateData, DeleteData, ReadData, UpdateData
from hideseek.domain.cards import CardId, GameSize, parse_cards
from hideseek.domain.errors import RoundNotFoundError, RoundSupersededError
from hideseek.domain.round_machine import RoundStateMachine, start_round
from hideseek.domain.state import DEFAULT_MAX_HAND_SIZE, HandLimitPolicy, RoundState


class RoundService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        change_feed: ChangeFeed,
        rng: np.random.Generator | None = None,
        hand_limit_policy: HandLimitPolicy = HandLimitPolicy.WARN,
        default_max_hand_size: int = DEFAULT_MAX_HAND_SIZE,
    ):
        self.session_factory = session_factory
        self.change_feed = change_feed
        self.rng = rng if rng is not None else np.random.default_rng()
        self.hand_limit_policy = HandLimitPolicy(hand_limit_policy)
        self.default_max_hand_size = default_max_hand_size

    async def _transact(self, round_id: UUID, operation: str, apply: Callable[[RoundStateMachine], None]) -> RoundState:
        async with self.session_factory() as session:
            async with session.begin():
                before = await ReadData.read_round_state(round_id, session, for_update=True)
                if before is None:
                    raise RoundNotFoundError(round_id)
                if before.superseded_at is not None:
                    raise RoundSupersededError(round_id, before.superseded_at)
                machine = RoundStateMachine(before, self.rng, self.hand_limit_policy)
                apply(machine)
                after = await UpdateData.save_round_state(machine.state, before.version, session)

        logging.info(f"Round {round_id}: {operation} committed (version {after.version}, phase {after.phase.value})")
        await self.change_feed.publish(before, after)
        return after

    # ==========================================================================
    # ==== Round lifecycle and snapshots =======================================
    # ==========================================================================

    async def start_round(self, room_code: str, game_size: GameSize) -> RoundState:
        """Start a new round for the room, superseding its previous rounds"""
        async with self.session_factory() as session:
            async with session.begin():
                room = await CreateData.get_or_add_room(room_code, GameSize(game_size).value, session)
                await CreateData.supersede_rounds(room.room_id, session)
                state = start_round(
                    uuid7(),
                    room.room_id,
                    GameSize(game_size),
                    self.rng,
                    max_hand_size=self.default_max_hand_size,
                )
                await CreateData.add_round_state(state, session)

        logging.info(f"Room {room_code}: started round {state.round_id} ({state.game_size.value})")
        await self.change_feed.publish(None, state)
        return state

    async def read_round(self, round_id: UUID) -> RoundState:
        async with self.session_factory() as session:
            state = await ReadData.read_round_state(round_id, session)
        if state is None:
            raise RoundNotFoundError(round_id)
        return state

    async def read_latest_round(self, room_code: str) -> RoundState:
        async with self.session_factory() as session:
            round_id = await ReadData.read_latest_round_id(room_code, session)
            state = await ReadData.read_round_state(round_id, session) if round_id else None
        if state is None:
            raise RoundNotFoundError(room_code=room_code)
        return state

    async def delete_superseded_rounds(self, older_than_hours: int) -> int:
        older_than = datetime.now() - timedelta(hours=older_than_hours)
        async with self.session_factory() as session:
            async with session.begin():
                deleted = await DeleteData.delete_superseded_rounds(older_than, session)
        logging.info(f"Deleted {deleted} superseded round(s) older than {older_than_hours}h")
        return deleted

    # ==========================================================================
    # ==== Transitions =========================================================
    # ==========================================================================

    async def open_question(
        self, round_id: UUID, category: str, question_key: str, question_text: str | None = None
    ) -> RoundState:
        return await self._transact(
            round_id,
            "open_question",
            lambda machine: machine.open_question(category, question_key, question_text),
        )

    async def answer_question(
        self, round_id: UUID, answer_text: str | None, question_id: UUID | None = None
    ) -> RoundState:
        return await self._transact(
            round_id,
            "answer_question",
            lambda machine: machine.answer_question(answer_text, question_id),
        )

    async def confirm_keep(self, round_id: UUID, card_ids: list[str]) -> RoundState:
        chosen = parse_cards(card_ids)
        return await self._transact(round_id, "confirm_keep", lambda machine: machine.confirm_keep(chosen))

    async def play_discard_for_draw(
        self, round_id: UUID, powerup_card_id: str, discard_card_ids: list[str]
    ) -> RoundState:
        powerup = CardId.parse(powerup_card_id)
        discards = parse_cards(discard_card_ids)
        return await self._transact(
            round_id,
            "play_discard_for_draw",
            lambda machine: machine.play_discard_for_draw(powerup, discards),
        )

    async def play_expand_hand(self, round_id: UUID, powerup_card_id: str | None = None) -> RoundState:
        powerup = CardId.parse(powerup_card_id) if powerup_card_id else None
        return await self._transact(
            round_id, "play_expand_hand", lambda machine: machine.play_expand_hand(powerup)
        )

    async def discard_from_hand(self, round_id: UUID, card_ids: list[str]) -> RoundState:
        cards = parse_cards(card_ids)
        return await self._transact(
            round_id, "discard_from_hand", lambda machine: machine.discard_from_hand(cards)
        )

    async def play_curse(self, round_id: UUID, curse_card_id: str) -> RoundState:
        curse = CardId.parse(curse_card_id)
        return await self._transact(round_id, "play_curse", lambda machine: machine.play_curse(curse))
