"""CRUD helpers for round aggregates.

These helpers never commit: the caller (services/round_service.py) owns the
transaction, so one public operation is one read-modify-write.
"""

from datetime import datetime
import logging
from uuid import UUID

from sqlalchemy import delete, desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hideseek.converter import DataConverter
from hideseek.domain.errors import DuplicateDrawError, VersionConflictError
from hideseek.domain.state import RoundState
from hideseek.models.schema_models import (
    DeckSchema,
    HiderStateSchema,
    PendingDrawSchema,
    QuestionSchema,
    RoomSchema,
    RoundRowsSchema,
    RoundSchema,
)
from hideseek.models.schemas import (
    Deck,
    HiderState,
    PendingDraw,
    Question,
    Room,
    Round,
)

data_converter = DataConverter()


class ReadData:
    @staticmethod
    async def read_room(room_code: str, session: AsyncSession) -> RoomSchema | None:
        stmt = select(Room).where(Room.code == room_code)
        result = await session.execute(stmt)
        result = result.scalars().first()
        if result is None:
            return None
        return RoomSchema.model_validate(result)

    @staticmethod
    async def read_latest_round_id(room_code: str, session: AsyncSession) -> UUID | None:
        """Read the id of the room's current (not superseded) round

        Args:
            room_code (str): Code players use to find the room

        Returns:
            UUID | None: round_id, None when the room has no round
        """
        stmt = (
            select(Round.round_id)
            .join(Room, Room.room_id == Round.room_id)
            .where(Room.code == room_code, Round.superseded_at.is_(None))
            .order_by(desc(Round.created_at))
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def read_round_rows(
        round_id: UUID, session: AsyncSession, for_update: bool = False
    ) -> RoundRowsSchema | None:
        """Read the round row and every row it owns

        Args:
            round_id (UUID): To identify the round
            for_update (bool): Lock the round row until the transaction ends

        Returns:
            RoundRowsSchema | None: None when the round does not exist
        """
        stmt = select(Round).where(Round.round_id == round_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        round_row = result.scalars().first()
        if round_row is None:
            return None

        deck_row = (await session.execute(select(Deck).where(Deck.round_id == round_id))).scalars().first()
        hider_row = (
            await session.execute(select(HiderState).where(HiderState.round_id == round_id))
        ).scalars().first()

        question = None
        pending_draw = None
        if round_row.latest_question_id is not None:
            question_row = await session.get(Question, round_row.latest_question_id)
            if question_row is not None:
                question = QuestionSchema.model_validate(question_row)
                pending_row = (
                    await session.execute(
                        select(PendingDraw).where(PendingDraw.question_id == question_row.question_id)
                    )
                ).scalars().first()
                if pending_row is not None:
                    pending_draw = PendingDrawSchema.model_validate(pending_row)

        return RoundRowsSchema(
            round=RoundSchema.model_validate(round_row),
            deck=DeckSchema.model_validate(deck_row),
            hider_state=HiderStateSchema.model_validate(hider_row),
            question=question,
            pending_draw=pending_draw,
        )

    @staticmethod
    async def read_round_state(
        round_id: UUID, session: AsyncSession, for_update: bool = False
    ) -> RoundState | None:
        rows = await ReadData.read_round_rows(round_id, session, for_update)
        if rows is None:
            return None
        return data_converter.convert_rows_to_roundstate(rows)


class CreateData:
    @staticmethod
    async def get_or_add_room(room_code: str, game_size: str, session: AsyncSession) -> Room:
        stmt = select(Room).where(Room.code == room_code)
        result = await session.execute(stmt)
        room = result.scalars().first()
        if room is None:
            room = Room(code=room_code, game_size=game_size)
            session.add(room)
            await session.flush()
        else:
            room.game_size = game_size
        return room

    @staticmethod
    async def supersede_rounds(room_id: UUID, session: AsyncSession) -> None:
        """Mark every current round of the room as superseded by a new one"""
        stmt = (
            update(Round)
            .where(Round.room_id == room_id, Round.superseded_at.is_(None))
            .values(superseded_at=datetime.now())
        )
        await session.execute(stmt)

    @staticmethod
    async def add_round_state(state: RoundState, session: AsyncSession) -> None:
        """Insert the rows of a brand new round (no commit)"""
        rows = data_converter.convert_roundstate_to_rows(state)
        session.add(Round(**rows.round.model_dump()))
        session.add(Deck(**rows.deck.model_dump()))
        session.add(HiderState(**rows.hider_state.model_dump()))
        await session.flush()


class UpdateData:
    @staticmethod
    async def save_round_state(state: RoundState, expected_version: int, session: AsyncSession) -> RoundState:
        """Write the round aggregate back if nobody else saved it since it was read (no commit)

        Args:
            state (RoundState): New round aggregate
            expected_version (int): Version the caller read

        Raises:
            VersionConflictError: The round row moved past expected_version
            DuplicateDrawError: A pending draw already exists for the question

        Returns:
            RoundState: The saved aggregate carrying its new version
        """
        saved = state.model_copy(update={"version": expected_version + 1})
        rows = data_converter.convert_roundstate_to_rows(saved)

        round_values = rows.round.model_dump(exclude={"round_id", "room_id", "created_at", "superseded_at"})
        stmt = (
            update(Round)
            .where(Round.round_id == state.round_id, Round.version == expected_version)
            .values(**round_values)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.rowcount != 1:
            logging.warning(f"Version conflict on round {state.round_id} (expected {expected_version})")
            raise VersionConflictError(state.round_id, expected_version)

        await session.execute(
            update(Deck)
            .where(Deck.round_id == state.round_id)
            .values(draw_pile=rows.deck.draw_pile, discard_pile=rows.deck.discard_pile)
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            update(HiderState)
            .where(HiderState.round_id == state.round_id)
            .values(hand=rows.hider_state.hand, max_hand_size=rows.hider_state.max_hand_size)
            .execution_options(synchronize_session=False)
        )

        if rows.question is not None:
            await UpdateData.upsert_question(rows.question, session)
        if rows.pending_draw is not None:
            await UpdateData.upsert_pending_draw(rows.pending_draw, session)

        await session.flush()
        return saved

    @staticmethod
    async def upsert_question(question: QuestionSchema, session: AsyncSession) -> None:
        row = await session.get(Question, question.question_id)
        if row is None:
            session.add(Question(**question.model_dump()))
            return
        row.status = question.status
        row.answer_text = question.answer_text
        row.answered_at = question.answered_at

    @staticmethod
    async def upsert_pending_draw(pending_draw: PendingDrawSchema, session: AsyncSession) -> None:
        row = await session.get(PendingDraw, pending_draw.pending_draw_id)
        if row is not None:
            row.kept_cards = pending_draw.kept_cards
            row.status = pending_draw.status
            return

        session.add(PendingDraw(**pending_draw.model_dump()))
        try:
            await session.flush()
        except IntegrityError as e:
            logging.warning(f"Duplicate pending draw for question {pending_draw.question_id}: {e}")
            raise DuplicateDrawError(pending_draw.question_id) from e


class DeleteData:
    @staticmethod
    async def delete_superseded_rounds(older_than: datetime, session: AsyncSession) -> int:
        """Delete rounds superseded before ``older_than`` together with their rows (no commit)

        Returns:
            int: Number of rounds deleted
        """
        round_ids = (
            await session.execute(
                select(Round.round_id).where(
                    Round.superseded_at.is_not(None), Round.superseded_at < older_than
                )
            )
        ).scalars().all()
        if not round_ids:
            return 0

        question_ids = select(Question.question_id).where(Question.round_id.in_(round_ids))
        await session.execute(delete(PendingDraw).where(PendingDraw.question_id.in_(question_ids)))
        await session.execute(delete(Question).where(Question.round_id.in_(round_ids)))
        await session.execute(delete(Deck).where(Deck.round_id.in_(round_ids)))
        await session.execute(delete(HiderState).where(HiderState.round_id.in_(round_ids)))
        await session.execute(delete(Round).where(Round.round_id.in_(round_ids)))
        return len(round_ids)
