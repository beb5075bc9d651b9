from hideseek.domain.cards import format_cards, parse_cards, time_bonus_minutes
from hideseek.domain.state import PendingDrawState, QuestionState, RoundState
from hideseek.models.dc_models import HandModel, PilesModel, RoundSnapshotModel
from hideseek.models.schema_models import (
    DeckSchema,
    HiderStateSchema,
    PendingDrawSchema,
    QuestionSchema,
    RoundRowsSchema,
    RoundSchema,
)


class DataConverter:
    """This class is used to convert the round aggregate between its domain, row and client forms."""

    def convert_roundstate_to_rows(self, state: RoundState) -> RoundRowsSchema:
        """Split the round aggregate into the rows the store persists

        Args:
            state (RoundState): The round aggregate
        Returns:
            RoundRowsSchema: One schema per table, card ids serialized to strings
        """
        question = None
        if state.question is not None:
            question = QuestionSchema(
                question_id=state.question.question_id,
                round_id=state.round_id,
                category=state.question.category.value,
                question_key=state.question.question_key,
                question_text=state.question.question_text,
                status=state.question.status.value,
                answer_text=state.question.answer_text,
                created_at=state.question.created_at,
                answered_at=state.question.answered_at,
            )

        pending_draw = None
        if state.pending_draw is not None:
            pending_draw = PendingDrawSchema(
                pending_draw_id=state.pending_draw.pending_draw_id,
                question_id=state.pending_draw.question_id,
                drawn_cards=format_cards(state.pending_draw.drawn_cards),
                keep_count=state.pending_draw.keep_count,
                kept_cards=format_cards(state.pending_draw.kept_cards),
                status=state.pending_draw.status.value,
            )

        return RoundRowsSchema(
            round=RoundSchema(
                round_id=state.round_id,
                room_id=state.room_id,
                game_size=state.game_size.value,
                phase=state.phase.value,
                version=state.version,
                active_question_id=state.active_question_id,
                latest_question_id=state.question.question_id if state.question else None,
                chalice_questions_remaining=state.chalice_questions_remaining,
                created_at=state.created_at,
                superseded_at=state.superseded_at,
            ),
            deck=DeckSchema(
                round_id=state.round_id,
                draw_pile=format_cards(state.draw_pile),
                discard_pile=format_cards(state.discard_pile),
            ),
            hider_state=HiderStateSchema(
                round_id=state.round_id,
                hand=format_cards(state.hand),
                max_hand_size=state.max_hand_size,
            ),
            question=question,
            pending_draw=pending_draw,
        )

    def convert_rows_to_roundstate(self, rows: RoundRowsSchema) -> RoundState:
        """Rebuild the round aggregate from its stored rows

        Args:
            rows (RoundRowsSchema): Rows read from the store
        Returns:
            RoundState: The round aggregate
        """
        question = None
        if rows.question is not None:
            question = QuestionState(
                question_id=rows.question.question_id,
                round_id=rows.question.round_id,
                category=rows.question.category,
                question_key=rows.question.question_key,
                question_text=rows.question.question_text,
                status=rows.question.status,
                answer_text=rows.question.answer_text,
                created_at=rows.question.created_at,
                answered_at=rows.question.answered_at,
            )

        pending_draw = None
        if rows.pending_draw is not None:
            pending_draw = PendingDrawState(
                pending_draw_id=rows.pending_draw.pending_draw_id,
                question_id=rows.pending_draw.question_id,
                drawn_cards=parse_cards(rows.pending_draw.drawn_cards),
                keep_count=rows.pending_draw.keep_count,
                kept_cards=parse_cards(rows.pending_draw.kept_cards),
                status=rows.pending_draw.status,
            )

        return RoundState(
            round_id=rows.round.round_id,
            room_id=rows.round.room_id,
            game_size=rows.round.game_size,
            version=rows.round.version,
            phase=rows.round.phase,
            draw_pile=parse_cards(rows.deck.draw_pile),
            discard_pile=parse_cards(rows.deck.discard_pile),
            hand=parse_cards(rows.hider_state.hand),
            max_hand_size=rows.hider_state.max_hand_size,
            question=question,
            pending_draw=pending_draw,
            chalice_questions_remaining=rows.round.chalice_questions_remaining,
            created_at=rows.round.created_at,
            superseded_at=rows.round.superseded_at,
        )

    def convert_roundstate_to_piles(self, state: RoundState) -> PilesModel:
        # draw pile order is hidden information; viewers only get its size
        return PilesModel(
            draw_pile_count=len(state.draw_pile),
            discard_pile_count=len(state.discard_pile),
            discard_pile=format_cards(state.discard_pile),
        )

    def convert_roundstate_to_hand(self, state: RoundState) -> HandModel:
        return HandModel(
            hand=format_cards(state.hand),
            max_hand_size=state.max_hand_size,
            hand_over_limit=state.hand_over_limit,
            time_bonus_minutes=sum(time_bonus_minutes(card, state.game_size) for card in state.hand),
        )

    def convert_roundstate_to_snapshot(self, state: RoundState) -> RoundSnapshotModel:
        """Convert the round aggregate to the snapshot sent to clients

        Args:
            state (RoundState): The round aggregate
        Returns:
            RoundSnapshotModel: Read-only view used for initial load and after each action
        """
        rows = self.convert_roundstate_to_rows(state)
        return RoundSnapshotModel(
            round_id=state.round_id,
            room_id=state.room_id,
            game_size=state.game_size,
            version=state.version,
            phase=state.phase.value,
            active_question_id=state.active_question_id,
            overflowing_chalice_active=state.chalice_questions_remaining > 0,
            chalice_questions_remaining=state.chalice_questions_remaining,
            question=rows.question,
            pending_draw=rows.pending_draw,
            piles=self.convert_roundstate_to_piles(state),
            hand=self.convert_roundstate_to_hand(state),
        )
