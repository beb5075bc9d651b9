"""Round state machine: question -> answer -> draw -> keep, guarded by the turn lock.

Every operation runs against a deep copy of the round and only replaces
``RoundStateMachine.state`` when it succeeds, so a rejected call leaves the
round exactly as it was.
"""

import logging
from datetime import datetime
from typing import Callable
from uuid import UUID

import numpy as np
from uuid6 import uuid7

from hideseek.domain.cards import CardBaseType, CardId, GameSize
from hideseek.domain.deck import build_deck, check_deck_integrity
from hideseek.domain.errors import (
    DuplicateDrawError,
    HandLimitExceededError,
    InvalidCategoryError,
    NoPendingDrawError,
    NoPendingQuestionError,
    TurnLockedError,
    WrongKeepCountError,
)
from hideseek.domain.hand import HandEngine
from hideseek.domain.piles import PileManager
from hideseek.domain.rewards import (
    OVERFLOWING_CHALICE_QUESTIONS,
    RewardModifiers,
    draw_keep_for,
    find_question,
    parse_category,
)
from hideseek.domain.state import (
    DEFAULT_MAX_HAND_SIZE,
    HandLimitPolicy,
    PendingDrawState,
    PendingDrawStatus,
    QuestionState,
    QuestionStatus,
    RoundPhase,
    RoundState,
)

ALLOWED_TRANSITIONS = {
    (RoundPhase.IDLE, RoundPhase.QUESTION_PENDING),
    (RoundPhase.QUESTION_PENDING, RoundPhase.DRAW_AWAITING_PICK),
    (RoundPhase.DRAW_AWAITING_PICK, RoundPhase.IDLE),
}


def transition(state: RoundState, to_phase: RoundPhase) -> None:
    """The only place a round's phase changes."""
    if (state.phase, to_phase) not in ALLOWED_TRANSITIONS:
        raise RuntimeError(f"Illegal round transition {state.phase.value} -> {to_phase.value}")
    state.phase = to_phase


def start_round(
    round_id: UUID,
    room_id: UUID,
    game_size: GameSize,
    rng: np.random.Generator | None = None,
    max_hand_size: int = DEFAULT_MAX_HAND_SIZE,
    created_at: datetime | None = None,
) -> RoundState:
    """Create a round with a freshly shuffled full deck and an empty hand."""
    piles = PileManager([], [], rng)
    return RoundState(
        round_id=round_id,
        room_id=room_id,
        game_size=game_size,
        draw_pile=piles.shuffle(build_deck()),
        max_hand_size=max_hand_size,
        created_at=created_at or datetime.now(),
    )


class RoundStateMachine:
    def __init__(
        self,
        state: RoundState,
        rng: np.random.Generator | None = None,
        hand_limit_policy: HandLimitPolicy = HandLimitPolicy.WARN,
        id_factory: Callable[[], UUID] = uuid7,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.state = state
        self.rng = rng if rng is not None else np.random.default_rng()
        self.hand_limit_policy = HandLimitPolicy(hand_limit_policy)
        self.id_factory = id_factory
        self.clock = clock

    @property
    def phase(self) -> RoundPhase:
        return self.state.phase

    def _work_copy(self) -> tuple[RoundState, PileManager, HandEngine]:
        work = self.state.model_copy(deep=True)
        piles = PileManager(work.draw_pile, work.discard_pile, self.rng)
        hand = HandEngine(work.hand, piles, work.max_hand_size)
        return work, piles, hand

    def _commit(self, work: RoundState, hand: HandEngine | None = None) -> RoundState:
        if hand is not None:
            work.max_hand_size = hand.max_hand_size
        check_deck_integrity(work.all_cards())
        self.state = work
        return work

    def modifiers(self) -> RewardModifiers:
        return RewardModifiers(overflowing_chalice=self.state.chalice_questions_remaining > 0)

    # ==========================================================================
    # ==== Question cycle ======================================================
    # ==========================================================================

    def open_question(self, category, question_key: str, question_text: str | None = None) -> QuestionState:
        """Seeker action: submit a question. Fails fast while another is outstanding.

        Raises:
            TurnLockedError: a question or its draw is still unresolved
            InvalidCategoryError: unknown category, or a catalog key filed under another category
            HandLimitExceededError: hand over the limit under the "block" policy
        """
        if self.state.phase != RoundPhase.IDLE:
            raise TurnLockedError(self.state.active_question_id)

        category = parse_category(category)
        template = find_question(question_key)
        if template is not None and template.category != category:
            raise InvalidCategoryError(category.value, expected=template.category.value)
        if question_text is None:
            question_text = template.text if template is not None else question_key

        if self.hand_limit_policy == HandLimitPolicy.BLOCK and self.state.hand_over_limit:
            raise HandLimitExceededError(len(self.state.hand), self.state.max_hand_size)

        work, _, _ = self._work_copy()
        work.question = QuestionState(
            question_id=self.id_factory(),
            round_id=work.round_id,
            category=category,
            question_key=question_key,
            question_text=question_text,
            created_at=self.clock(),
        )
        work.pending_draw = None
        transition(work, RoundPhase.QUESTION_PENDING)
        self._commit(work)
        return work.question

    def answer_question(self, answer_text: str | None, question_id: UUID | None = None) -> PendingDrawState:
        """Hider action: answer the pending question and draw its reward.

        Raises:
            DuplicateDrawError: this question already produced a draw
            NoPendingQuestionError: no PENDING question (or not the one named)
            InsufficientCardsError: deck exhausted even after reshuffling
        """
        state = self.state
        if state.phase == RoundPhase.DRAW_AWAITING_PICK and state.pending_draw is not None:
            if question_id is None or question_id == state.pending_draw.question_id:
                raise DuplicateDrawError(state.pending_draw.question_id)
        if state.phase != RoundPhase.QUESTION_PENDING or state.question is None:
            raise NoPendingQuestionError(state.phase.value, question_id)
        if question_id is not None and question_id != state.question.question_id:
            raise NoPendingQuestionError(state.phase.value, question_id)

        work, piles, _ = self._work_copy()
        reward = draw_keep_for(work.question.category, self.modifiers())
        drawn = piles.draw(reward.draw).drawn
        if work.chalice_questions_remaining > 0:
            work.chalice_questions_remaining -= 1

        work.question.status = QuestionStatus.ANSWERED
        work.question.answer_text = answer_text
        work.question.answered_at = self.clock()
        work.pending_draw = PendingDrawState(
            pending_draw_id=self.id_factory(),
            question_id=work.question.question_id,
            drawn_cards=drawn,
            keep_count=reward.keep,
        )
        transition(work, RoundPhase.DRAW_AWAITING_PICK)
        self._commit(work)
        logging.info(
            f"Round {work.round_id}: {work.question.category.value} answered, "
            f"drew {len(drawn)} keep {reward.keep}"
        )
        return work.pending_draw

    def confirm_keep(self, chosen: list[CardId]) -> RoundState:
        """Hider action: keep ``keep_count`` of the drawn cards, discard the rest, release the lock.

        Raises:
            NoPendingDrawError: nothing is awaiting a pick
            WrongKeepCountError: wrong number of cards, duplicates, or cards not drawn
        """
        pending = self.state.pending_draw
        if self.state.phase != RoundPhase.DRAW_AWAITING_PICK or pending is None:
            raise NoPendingDrawError(self.state.phase.value)

        invalid = [str(card) for card in chosen if card not in pending.drawn_cards]
        invalid += [str(card) for card in set(chosen) if chosen.count(card) > 1]
        if len(chosen) != pending.keep_count or invalid:
            raise WrongKeepCountError(
                expected=pending.keep_count,
                chosen=[str(card) for card in chosen],
                invalid=invalid,
            )

        work, piles, hand = self._work_copy()
        discarded = [card for card in work.pending_draw.drawn_cards if card not in chosen]
        hand.add_kept(list(chosen))
        piles.discard(discarded)
        work.pending_draw.kept_cards = list(chosen)
        work.pending_draw.status = PendingDrawStatus.COMPLETE
        transition(work, RoundPhase.IDLE)
        return self._commit(work, hand)

    # ==========================================================================
    # ==== Hand and powerups ===================================================
    # ==========================================================================

    def play_discard_for_draw(self, powerup: CardId, discards: list[CardId]) -> list[CardId]:
        work, _, hand = self._work_copy()
        drawn = hand.play_discard_for_draw(powerup, discards)
        self._commit(work, hand)
        return drawn

    def play_expand_hand(self, powerup: CardId | None = None) -> CardId:
        work, _, hand = self._work_copy()
        drawn = hand.play_expand_hand(powerup)
        self._commit(work, hand)
        return drawn

    def discard_from_hand(self, cards: list[CardId]) -> RoundState:
        work, _, hand = self._work_copy()
        hand.discard_from_hand(cards)
        return self._commit(work, hand)

    def play_curse(self, curse: CardId) -> CardBaseType:
        work, _, hand = self._work_copy()
        base_type = hand.play_curse(curse)
        if base_type == CardBaseType.CURSE_OVERFLOWING_CHALICE:
            work.chalice_questions_remaining = OVERFLOWING_CHALICE_QUESTIONS
        self._commit(work, hand)
        return base_type

    def time_bonus_minutes(self) -> int:
        piles = PileManager(self.state.draw_pile, self.state.discard_pile, self.rng)
        return HandEngine(self.state.hand, piles, self.state.max_hand_size).time_bonus_minutes(
            self.state.game_size
        )
