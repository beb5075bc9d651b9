"""Tests for the round state machine and its turn lock."""

from collections import Counter
from uuid import uuid4

import numpy as np
import pytest

from conftest import card, cards_of, stacked_round
from hideseek.domain.cards import CardBaseType, GameSize
from hideseek.domain.deck import build_deck, check_deck_integrity
from hideseek.domain.errors import (
    CardNotInHandError,
    DuplicateDrawError,
    HandLimitExceededError,
    InsufficientCardsError,
    InvalidCategoryError,
    NoPendingDrawError,
    NoPendingQuestionError,
    TurnLockedError,
    WrongKeepCountError,
)
from hideseek.domain.rewards import Category
from hideseek.domain.round_machine import RoundStateMachine, start_round, transition
from hideseek.domain.state import (
    HandLimitPolicy,
    PendingDrawStatus,
    QuestionStatus,
    RoundPhase,
    RoundState,
)

REDS = cards_of(CardBaseType.TIME_RED)
CHALICE = card(CardBaseType.CURSE_OVERFLOWING_CHALICE)


class TestStartRound:
    def test_fresh_round(self, rng) -> None:
        state = start_round(uuid4(), uuid4(), GameSize.SMALL, rng)

        assert state.phase == RoundPhase.IDLE
        assert state.version == 0
        assert state.hand == []
        assert state.discard_pile == []
        assert Counter(state.draw_pile) == Counter(build_deck())
        assert state.draw_pile != build_deck()
        assert state.active_question_id is None

    def test_seeded_rng_is_reproducible(self) -> None:
        a = start_round(uuid4(), uuid4(), GameSize.SMALL, np.random.default_rng(7))
        b = start_round(uuid4(), uuid4(), GameSize.SMALL, np.random.default_rng(7))

        assert a.draw_pile == b.draw_pile


class TestTransition:
    def test_illegal_edge(self) -> None:
        state = stacked_round()

        with pytest.raises(RuntimeError):
            transition(state, RoundPhase.DRAW_AWAITING_PICK)

        assert state.phase == RoundPhase.IDLE


class TestQuestionCycle:
    def test_radar_round_trip(self, rng) -> None:
        """Open, answer, draw two, keep one, then the next question is accepted."""
        machine = RoundStateMachine(stacked_round(top=REDS[:2]), rng)

        question = machine.open_question("RADAR", "radar.500m")
        assert question.question_text == "Are you within 500 m of me?"
        assert machine.state.active_question_id == question.question_id

        pending = machine.answer_question("No")
        assert pending.drawn_cards == REDS[:2]
        assert pending.keep_count == 1
        assert machine.phase == RoundPhase.DRAW_AWAITING_PICK
        assert machine.state.question.status == QuestionStatus.ANSWERED
        assert machine.state.question.answer_text == "No"

        state = machine.confirm_keep([REDS[0]])
        assert state.hand == [REDS[0]]
        assert state.discard_pile == [REDS[1]]
        assert state.phase == RoundPhase.IDLE
        assert state.pending_draw.status == PendingDrawStatus.COMPLETE
        assert state.pending_draw.kept_cards == [REDS[0]]
        assert state.active_question_id is None
        check_deck_integrity(state.all_cards())

        follow_up = machine.open_question(Category.MATCHING, "matching.commercial_airport")
        assert follow_up.question_id != question.question_id
        assert machine.state.pending_draw is None

    def test_tentacle_keeps_two(self, rng) -> None:
        machine = RoundStateMachine(stacked_round(top=REDS[:4]), rng)
        machine.open_question("TENTACLE", "tentacle.museum", "Which museum are you closest to?")
        machine.answer_question("The Louvre")

        state = machine.confirm_keep([REDS[3], REDS[1]])

        assert state.hand == [REDS[3], REDS[1]]
        assert state.discard_pile == [REDS[0], REDS[2]]

    def test_unknown_key_uses_key_as_text(self, machine) -> None:
        question = machine.open_question("THERMO", "thermo.1km")

        assert question.question_text == "thermo.1km"

    def test_cards_in_flight_are_counted(self, machine) -> None:
        machine.open_question("MATCHING", "matching.commercial_airport")
        machine.answer_question("Yes")

        assert len(machine.state.cards_in_flight) == 3
        assert len(machine.state.draw_pile) == 97
        check_deck_integrity(machine.state.all_cards())


class TestTurnLock:
    def test_second_question_is_rejected(self, machine) -> None:
        first = machine.open_question("RADAR", "radar.1km")

        with pytest.raises(TurnLockedError) as exc_info:
            machine.open_question("PHOTO", "photo.tree")

        assert exc_info.value.detail["active_question_id"] == str(first.question_id)
        assert machine.state.question.question_id == first.question_id

    def test_lock_is_held_until_keep(self, machine) -> None:
        machine.open_question("RADAR", "radar.1km")
        machine.answer_question("Yes")

        with pytest.raises(TurnLockedError):
            machine.open_question("RADAR", "radar.500m")

    def test_unknown_category(self, machine) -> None:
        with pytest.raises(InvalidCategoryError):
            machine.open_question("HOTTER_COLDER", "x")

        assert machine.phase == RoundPhase.IDLE

    def test_catalog_key_under_wrong_category(self, machine) -> None:
        with pytest.raises(InvalidCategoryError) as exc_info:
            machine.open_question("PHOTO", "radar.500m")

        assert exc_info.value.detail["expected"] == "RADAR"
        assert machine.phase == RoundPhase.IDLE


class TestAnswerAndKeepErrors:
    def test_answer_without_question(self, machine) -> None:
        with pytest.raises(NoPendingQuestionError):
            machine.answer_question("Yes")

    def test_answer_twice_is_a_duplicate_draw(self, machine) -> None:
        question = machine.open_question("RADAR", "radar.1km")
        machine.answer_question("Yes")
        before = machine.state.model_copy(deep=True)

        with pytest.raises(DuplicateDrawError):
            machine.answer_question("Yes")
        with pytest.raises(DuplicateDrawError):
            machine.answer_question("Yes", question.question_id)

        assert machine.state == before

    def test_answer_for_another_question(self, machine) -> None:
        machine.open_question("RADAR", "radar.1km")

        with pytest.raises(NoPendingQuestionError):
            machine.answer_question("Yes", uuid4())

        assert machine.phase == RoundPhase.QUESTION_PENDING

    def test_keep_without_draw(self, machine) -> None:
        with pytest.raises(NoPendingDrawError):
            machine.confirm_keep([REDS[0]])

    @pytest.mark.parametrize("pick", ["too_many", "not_drawn", "repeated", "none"])
    def test_bad_keep_leaves_state_unchanged(self, rng, pick: str) -> None:
        machine = RoundStateMachine(stacked_round(top=REDS[:2]), rng)
        machine.open_question("RADAR", "radar.1km")
        machine.answer_question("Yes")
        before = machine.state.model_copy(deep=True)
        chosen = {
            "too_many": REDS[:2],
            "not_drawn": [REDS[5]],
            "repeated": [REDS[0], REDS[0]],
            "none": [],
        }[pick]

        with pytest.raises(WrongKeepCountError) as exc_info:
            machine.confirm_keep(chosen)

        assert exc_info.value.detail["expected"] == 1
        assert machine.state == before
        assert machine.phase == RoundPhase.DRAW_AWAITING_PICK

    def test_insufficient_cards_keeps_question_pending(self, rng) -> None:
        deck = build_deck()
        state = RoundState(
            round_id=uuid4(),
            room_id=uuid4(),
            game_size=GameSize.MEDIUM,
            draw_pile=deck[:1],
            hand=deck[1:],
        )
        machine = RoundStateMachine(state, rng)
        machine.open_question("RADAR", "radar.500m")

        with pytest.raises(InsufficientCardsError) as exc_info:
            machine.answer_question("Yes")

        assert exc_info.value.detail == {"requested": 2, "available": 1}
        assert machine.phase == RoundPhase.QUESTION_PENDING
        assert machine.state.draw_pile == deck[:1]
        assert machine.state.question.status == QuestionStatus.PENDING

        # discarding from the hand refills the piles and the same question can be answered
        machine.discard_from_hand(deck[1:3])
        pending = machine.answer_question("Yes")
        assert len(pending.drawn_cards) == 2


class TestHandLimit:
    def test_warn_policy_flags_only(self, rng) -> None:
        machine = RoundStateMachine(stacked_round(hand=REDS[:7]), rng)

        assert machine.state.hand_over_limit is True
        machine.open_question("RADAR", "radar.500m")

    def test_block_policy_refuses_questions(self, rng) -> None:
        machine = RoundStateMachine(
            stacked_round(hand=REDS[:7]), rng, hand_limit_policy=HandLimitPolicy.BLOCK
        )

        with pytest.raises(HandLimitExceededError) as exc_info:
            machine.open_question("RADAR", "radar.500m")

        assert exc_info.value.detail == {"hand_size": 7, "max_hand_size": 6}
        machine.discard_from_hand([REDS[0]])
        machine.open_question("RADAR", "radar.500m")
        assert machine.phase == RoundPhase.QUESTION_PENDING

    def test_expand_hand_raises_the_limit(self, rng) -> None:
        expand = card(CardBaseType.DRAW_1_EXPAND_HAND)
        machine = RoundStateMachine(stacked_round(hand=[expand, *REDS[:6]]), rng)

        machine.play_expand_hand(expand)

        assert machine.state.max_hand_size == 7
        assert len(machine.state.hand) == 7
        assert machine.state.hand_over_limit is False

    def test_failed_powerup_changes_nothing(self, machine) -> None:
        before = machine.state.model_copy(deep=True)

        with pytest.raises(CardNotInHandError):
            machine.play_expand_hand()

        assert machine.state == before


class TestOverflowingChalice:
    def test_chalice_boosts_the_next_three_draws(self, rng) -> None:
        machine = RoundStateMachine(stacked_round(hand=[CHALICE]), rng)

        assert machine.play_curse(CHALICE) == CardBaseType.CURSE_OVERFLOWING_CHALICE
        assert machine.state.chalice_questions_remaining == 3
        assert machine.state.discard_pile == [CHALICE]

        draws = []
        for _ in range(4):
            machine.open_question("RADAR", "radar.1km")
            pending = machine.answer_question("No")
            draws.append(len(pending.drawn_cards))
            machine.confirm_keep(pending.drawn_cards[:1])

        assert draws == [3, 3, 3, 2]
        assert machine.state.chalice_questions_remaining == 0
        assert machine.modifiers().overflowing_chalice is False


class TestConservation:
    def test_deck_is_conserved_over_many_rounds(self, rng) -> None:
        machine = RoundStateMachine(start_round(uuid4(), uuid4(), GameSize.LARGE, rng), rng)
        categories = list(Category)

        for turn in range(60):
            category = categories[turn % len(categories)]
            machine.open_question(category, f"{category.value.lower()}.{turn}")
            pending = machine.answer_question("ok")
            machine.confirm_keep(pending.drawn_cards[: pending.keep_count])
            if machine.state.hand_over_limit:
                machine.discard_from_hand(machine.state.hand[:2])
            check_deck_integrity(machine.state.all_cards())

        assert machine.phase == RoundPhase.IDLE
        assert Counter(machine.state.all_cards()) == Counter(build_deck())
