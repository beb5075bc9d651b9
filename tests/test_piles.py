"""Tests for draw/discard pile handling."""

from collections import Counter

import pytest

from hideseek.domain.deck import build_deck
from hideseek.domain.errors import InsufficientCardsError
from hideseek.domain.piles import PileManager


@pytest.fixture
def deck():
    return build_deck()


class TestShuffle:
    def test_shuffle_is_a_permutation(self, deck, rng) -> None:
        shuffled = PileManager([], [], rng).shuffle(deck)

        assert Counter(shuffled) == Counter(deck)
        assert shuffled != deck

    def test_shuffle_does_not_modify_input(self, deck, rng) -> None:
        original = list(deck)
        PileManager([], [], rng).shuffle(deck)

        assert deck == original


class TestDraw:
    def test_draw_takes_from_the_front(self, deck, rng) -> None:
        piles = PileManager(deck[:10], [], rng)

        result = piles.draw(3)

        assert result.drawn == deck[:3]
        assert piles.draw_pile == deck[3:10]
        assert result.remaining_draw == deck[3:10]
        assert result.remaining_discard == []

    def test_no_reshuffle_when_draw_pile_suffices(self, deck, rng) -> None:
        piles = PileManager(deck[:5], deck[5:8], rng)

        piles.draw(5)

        assert piles.draw_pile == []
        assert piles.discard_pile == deck[5:8]

    def test_reshuffle_before_short_draw(self, deck, rng) -> None:
        draw_pile = deck[:2]
        discard_pile = deck[2:7]
        piles = PileManager(list(draw_pile), list(discard_pile), rng)

        result = piles.draw(4)

        assert len(result.drawn) == 4
        assert result.drawn[:2] == draw_pile
        assert piles.discard_pile == []
        assert result.remaining_discard == []
        assert Counter(result.drawn + piles.draw_pile) == Counter(draw_pile + discard_pile)
        assert len(piles.draw_pile) == 3

    def test_draw_zero(self, deck, rng) -> None:
        piles = PileManager(deck[:1], [], rng)

        assert piles.draw(0).drawn == []
        assert piles.draw_pile == deck[:1]

    def test_negative_draw_rejected(self, rng) -> None:
        with pytest.raises(ValueError):
            PileManager([], [], rng).draw(-1)

    def test_insufficient_cards_leaves_piles_untouched(self, deck, rng) -> None:
        piles = PileManager(deck[:1], deck[1:3], rng)

        with pytest.raises(InsufficientCardsError) as exc_info:
            piles.draw(4)

        assert exc_info.value.detail == {"requested": 4, "available": 3}
        assert piles.draw_pile == deck[:1]
        assert piles.discard_pile == deck[1:3]

    def test_piles_are_mutated_in_place(self, deck, rng) -> None:
        draw_pile = deck[:3]
        discard_pile = []
        piles = PileManager(draw_pile, discard_pile, rng)

        piles.draw(1)
        piles.discard(deck[50:52])

        assert draw_pile == deck[1:3]
        assert discard_pile == deck[50:52]
