"""Tests for deck construction."""

import pytest

from hideseek.domain.cards import DECK_COUNTS, CardBaseType, CardId
from hideseek.domain.deck import (
    build_deck,
    check_deck_integrity,
    count_by_base_type,
    make_instances,
)
from hideseek.domain.errors import DeckIntegrityError


class TestBuildDeck:
    def test_exactly_100_unique_cards(self) -> None:
        deck = build_deck()

        assert len(deck) == 100
        assert len(set(deck)) == 100
        assert len({str(card) for card in deck}) == 100

    def test_counts_by_base_type(self) -> None:
        counts = count_by_base_type(build_deck())

        expected = {
            CardBaseType.TIME_RED: 25,
            CardBaseType.TIME_ORANGE: 15,
            CardBaseType.TIME_YELLOW: 10,
            CardBaseType.TIME_GREEN: 3,
            CardBaseType.TIME_BLUE: 2,
            CardBaseType.RANDOMIZE: 4,
            CardBaseType.VETO: 4,
            CardBaseType.DUPLICATE: 2,
            CardBaseType.MOVE: 1,
            CardBaseType.DISCARD_1_DRAW_2: 4,
            CardBaseType.DISCARD_2_DRAW_3: 4,
            CardBaseType.DRAW_1_EXPAND_HAND: 2,
        }
        for base_type, count in expected.items():
            assert counts[base_type] == count
        curses = [b for b in CardBaseType if b.value.startswith("CURSE_")]
        assert len(curses) == 24
        assert all(counts[curse] == 1 for curse in curses)

    def test_serials_are_one_contiguous_range_in_catalog_order(self) -> None:
        deck = build_deck()

        assert [card.serial for card in deck] == list(range(1, 101))
        assert str(deck[0]) == "TIME_RED::0001"
        assert str(deck[55]) == "RANDOMIZE::0056"
        assert str(deck[-1]) == "CURSE_GAMBLERS_FEET::0100"

    def test_deterministic(self) -> None:
        assert build_deck() == build_deck()

    def test_bad_catalog_fails_integrity_check(self) -> None:
        counts = {**DECK_COUNTS, CardBaseType.VETO: 5}

        with pytest.raises(DeckIntegrityError) as exc_info:
            build_deck(counts)

        assert exc_info.value.detail["expected"] == 100
        assert exc_info.value.detail["actual"] == 101


class TestIntegrityCheck:
    def test_duplicate_ids_are_reported(self) -> None:
        deck = build_deck()
        deck[-1] = deck[0]

        with pytest.raises(DeckIntegrityError) as exc_info:
            check_deck_integrity(deck)

        assert exc_info.value.detail["duplicates"] == ["TIME_RED::0001"]

    def test_make_instances_returns_next_serial(self) -> None:
        cards, next_serial = make_instances(CardBaseType.MOVE, 2, 10)

        assert cards == [
            CardId(base_type=CardBaseType.MOVE, serial=10),
            CardId(base_type=CardBaseType.MOVE, serial=11),
        ]
        assert next_serial == 12
