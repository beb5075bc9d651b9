"""Tests for the card catalog and card identity."""

import pytest

from hideseek.domain.cards import (
    CURSES,
    DECK_COUNTS,
    DECK_SIZE,
    POWERUPS,
    TIME_TIERS,
    CardBaseType,
    CardId,
    CardKind,
    GameSize,
    base_type_of,
    format_cards,
    parse_cards,
    time_bonus_minutes,
)
from hideseek.domain.errors import InvalidCardIdError


class TestCatalog:
    def test_counts_sum_to_deck_size(self) -> None:
        assert sum(DECK_COUNTS.values()) == DECK_SIZE == 100

    def test_composition_by_kind(self) -> None:
        assert sum(DECK_COUNTS[t] for t in TIME_TIERS) == 55
        assert sum(DECK_COUNTS[p] for p in POWERUPS) == 21
        assert len(CURSES) == 24
        assert all(DECK_COUNTS[c] == 1 for c in CURSES)

    def test_count_order_is_time_then_powerups_then_curses(self) -> None:
        order = list(DECK_COUNTS)
        assert order[:5] == list(TIME_TIERS)
        assert order[5:12] == list(POWERUPS)
        assert order[12:] == list(CURSES)

    def test_time_bonus_minutes(self) -> None:
        red = CardId(base_type=CardBaseType.TIME_RED, serial=1)
        blue = CardId(base_type=CardBaseType.TIME_BLUE, serial=55)
        veto = CardId(base_type=CardBaseType.VETO, serial=60)

        assert time_bonus_minutes(red, GameSize.SMALL) == 2
        assert time_bonus_minutes(red, GameSize.LARGE) == 5
        assert time_bonus_minutes(blue, GameSize.MEDIUM) == 18
        assert time_bonus_minutes(veto, GameSize.LARGE) == 0


class TestCardId:
    def test_str_pads_serial(self) -> None:
        assert str(CardId(base_type=CardBaseType.TIME_RED, serial=7)) == "TIME_RED::0007"

    def test_parse_round_trips_through_string(self) -> None:
        card = CardId.parse("CURSE_OVERFLOWING_CHALICE::0081")

        assert card.base_type == CardBaseType.CURSE_OVERFLOWING_CHALICE
        assert card.serial == 81
        assert card.kind == CardKind.CURSE

    def test_identity_is_by_value(self) -> None:
        a = CardId.parse("VETO::0060")
        b = CardId(base_type=CardBaseType.VETO, serial=60)

        assert a == b
        assert len({a, b}) == 1

    def test_cards_are_immutable(self) -> None:
        card = CardId.parse("VETO::0060")
        with pytest.raises(Exception):
            card.serial = 61

    @pytest.mark.parametrize("raw", ["RADAR_A", "NOT_A_CARD::0001", "TIME_RED::", "TIME_RED::abc", ""])
    def test_parse_rejects_malformed_ids(self, raw: str) -> None:
        with pytest.raises(InvalidCardIdError) as exc_info:
            CardId.parse(raw)

        assert exc_info.value.to_dict()["kind"] == "invalid_card_id"
        assert exc_info.value.detail["card_id"] == raw

    def test_base_type_of(self) -> None:
        assert base_type_of("DISCARD_1_DRAW_2::0070") == "DISCARD_1_DRAW_2"
        assert base_type_of("TIME_RED") == "TIME_RED"

    def test_format_and_parse_lists(self) -> None:
        raw = ["TIME_RED::0001", "MOVE::0066"]
        assert format_cards(parse_cards(raw)) == raw
