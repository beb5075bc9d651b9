"""Deck construction.

The factory is deterministic; shuffling is the caller's job (see piles.py)
so catalog correctness can be checked without randomness.
"""

from collections import Counter

from hideseek.domain.cards import DECK_COUNTS, DECK_SIZE, CardBaseType, CardId
from hideseek.domain.errors import DeckIntegrityError


def make_instances(base_type: CardBaseType, count: int, start: int) -> tuple[list[CardId], int]:
    """Create ``count`` cards of one base type with contiguous serials.

    Returns:
        tuple[list[CardId], int]: The cards and the next free serial
    """
    cards = [CardId(base_type=base_type, serial=start + offset) for offset in range(count)]
    return cards, start + count


def build_deck(counts: dict[CardBaseType, int] = DECK_COUNTS) -> list[CardId]:
    """Build the full hider deck in catalog order, serials starting at 1.

    Raises:
        DeckIntegrityError: the result is not exactly DECK_SIZE unique cards
    """
    serial = 1
    deck: list[CardId] = []
    for base_type, count in counts.items():
        cards, serial = make_instances(base_type, count, serial)
        deck.extend(cards)

    check_deck_integrity(deck)
    return deck


def check_deck_integrity(cards: list[CardId]) -> None:
    duplicates = [str(card) for card, seen in Counter(cards).items() if seen > 1]
    if len(cards) != DECK_SIZE or duplicates:
        raise DeckIntegrityError(expected=DECK_SIZE, actual=len(cards), duplicates=duplicates)


def count_by_base_type(cards: list[CardId]) -> dict[CardBaseType, int]:
    return dict(Counter(card.base_type for card in cards))
