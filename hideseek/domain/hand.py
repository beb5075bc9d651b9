"""The hider's hand and the powerup transactions played from it."""

import logging

from hideseek.domain.cards import (
    DISCARD_FOR_DRAW_RULES,
    EXPAND_HAND_DRAW_COUNT,
    CardBaseType,
    CardId,
    CardKind,
    GameSize,
    time_bonus_minutes,
)
from hideseek.domain.errors import (
    CardNotInHandError,
    InsufficientCardsError,
    InsufficientHandError,
    InvalidPowerupError,
    WrongDiscardCountError,
)
from hideseek.domain.piles import PileManager
from hideseek.domain.state import DEFAULT_MAX_HAND_SIZE


class HandEngine:
    def __init__(self, hand: list[CardId], piles: PileManager, max_hand_size: int = DEFAULT_MAX_HAND_SIZE):
        self.hand = hand
        self.piles = piles
        self.max_hand_size = max_hand_size

    @property
    def over_limit(self) -> bool:
        return len(self.hand) > self.max_hand_size

    def _warn_if_over_limit(self) -> bool:
        if self.over_limit:
            logging.warning(f"Hand is over max ({len(self.hand)}/{self.max_hand_size}); hider must discard")
        return self.over_limit

    def _require_in_hand(self, cards: list[CardId]) -> None:
        """Check every card (counted with multiplicity) is held."""
        remaining = list(self.hand)
        missing = []
        for card in cards:
            if card in remaining:
                remaining.remove(card)
            else:
                missing.append(str(card))
        if missing:
            raise CardNotInHandError(missing)

    def _remove(self, cards: list[CardId]) -> None:
        for card in cards:
            self.hand.remove(card)

    def add_kept(self, cards: list[CardId]) -> bool:
        """Append kept cards. Never truncates; returns True when the hand is now over the limit."""
        self.hand.extend(cards)
        return self._warn_if_over_limit()

    def discard_from_hand(self, cards: list[CardId]) -> None:
        self._require_in_hand(cards)
        self._remove(cards)
        self.piles.discard(cards)

    def play_discard_for_draw(self, powerup: CardId, discards: list[CardId]) -> list[CardId]:
        """Play a "discard N, draw M" powerup. All drawn cards go straight to the hand.

        Raises:
            InvalidPowerupError: the card is not a discard-for-draw powerup
            CardNotInHandError: powerup or a discard choice is not held
            InsufficientHandError: too few other cards in hand to pay the discard
            WrongDiscardCountError: wrong number of discard choices
            InsufficientCardsError: not enough cards left to draw
        """
        rule = DISCARD_FOR_DRAW_RULES.get(powerup.base_type)
        if rule is None:
            raise InvalidPowerupError(
                str(powerup), expected=[base.value for base in DISCARD_FOR_DRAW_RULES]
            )
        required, draw_count = rule

        self._require_in_hand([powerup])
        others = list(self.hand)
        others.remove(powerup)
        if len(others) < required:
            raise InsufficientHandError(required=required, available=len(others))
        if len(discards) != required:
            raise WrongDiscardCountError(required=required, given=len(discards))
        # the powerup pays for itself, never for its discard cost
        repeated = [str(card) for card in discards if card == powerup or discards.count(card) > 1]
        if repeated:
            raise CardNotInHandError(repeated)
        self._require_in_hand([powerup, *discards])

        # Discarded cards may be reshuffled straight back into this draw.
        available = self.piles.available + 1 + len(discards)
        if available < draw_count:
            raise InsufficientCardsError(requested=draw_count, available=available)

        self._remove([powerup, *discards])
        self.piles.discard([powerup, *discards])
        drawn = self.piles.draw(draw_count).drawn
        self.hand.extend(drawn)
        self._warn_if_over_limit()
        return drawn

    def play_expand_hand(self, powerup: CardId | None = None) -> CardId:
        """Play "draw 1, expand hand": discard the powerup, draw one card, raise the limit by one."""
        if powerup is None:
            powerup = next(
                (card for card in self.hand if card.base_type == CardBaseType.DRAW_1_EXPAND_HAND),
                None,
            )
            if powerup is None:
                raise CardNotInHandError([CardBaseType.DRAW_1_EXPAND_HAND.value])
        if powerup.base_type != CardBaseType.DRAW_1_EXPAND_HAND:
            raise InvalidPowerupError(str(powerup), expected=[CardBaseType.DRAW_1_EXPAND_HAND.value])
        self._require_in_hand([powerup])

        available = self.piles.available + 1
        if available < EXPAND_HAND_DRAW_COUNT:
            raise InsufficientCardsError(requested=EXPAND_HAND_DRAW_COUNT, available=available)

        self._remove([powerup])
        self.piles.discard([powerup])
        drawn = self.piles.draw(EXPAND_HAND_DRAW_COUNT).drawn
        self.hand.extend(drawn)
        self.max_hand_size += 1
        return drawn[0]

    def play_curse(self, curse: CardId) -> CardBaseType:
        """Move a curse card from the hand to the discard pile and return its type."""
        if curse.kind != CardKind.CURSE:
            raise InvalidPowerupError(str(curse), expected=["CURSE_*"])
        self.discard_from_hand([curse])
        return curse.base_type

    def time_bonus_minutes(self, game_size: GameSize) -> int:
        return sum(time_bonus_minutes(card, game_size) for card in self.hand)
