import logging

import numpy as np
from pydantic import BaseModel

from hideseek.domain.cards import CardId
from hideseek.domain.errors import InsufficientCardsError


class DrawResult(BaseModel):
    drawn: list[CardId]
    remaining_draw: list[CardId]
    remaining_discard: list[CardId]


class PileManager:
    """Draw pile / discard pile pair of one round.

    The piles are mutated in place so that a caller holding the same list
    objects (the round aggregate) sees every change.
    """

    def __init__(
        self,
        draw_pile: list[CardId],
        discard_pile: list[CardId],
        rng: np.random.Generator | None = None,
    ):
        self.draw_pile = draw_pile
        self.discard_pile = discard_pile
        self.rng = rng if rng is not None else np.random.default_rng()

    @property
    def available(self) -> int:
        return len(self.draw_pile) + len(self.discard_pile)

    def shuffle(self, cards: list[CardId]) -> list[CardId]:
        """Return a uniformly random permutation of ``cards``."""
        order = self.rng.permutation(len(cards))
        return [cards[int(i)] for i in order]

    def reshuffle(self) -> None:
        """Fold a shuffled copy of the discard pile onto the end of the draw pile."""
        logging.info(f"Reshuffling {len(self.discard_pile)} discarded card(s) into the draw pile")
        self.draw_pile.extend(self.shuffle(self.discard_pile))
        self.discard_pile.clear()

    def draw(self, n: int) -> DrawResult:
        """Take exactly ``n`` cards from the front of the draw pile.

        The discard pile is reshuffled in first when the draw pile alone is short.

        Raises:
            InsufficientCardsError: fewer than ``n`` cards across both piles
        """
        if n < 0:
            raise ValueError(f"Cannot draw a negative number of cards: {n}")
        if self.available < n:
            raise InsufficientCardsError(requested=n, available=self.available)

        if len(self.draw_pile) < n and self.discard_pile:
            self.reshuffle()

        drawn = self.draw_pile[:n]
        del self.draw_pile[:n]
        return DrawResult(
            drawn=drawn,
            remaining_draw=list(self.draw_pile),
            remaining_discard=list(self.discard_pile),
        )

    def discard(self, cards: list[CardId]) -> None:
        self.discard_pile.extend(cards)
