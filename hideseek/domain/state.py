"""Round aggregate: everything one round owns, versioned as a unit."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel

from hideseek.domain.cards import CardId, GameSize
from hideseek.domain.rewards import Category

DEFAULT_MAX_HAND_SIZE = 6


class RoundPhase(str, Enum):
    IDLE = "IDLE"
    QUESTION_PENDING = "QUESTION_PENDING"
    DRAW_AWAITING_PICK = "DRAW_AWAITING_PICK"


class QuestionStatus(str, Enum):
    PENDING = "PENDING"
    ANSWERED = "ANSWERED"


class PendingDrawStatus(str, Enum):
    AWAITING_PICK = "AWAITING_PICK"
    COMPLETE = "COMPLETE"


class HandLimitPolicy(str, Enum):
    WARN = "warn"  # flag and log only
    BLOCK = "block"  # refuse new questions until the hider discards


class QuestionState(BaseModel):
    question_id: UUID
    round_id: UUID
    category: Category
    question_key: str
    question_text: str
    status: QuestionStatus = QuestionStatus.PENDING
    answer_text: str | None = None
    created_at: datetime
    answered_at: datetime | None = None


class PendingDrawState(BaseModel):
    pending_draw_id: UUID
    question_id: UUID
    drawn_cards: list[CardId]
    keep_count: int
    kept_cards: list[CardId] = []
    status: PendingDrawStatus = PendingDrawStatus.AWAITING_PICK


class RoundState(BaseModel):
    round_id: UUID
    room_id: UUID
    game_size: GameSize
    version: int = 0
    phase: RoundPhase = RoundPhase.IDLE
    draw_pile: list[CardId] = []
    discard_pile: list[CardId] = []
    hand: list[CardId] = []
    max_hand_size: int = DEFAULT_MAX_HAND_SIZE
    # latest question / draw of the round; the lock is held while phase != IDLE
    question: QuestionState | None = None
    pending_draw: PendingDrawState | None = None
    chalice_questions_remaining: int = 0
    created_at: datetime | None = None
    superseded_at: datetime | None = None

    @property
    def active_question_id(self) -> UUID | None:
        if self.phase == RoundPhase.IDLE or self.question is None:
            return None
        return self.question.question_id

    @property
    def cards_in_flight(self) -> list[CardId]:
        if self.pending_draw and self.pending_draw.status == PendingDrawStatus.AWAITING_PICK:
            return list(self.pending_draw.drawn_cards)
        return []

    @property
    def hand_over_limit(self) -> bool:
        return len(self.hand) > self.max_hand_size

    def all_cards(self) -> list[CardId]:
        """Every card the round accounts for; a full deck when conserved."""
        return self.draw_pile + self.discard_pile + self.hand + self.cards_in_flight
