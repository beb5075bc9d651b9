"""Row schemas: the storage/wire form of each round entity (card ids as strings)."""

from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime


class RoomSchema(BaseModel):
    room_id: UUID
    code: str
    game_size: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoundSchema(BaseModel):
    round_id: UUID
    room_id: UUID
    game_size: str
    phase: str
    version: int
    active_question_id: UUID | None
    latest_question_id: UUID | None
    chalice_questions_remaining: int
    created_at: Optional[datetime] = None
    superseded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeckSchema(BaseModel):
    round_id: UUID
    draw_pile: list[str]
    discard_pile: list[str]

    class Config:
        from_attributes = True


class HiderStateSchema(BaseModel):
    round_id: UUID
    hand: list[str]
    max_hand_size: int

    class Config:
        from_attributes = True


class QuestionSchema(BaseModel):
    question_id: UUID
    round_id: UUID
    category: str
    question_key: str
    question_text: str
    status: str
    answer_text: str | None
    created_at: Optional[datetime] = None
    answered_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PendingDrawSchema(BaseModel):
    pending_draw_id: UUID
    question_id: UUID
    drawn_cards: list[str]
    keep_count: int
    kept_cards: list[str]
    status: str

    class Config:
        from_attributes = True


class RoundRowsSchema(BaseModel):
    """All rows that make up one round aggregate."""

    round: RoundSchema
    deck: DeckSchema
    hider_state: HiderStateSchema
    question: Optional[QuestionSchema] = None
    pending_draw: Optional[PendingDrawSchema] = None
