from pydantic import BaseModel
from uuid import UUID
from typing import Optional, List

from hideseek.domain.cards import GameSize
from hideseek.domain.rewards import Category
from hideseek.models.schema_models import PendingDrawSchema, QuestionSchema


# ==============================================================================
# ==== Requests ================================================================
# ==============================================================================


class StartRoundModel(BaseModel):
    game_size: GameSize = GameSize.MEDIUM


class OpenQuestionModel(BaseModel):
    category: str
    question_key: str
    question_text: Optional[str] = None


class AnswerModel(BaseModel):
    answer_text: Optional[str] = None
    question_id: UUID  # ties the answer to one question so a late retry cannot answer the next one


class KeepModel(BaseModel):
    card_ids: List[str]


class DiscardForDrawModel(BaseModel):
    powerup_card_id: str
    discard_card_ids: List[str]


class ExpandHandModel(BaseModel):
    powerup_card_id: Optional[str] = None


class DiscardModel(BaseModel):
    card_ids: List[str]


class PlayCurseModel(BaseModel):
    curse_card_id: str


# ==============================================================================
# ==== Responses ===============================================================
# ==============================================================================


class PilesModel(BaseModel):
    draw_pile_count: int
    discard_pile_count: int
    discard_pile: List[str]


class HandModel(BaseModel):
    hand: List[str]
    max_hand_size: int
    hand_over_limit: bool
    time_bonus_minutes: int


class RoundSnapshotModel(BaseModel):
    round_id: UUID
    room_id: UUID
    game_size: GameSize
    version: int
    phase: str
    active_question_id: Optional[UUID] = None
    overflowing_chalice_active: bool
    chalice_questions_remaining: int
    question: Optional[QuestionSchema] = None
    pending_draw: Optional[PendingDrawSchema] = None
    piles: PilesModel
    hand: HandModel


class QuestionTemplateModel(BaseModel):
    category: Category
    key: str
    text: str


class ErrorModel(BaseModel):
    kind: str
    message: str

    class Config:
        extra = "allow"


class ErrorResponseModel(BaseModel):
    """Body of every 4xx/5xx answer: FastAPI's ``detail`` holding the rule error."""

    detail: ErrorModel
