import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from redis.asyncio import Redis

from hideseek.change_feed import ChangeFeed
from hideseek.config import default_max_hand_size, hand_limit_policy, redis_host, redis_port
from hideseek.converter import DataConverter
from hideseek.db import Session
from hideseek.domain.errors import (
    DeckIntegrityError,
    DuplicateDrawError,
    GameRuleError,
    InsufficientCardsError,
    NoPendingDrawError,
    NoPendingQuestionError,
    RoundNotFoundError,
    RoundSupersededError,
    TurnLockedError,
    VersionConflictError,
)
from hideseek.domain.rewards import QUESTIONS
from hideseek.models.dc_models import (
    AnswerModel,
    DiscardForDrawModel,
    DiscardModel,
    ErrorResponseModel,
    ExpandHandModel,
    HandModel,
    KeepModel,
    OpenQuestionModel,
    PilesModel,
    PlayCurseModel,
    QuestionTemplateModel,
    RoundSnapshotModel,
    StartRoundModel,
)
from hideseek.models.schema_models import PendingDrawSchema, QuestionSchema
from hideseek.redis_subscriber import RedisSubscriber
from hideseek.services.round_service import RoundService

redis = Redis(host=redis_host, port=redis_port, decode_responses=True, health_check_interval=30)

round_router = APIRouter(
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponseModel, "description": "Round or room not found"},
        status.HTTP_409_CONFLICT: {"model": ErrorResponseModel, "description": "Turn lock, phase or version conflict"},
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponseModel, "description": "Move breaks a game rule"},
    }
)
data_converter = DataConverter()
round_service = RoundService(
    Session,
    ChangeFeed(redis),
    hand_limit_policy=hand_limit_policy,
    default_max_hand_size=default_max_hand_size,
)

CONFLICT_ERRORS = (
    TurnLockedError,
    NoPendingQuestionError,
    NoPendingDrawError,
    InsufficientCardsError,
    VersionConflictError,
    RoundSupersededError,
)


def get_round_service() -> RoundService:
    return round_service


def get_redis() -> Redis:
    return redis


def raise_http_error(error: GameRuleError):
    """Translate a rule error into an HTTP error whose detail is the structured error"""
    if isinstance(error, RoundNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, CONFLICT_ERRORS):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(error, DeckIntegrityError):
        logging.error(f"Deck integrity violated: {error.to_dict()}")
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    raise HTTPException(status_code=status_code, detail=error.to_dict())


class RoomAPI:
    @staticmethod
    @round_router.post("/rooms/{room_code}/rounds", response_model=RoundSnapshotModel)
    async def start_round(
        room_code: str,
        request: StartRoundModel,
        service: RoundService = Depends(get_round_service),
    ) -> RoundSnapshotModel:
        """Start a new round for the room (the previous round is superseded)

        Args:
            room_code (str): Code players use to find the room
            request (StartRoundModel): game_size selects the time bonus values

        Returns:
            RoundSnapshotModel: Snapshot of the fresh round
        """
        try:
            state = await service.start_round(room_code, request.game_size)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)

    @staticmethod
    @round_router.get("/rooms/{room_code}/rounds/latest", response_model=RoundSnapshotModel)
    async def get_latest_round(
        room_code: str, service: RoundService = Depends(get_round_service)
    ) -> RoundSnapshotModel:
        try:
            state = await service.read_latest_round(room_code)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)


class SnapshotAPI:
    @staticmethod
    @round_router.get("/rounds/{round_id}", response_model=RoundSnapshotModel)
    async def get_round(round_id: UUID, service: RoundService = Depends(get_round_service)):
        try:
            state = await service.read_round(round_id)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)

    @staticmethod
    @round_router.get("/rounds/{round_id}/question", response_model=QuestionSchema | None)
    async def get_question(round_id: UUID, service: RoundService = Depends(get_round_service)):
        try:
            state = await service.read_round(round_id)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_rows(state).question

    @staticmethod
    @round_router.get("/rounds/{round_id}/pending-draw", response_model=PendingDrawSchema | None)
    async def get_pending_draw(round_id: UUID, service: RoundService = Depends(get_round_service)):
        try:
            state = await service.read_round(round_id)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_rows(state).pending_draw

    @staticmethod
    @round_router.get("/rounds/{round_id}/piles", response_model=PilesModel)
    async def get_piles(round_id: UUID, service: RoundService = Depends(get_round_service)):
        try:
            state = await service.read_round(round_id)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_piles(state)

    @staticmethod
    @round_router.get("/rounds/{round_id}/hand", response_model=HandModel)
    async def get_hand(round_id: UUID, service: RoundService = Depends(get_round_service)):
        try:
            state = await service.read_round(round_id)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_hand(state)

    @staticmethod
    @round_router.get("/rounds/{round_id}/stream")
    async def stream_round(
        round_id: UUID,
        service: RoundService = Depends(get_round_service),
        redis: Redis = Depends(get_redis),
    ):
        # unknown rounds must fail before the stream sends its headers
        try:
            await service.read_round(round_id)
        except GameRuleError as e:
            raise_http_error(e)
        redis_subscriber = RedisSubscriber(service, round_id)

        return StreamingResponse(
            redis_subscriber.event_generator(redis),
            media_type="text/event-stream; charset=utf-8",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    @staticmethod
    @round_router.get("/questions", response_model=List[QuestionTemplateModel])
    async def list_questions():
        return [QuestionTemplateModel(**question.model_dump()) for question in QUESTIONS]


class SeekerAPI:
    @staticmethod
    @round_router.post("/rounds/{round_id}/questions", response_model=RoundSnapshotModel)
    async def open_question(
        round_id: UUID,
        request: OpenQuestionModel,
        service: RoundService = Depends(get_round_service),
    ) -> RoundSnapshotModel:
        """Send a question to the hider. Rejected with 409 while another one is unresolved

        Args:
            round_id (UUID): To identify the round
            request (OpenQuestionModel): category, question_key and optional question_text
        """
        try:
            state = await service.open_question(
                round_id, request.category, request.question_key, request.question_text
            )
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)


class HiderAPI:
    @staticmethod
    @round_router.post("/rounds/{round_id}/answer", response_model=RoundSnapshotModel)
    async def answer_question(
        round_id: UUID,
        request: AnswerModel,
        service: RoundService = Depends(get_round_service),
    ) -> RoundSnapshotModel:
        """Answer the pending question and draw its reward

        A repeated submission for a question that already drew is a no-op and
        returns the current snapshot.
        """
        try:
            state = await service.answer_question(round_id, request.answer_text, request.question_id)
        except DuplicateDrawError as e:
            logging.info(f"Round {round_id}: duplicate answer ignored ({e.detail})")
            state = await service.read_round(round_id)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)

    @staticmethod
    @round_router.post("/rounds/{round_id}/keep", response_model=RoundSnapshotModel)
    async def confirm_keep(
        round_id: UUID,
        request: KeepModel,
        service: RoundService = Depends(get_round_service),
    ) -> RoundSnapshotModel:
        try:
            state = await service.confirm_keep(round_id, request.card_ids)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)

    @staticmethod
    @round_router.post("/rounds/{round_id}/powerups/discard-for-draw", response_model=RoundSnapshotModel)
    async def play_discard_for_draw(
        round_id: UUID,
        request: DiscardForDrawModel,
        service: RoundService = Depends(get_round_service),
    ) -> RoundSnapshotModel:
        try:
            state = await service.play_discard_for_draw(
                round_id, request.powerup_card_id, request.discard_card_ids
            )
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)

    @staticmethod
    @round_router.post("/rounds/{round_id}/powerups/expand-hand", response_model=RoundSnapshotModel)
    async def play_expand_hand(
        round_id: UUID,
        request: ExpandHandModel,
        service: RoundService = Depends(get_round_service),
    ) -> RoundSnapshotModel:
        try:
            state = await service.play_expand_hand(round_id, request.powerup_card_id)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)

    @staticmethod
    @round_router.post("/rounds/{round_id}/discard", response_model=RoundSnapshotModel)
    async def discard_from_hand(
        round_id: UUID,
        request: DiscardModel,
        service: RoundService = Depends(get_round_service),
    ) -> RoundSnapshotModel:
        try:
            state = await service.discard_from_hand(round_id, request.card_ids)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)

    @staticmethod
    @round_router.post("/rounds/{round_id}/curses", response_model=RoundSnapshotModel)
    async def play_curse(
        round_id: UUID,
        request: PlayCurseModel,
        service: RoundService = Depends(get_round_service),
    ) -> RoundSnapshotModel:
        try:
            state = await service.play_curse(round_id, request.curse_card_id)
        except GameRuleError as e:
            raise_http_error(e)
        return data_converter.convert_roundstate_to_snapshot(state)
