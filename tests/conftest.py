import os

# Keep the app modules off PostgreSQL; tests build their own in-memory engines.
os.environ.setdefault("DB_BACKEND", "sqlite")

from unittest.mock import AsyncMock
from uuid import uuid4

import numpy as np
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hideseek.change_feed import ChangeFeed
from hideseek.domain.cards import CardBaseType, CardId, GameSize
from hideseek.domain.deck import build_deck
from hideseek.domain.round_machine import RoundStateMachine
from hideseek.domain.state import RoundState
from hideseek.models.schemas import Base
from hideseek.services.round_service import RoundService


def card(base_type: CardBaseType) -> CardId:
    """Return the first card of a base type in a freshly built deck."""
    return next(c for c in build_deck() if c.base_type == base_type)


def cards_of(base_type: CardBaseType) -> list[CardId]:
    return [c for c in build_deck() if c.base_type == base_type]


def stacked_round(top: list[CardId] | None = None, hand: list[CardId] | None = None) -> RoundState:
    """A full-deck round whose draw pile starts with ``top`` and whose hand holds ``hand``."""
    top = top or []
    hand = hand or []
    rest = [c for c in build_deck() if c not in top and c not in hand]
    return RoundState(
        round_id=uuid4(),
        room_id=uuid4(),
        game_size=GameSize.MEDIUM,
        draw_pile=top + rest,
        hand=list(hand),
    )


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20240611)


@pytest.fixture
def machine(rng) -> RoundStateMachine:
    return RoundStateMachine(stacked_round(), rng)


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def fake_redis() -> AsyncMock:
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def round_service(session_factory, fake_redis, rng) -> RoundService:
    return RoundService(session_factory, ChangeFeed(fake_redis), rng=rng)
