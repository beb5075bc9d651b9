from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column
from sqlalchemy.types import JSON, Integer, String, Uuid, DateTime, TEXT
from sqlalchemy.dialects.postgresql import JSONB
from uuid6 import uuid7
from datetime import datetime

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests and local runs)
CardList = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


class Room(Base):
    __tablename__ = "rooms"
    room_id = Column(Uuid, primary_key=True, default=uuid7)
    code = Column(String, unique=True, nullable=False)
    game_size = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    rounds = relationship("Round", back_populates="room", cascade="all, delete")


class Round(Base):
    __tablename__ = "rounds"
    round_id = Column(Uuid, primary_key=True, default=uuid7)
    room_id = Column(Uuid, ForeignKey("rooms.room_id"), nullable=False)
    game_size = Column(String, nullable=False)
    phase = Column(String, nullable=False, default="IDLE")
    version = Column(Integer, nullable=False, default=0)
    active_question_id = Column(Uuid, nullable=True)
    latest_question_id = Column(Uuid, nullable=True)
    chalice_questions_remaining = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now)
    superseded_at = Column(DateTime, nullable=True)

    room = relationship("Room", back_populates="rounds")
    deck = relationship("Deck", back_populates="round", cascade="all, delete", uselist=False)
    hider_state = relationship("HiderState", back_populates="round", cascade="all, delete", uselist=False)
    questions = relationship("Question", back_populates="round", cascade="all, delete")


class Deck(Base):
    __tablename__ = "decks"
    deck_id = Column(Uuid, primary_key=True, default=uuid7)
    round_id = Column(Uuid, ForeignKey("rounds.round_id"), unique=True, nullable=False)
    draw_pile = Column(CardList, nullable=False, default=list)
    discard_pile = Column(CardList, nullable=False, default=list)

    round = relationship("Round", back_populates="deck")


class HiderState(Base):
    __tablename__ = "hider_state"
    hider_state_id = Column(Uuid, primary_key=True, default=uuid7)
    round_id = Column(Uuid, ForeignKey("rounds.round_id"), unique=True, nullable=False)
    hand = Column(CardList, nullable=False, default=list)
    max_hand_size = Column(Integer, nullable=False, default=6)

    round = relationship("Round", back_populates="hider_state")


class Question(Base):
    __tablename__ = "questions"
    question_id = Column(Uuid, primary_key=True, default=uuid7)
    round_id = Column(Uuid, ForeignKey("rounds.round_id"), nullable=False)
    category = Column(String, nullable=False)
    question_key = Column(String, nullable=False)
    question_text = Column(TEXT, nullable=False)
    status = Column(String, nullable=False, default="PENDING")
    answer_text = Column(TEXT, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    answered_at = Column(DateTime, nullable=True)

    round = relationship("Round", back_populates="questions")
    pending_draw = relationship("PendingDraw", back_populates="question", cascade="all, delete", uselist=False)


class PendingDraw(Base):
    __tablename__ = "pending_draws"
    __table_args__ = (UniqueConstraint("question_id", name="uq_pending_draws_question_id"),)
    pending_draw_id = Column(Uuid, primary_key=True, default=uuid7)
    # one draw per question, enforced by the store as well as the state machine
    question_id = Column(Uuid, ForeignKey("questions.question_id"), nullable=False)
    drawn_cards = Column(CardList, nullable=False, default=list)
    keep_count = Column(Integer, nullable=False)
    kept_cards = Column(CardList, nullable=False, default=list)
    status = Column(String, nullable=False, default="AWAITING_PICK")

    question = relationship("Question", back_populates="pending_draw")
