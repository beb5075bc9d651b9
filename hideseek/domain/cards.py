"""Hider deck catalog: card base types, time bonus values and deck counts.

A card is identified by its base type plus a serial unique across one deck.
Outside the domain (DB rows, JSON, Redis) a card travels as
``"<BASE_TYPE>::<serial>"``, e.g. ``"TIME_RED::0001"``.
"""

from enum import Enum

from pydantic import BaseModel

from hideseek.domain.errors import InvalidCardIdError

CARD_ID_SEPARATOR = "::"
SERIAL_WIDTH = 4
DECK_SIZE = 100


class GameSize(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


class CardKind(str, Enum):
    TIME = "TIME"
    POWERUP = "POWERUP"
    CURSE = "CURSE"


class CardBaseType(str, Enum):
    # Time cards
    TIME_RED = "TIME_RED"
    TIME_ORANGE = "TIME_ORANGE"
    TIME_YELLOW = "TIME_YELLOW"
    TIME_GREEN = "TIME_GREEN"
    TIME_BLUE = "TIME_BLUE"

    # Powerups
    RANDOMIZE = "RANDOMIZE"
    VETO = "VETO"
    DUPLICATE = "DUPLICATE"
    MOVE = "MOVE"
    DISCARD_1_DRAW_2 = "DISCARD_1_DRAW_2"
    DISCARD_2_DRAW_3 = "DISCARD_2_DRAW_3"
    DRAW_1_EXPAND_HAND = "DRAW_1_EXPAND_HAND"

    # Curses
    CURSE_ZOOLOGIST = "CURSE_ZOOLOGIST"
    CURSE_UNGUIDED_TOURIST = "CURSE_UNGUIDED_TOURIST"
    CURSE_ENDLESS_TUMBLE = "CURSE_ENDLESS_TUMBLE"
    CURSE_HIDDEN_HANGMAN = "CURSE_HIDDEN_HANGMAN"
    CURSE_OVERFLOWING_CHALICE = "CURSE_OVERFLOWING_CHALICE"
    CURSE_MEDIOCRE_TRAVEL_AGENT = "CURSE_MEDIOCRE_TRAVEL_AGENT"
    CURSE_LUXURY_CAR = "CURSE_LUXURY_CAR"
    CURSE_U_TURN = "CURSE_U_TURN"
    CURSE_BRIDGE_TROLL = "CURSE_BRIDGE_TROLL"
    CURSE_WATER_WEIGHT = "CURSE_WATER_WEIGHT"
    CURSE_JAMMED_DOOR = "CURSE_JAMMED_DOOR"
    CURSE_CAIRN = "CURSE_CAIRN"
    CURSE_URBAN_EXPLORER = "CURSE_URBAN_EXPLORER"
    CURSE_IMPRESSIONABLE_CONSUMER = "CURSE_IMPRESSIONABLE_CONSUMER"
    CURSE_EGG_PARTNER = "CURSE_EGG_PARTNER"
    CURSE_DISTANT_CUISINE = "CURSE_DISTANT_CUISINE"
    CURSE_RIGHT_TURN = "CURSE_RIGHT_TURN"
    CURSE_LABYRINTH = "CURSE_LABYRINTH"
    CURSE_BIRD_GUIDE = "CURSE_BIRD_GUIDE"
    CURSE_SPOTTY_MEMORY = "CURSE_SPOTTY_MEMORY"
    CURSE_LEMON_PHYLACTERY = "CURSE_LEMON_PHYLACTERY"
    CURSE_DRAINED_BRAIN = "CURSE_DRAINED_BRAIN"
    CURSE_RANSOM_NOTE = "CURSE_RANSOM_NOTE"
    CURSE_GAMBLERS_FEET = "CURSE_GAMBLERS_FEET"


# ==============================================================================
# ==== Deck composition ========================================================
# ==============================================================================

TIME_TIERS = (
    CardBaseType.TIME_RED,
    CardBaseType.TIME_ORANGE,
    CardBaseType.TIME_YELLOW,
    CardBaseType.TIME_GREEN,
    CardBaseType.TIME_BLUE,
)

POWERUPS = (
    CardBaseType.RANDOMIZE,
    CardBaseType.VETO,
    CardBaseType.DUPLICATE,
    CardBaseType.MOVE,
    CardBaseType.DISCARD_1_DRAW_2,
    CardBaseType.DISCARD_2_DRAW_3,
    CardBaseType.DRAW_1_EXPAND_HAND,
)

CURSES = tuple(base for base in CardBaseType if base.value.startswith("CURSE_"))

# Insertion order is the serial allocation order: time tiers, powerups, curses.
DECK_COUNTS: dict[CardBaseType, int] = {
    # Time cards (55)
    CardBaseType.TIME_RED: 25,
    CardBaseType.TIME_ORANGE: 15,
    CardBaseType.TIME_YELLOW: 10,
    CardBaseType.TIME_GREEN: 3,
    CardBaseType.TIME_BLUE: 2,
    # Powerups (21)
    CardBaseType.RANDOMIZE: 4,
    CardBaseType.VETO: 4,
    CardBaseType.DUPLICATE: 2,
    CardBaseType.MOVE: 1,
    CardBaseType.DISCARD_1_DRAW_2: 4,
    CardBaseType.DISCARD_2_DRAW_3: 4,
    CardBaseType.DRAW_1_EXPAND_HAND: 2,
    # Curses (24, exactly one of each)
    **{curse: 1 for curse in CURSES},
}

TIME_BONUS_MINUTES: dict[CardBaseType, dict[GameSize, int]] = {
    CardBaseType.TIME_RED: {GameSize.SMALL: 2, GameSize.MEDIUM: 3, GameSize.LARGE: 5},
    CardBaseType.TIME_ORANGE: {GameSize.SMALL: 4, GameSize.MEDIUM: 6, GameSize.LARGE: 10},
    CardBaseType.TIME_YELLOW: {GameSize.SMALL: 6, GameSize.MEDIUM: 9, GameSize.LARGE: 15},
    CardBaseType.TIME_GREEN: {GameSize.SMALL: 8, GameSize.MEDIUM: 12, GameSize.LARGE: 20},
    CardBaseType.TIME_BLUE: {GameSize.SMALL: 12, GameSize.MEDIUM: 18, GameSize.LARGE: 30},
}

# powerup -> (cards to discard from hand, cards to draw)
DISCARD_FOR_DRAW_RULES: dict[CardBaseType, tuple[int, int]] = {
    CardBaseType.DISCARD_1_DRAW_2: (1, 2),
    CardBaseType.DISCARD_2_DRAW_3: (2, 3),
}

EXPAND_HAND_DRAW_COUNT = 1


# ==============================================================================
# ==== Card identity ===========================================================
# ==============================================================================


class CardId(BaseModel):
    """One physical card of a deck instance. Equal ids mean the same card."""

    base_type: CardBaseType
    serial: int

    class Config:
        frozen = True

    def __str__(self) -> str:
        return f"{self.base_type.value}{CARD_ID_SEPARATOR}{self.serial:0{SERIAL_WIDTH}d}"

    @property
    def kind(self) -> CardKind:
        return card_kind(self.base_type)

    @classmethod
    def parse(cls, raw: str) -> "CardId":
        """Parse the storage/wire form ``BASE::0001``.

        Raises:
            InvalidCardIdError: unknown base type or missing/non-numeric serial
        """
        if not isinstance(raw, str) or CARD_ID_SEPARATOR not in raw:
            raise InvalidCardIdError(str(raw))
        base, _, serial = raw.partition(CARD_ID_SEPARATOR)
        if not serial.isdigit():
            raise InvalidCardIdError(raw)
        try:
            base_type = CardBaseType(base)
        except ValueError:
            raise InvalidCardIdError(raw)
        return cls(base_type=base_type, serial=int(serial))


def base_type_of(card_id: str) -> str:
    """Return the base type prefix of a serialized card id (whole string if unqualified)."""
    base, separator, _ = card_id.partition(CARD_ID_SEPARATOR)
    return base if separator else card_id


def card_kind(base_type: CardBaseType) -> CardKind:
    if base_type in TIME_TIERS:
        return CardKind.TIME
    if base_type in POWERUPS:
        return CardKind.POWERUP
    return CardKind.CURSE


def time_bonus_minutes(card: CardId, game_size: GameSize) -> int:
    """Minutes a card adds to the hider's time; 0 for powerups and curses."""
    values = TIME_BONUS_MINUTES.get(card.base_type)
    if values is None:
        return 0
    return values[GameSize(game_size)]


def parse_cards(raw_ids: list[str]) -> list[CardId]:
    return [CardId.parse(raw) for raw in raw_ids]


def format_cards(cards: list[CardId]) -> list[str]:
    return [str(card) for card in cards]
