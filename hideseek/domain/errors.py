"""Typed rule errors.

Every error carries a stable ``kind`` and the offending values as structured
detail so that a presentation layer can render a message without parsing text.
"""


class GameRuleError(Exception):
    kind = "game_rule_error"

    def __init__(self, message: str, **detail):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, **self.detail}


class DeckIntegrityError(GameRuleError):
    kind = "deck_integrity"

    def __init__(self, expected: int, actual: int, duplicates: list[str] | None = None):
        super().__init__(
            f"Hider deck must be {expected} unique cards, got {actual}",
            expected=expected,
            actual=actual,
            duplicates=duplicates or [],
        )


class TurnLockedError(GameRuleError):
    kind = "turn_locked"

    def __init__(self, active_question_id):
        super().__init__(
            "A question is already pending. Wait for the hider to answer.",
            active_question_id=str(active_question_id) if active_question_id else None,
        )


class NoPendingQuestionError(GameRuleError):
    kind = "no_pending_question"

    def __init__(self, phase: str, question_id=None):
        super().__init__(
            "No question to answer.",
            phase=phase,
            question_id=str(question_id) if question_id else None,
        )


class NoPendingDrawError(GameRuleError):
    kind = "no_pending_draw"

    def __init__(self, phase: str):
        super().__init__("No pending draw to resolve.", phase=phase)


class DuplicateDrawError(GameRuleError):
    kind = "duplicate_draw"

    def __init__(self, question_id):
        super().__init__(
            "Pending draw already exists for this question.",
            question_id=str(question_id),
        )


class WrongKeepCountError(GameRuleError):
    kind = "wrong_keep_count"

    def __init__(self, expected: int, chosen: list[str], invalid: list[str]):
        super().__init__(
            f"Select exactly {expected} distinct drawn card(s) to keep.",
            expected=expected,
            chosen=chosen,
            invalid=invalid,
        )


class InvalidCategoryError(GameRuleError):
    kind = "invalid_category"

    def __init__(self, category, expected: str | None = None):
        super().__init__(
            f"Unknown or mismatched question category: {category}",
            category=str(category),
            expected=expected,
        )


class InsufficientHandError(GameRuleError):
    kind = "insufficient_hand"

    def __init__(self, required: int, available: int):
        super().__init__(
            f"Hand needs {required} card(s) to discard besides the powerup, has {available}",
            required=required,
            available=available,
        )


class InsufficientCardsError(GameRuleError):
    kind = "insufficient_cards"

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Deck is out of cards: requested {requested}, {available} left in draw and discard piles",
            requested=requested,
            available=available,
        )


class CardNotInHandError(GameRuleError):
    kind = "card_not_in_hand"

    def __init__(self, card_ids: list[str]):
        super().__init__(f"Card(s) not available in hand: {', '.join(card_ids)}", card_ids=card_ids)


class InvalidPowerupError(GameRuleError):
    kind = "invalid_powerup"

    def __init__(self, card_id: str, expected: list[str]):
        super().__init__(
            f"{card_id} cannot be played this way",
            card_id=card_id,
            expected=expected,
        )


class WrongDiscardCountError(GameRuleError):
    kind = "wrong_discard_count"

    def __init__(self, required: int, given: int):
        super().__init__(
            f"Powerup requires exactly {required} discard(s), got {given}",
            required=required,
            given=given,
        )


class InvalidCardIdError(GameRuleError):
    kind = "invalid_card_id"

    def __init__(self, card_id: str):
        super().__init__(f"Not a hider deck card id: {card_id!r}", card_id=card_id)


class HandLimitExceededError(GameRuleError):
    kind = "hand_limit_exceeded"

    def __init__(self, hand_size: int, max_hand_size: int):
        super().__init__(
            f"Hand is over max ({hand_size}/{max_hand_size}). Discard before the next question.",
            hand_size=hand_size,
            max_hand_size=max_hand_size,
        )


class RoundNotFoundError(GameRuleError):
    kind = "round_not_found"

    def __init__(self, round_id=None, room_code: str | None = None):
        super().__init__(
            "Round not found.",
            round_id=str(round_id) if round_id else None,
            room_code=room_code,
        )


class VersionConflictError(GameRuleError):
    kind = "version_conflict"

    def __init__(self, round_id, expected_version: int):
        super().__init__(
            "Round was modified concurrently. Reload and try again.",
            round_id=str(round_id),
            expected_version=expected_version,
        )


class RoundSupersededError(GameRuleError):
    kind = "round_superseded"

    def __init__(self, round_id, superseded_at=None):
        super().__init__(
            "A newer round was started for this room. Load the latest round.",
            round_id=str(round_id),
            superseded_at=superseded_at.isoformat() if superseded_at else None,
        )
