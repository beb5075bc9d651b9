"""Question categories, the draw/keep reward table and the question catalog."""

from enum import Enum

from pydantic import BaseModel, Field

from hideseek.domain.errors import InvalidCategoryError


class Category(str, Enum):
    MATCHING = "MATCHING"
    MEASURING = "MEASURING"
    RADAR = "RADAR"
    THERMO = "THERMO"
    PHOTO = "PHOTO"
    TENTACLE = "TENTACLE"


class DrawKeep(BaseModel):
    draw: int
    keep: int

    class Config:
        frozen = True


class RewardModifiers(BaseModel):
    overflowing_chalice: bool = Field(default=False, alias="overflowingChalice")

    class Config:
        extra = "forbid"
        populate_by_name = True


BASE_DRAW_KEEP: dict[Category, DrawKeep] = {
    Category.MATCHING: DrawKeep(draw=3, keep=1),
    Category.MEASURING: DrawKeep(draw=3, keep=1),
    Category.RADAR: DrawKeep(draw=2, keep=1),
    Category.THERMO: DrawKeep(draw=2, keep=1),
    Category.PHOTO: DrawKeep(draw=1, keep=1),
    Category.TENTACLE: DrawKeep(draw=4, keep=2),
}

# Replaces the base table entirely while the curse is active.
OVERFLOWING_CHALICE_DRAW_KEEP: dict[Category, DrawKeep] = {
    Category.MATCHING: DrawKeep(draw=4, keep=1),
    Category.MEASURING: DrawKeep(draw=4, keep=1),
    Category.THERMO: DrawKeep(draw=3, keep=1),
    Category.RADAR: DrawKeep(draw=3, keep=1),
    Category.PHOTO: DrawKeep(draw=2, keep=1),
    Category.TENTACLE: DrawKeep(draw=5, keep=2),
}

# Number of answered questions an Overflowing Chalice stays active for.
OVERFLOWING_CHALICE_QUESTIONS = 3


def parse_category(category) -> Category:
    try:
        return Category(category)
    except ValueError:
        raise InvalidCategoryError(category)


def draw_keep_for(category, modifiers: RewardModifiers | dict | None = None) -> DrawKeep:
    """Return how many cards the hider draws and keeps for an answered question.

    Args:
        category (Category | str): Question category
        modifiers (RewardModifiers | dict | None): Active curse modifiers

    Raises:
        InvalidCategoryError: category is not one of the six categories
        ValidationError: a modifiers dict names an unknown modifier
    """
    if isinstance(modifiers, dict):
        modifiers = RewardModifiers.model_validate(modifiers)
    modifiers = modifiers or RewardModifiers()

    table = OVERFLOWING_CHALICE_DRAW_KEEP if modifiers.overflowing_chalice else BASE_DRAW_KEEP
    return table[parse_category(category)]


# ==============================================================================
# ==== Question catalog ========================================================
# ==============================================================================


class QuestionTemplate(BaseModel):
    category: Category
    key: str
    text: str


QUESTIONS: list[QuestionTemplate] = [
    QuestionTemplate(category=Category.RADAR, key="radar.500m", text="Are you within 500 m of me?"),
    QuestionTemplate(category=Category.RADAR, key="radar.1km", text="Are you within 1 km of me?"),
    QuestionTemplate(
        category=Category.MATCHING,
        key="matching.commercial_airport",
        text="Is your nearest Commercial Airport the same as my Commercial Airport?",
    ),
]


def find_question(key: str) -> QuestionTemplate | None:
    for question in QUESTIONS:
        if question.key == key:
            return question
    return None


def questions_for(category) -> list[QuestionTemplate]:
    category = parse_category(category)
    return [question for question in QUESTIONS if question.category == category]
