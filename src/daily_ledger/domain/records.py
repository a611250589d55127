"""Domain models for ledger records."""

from dataclasses import dataclass, field
from enum import StrEnum


class MealCategory(StrEnum):
    """Meal slot a record is filed under."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class AnalysisRecord:
    """A saved food analysis.

    ``id`` and ``owner_id`` are fixed at creation; every other field may be
    replaced by an update carrying the same id.
    """

    id: str
    owner_id: str
    timestamp: int
    meal_category: MealCategory | None
    food_name: str
    weight_grams: float
    calories: float
    carbs: float
    protein: float
    fat: float
    confidence: float
    health_score: float | None = None
    ingredients: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    media_ref: str | None = None

    @property
    def effective_category(self) -> MealCategory:
        """Category used for grouping; missing categories count as snacks."""
        return self.meal_category or MealCategory.SNACK


def parse_meal_category(value: object) -> MealCategory | None:
    """Return the category for a raw value, or None when unrecognized."""
    if isinstance(value, MealCategory):
        return value
    if isinstance(value, str):
        try:
            return MealCategory(value.strip().lower())
        except ValueError:
            return None
    return None


def meal_category_for_hour(hour: int) -> MealCategory:
    """Suggest a meal category from the local hour of day."""
    for start, end, category in _MEAL_WINDOWS:
        if start <= hour < end:
            return category
    return MealCategory.SNACK


_MEAL_WINDOWS = (
    (5, 11, MealCategory.BREAKFAST),
    (11, 15, MealCategory.LUNCH),
    (18, 24, MealCategory.DINNER),
)
