"""Models for analysis service results."""

import logging
import math

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from daily_ledger.domain.workouts import WorkoutExercise

_logger = logging.getLogger(__name__)

_MAX_CONFIDENCE = 100.0
_MAX_HEALTH_SCORE = 10.0


class NutritionPayload(BaseModel):
    """Structured nutrition estimate for a single food image.

    Numeric fields are coerced leniently: anything that does not parse as a
    number becomes 0 instead of failing validation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    food_name: str = ""
    weight_grams: float = 0.0
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    confidence: float = 0.0
    health_score: float | None = None
    ingredients: list[str] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)

    @field_validator("food_name", mode="before")
    @classmethod
    def coerce_name(cls, value: object) -> str:
        return "" if value is None else str(value)

    @field_validator(
        "weight_grams", "calories", "carbs", "protein", "fat", mode="before"
    )
    @classmethod
    def coerce_amount(cls, value: object, info: ValidationInfo) -> float:
        return max(0.0, coerce_number(value, info.field_name))

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, value: object) -> float:
        return min(max(coerce_number(value, "confidence"), 0.0), _MAX_CONFIDENCE)

    @field_validator("health_score", mode="before")
    @classmethod
    def coerce_health_score(cls, value: object) -> float | None:
        if value is None:
            return None
        score = coerce_number(value, "health_score")
        return min(max(score, 0.0), _MAX_HEALTH_SCORE)

    @field_validator("ingredients", "insights", mode="before")
    @classmethod
    def coerce_strings(cls, value: object) -> list[str]:
        if not isinstance(value, list | tuple):
            return []
        return [str(item) for item in value if item is not None]


def coerce_number(value: object, field_name: str = "value") -> float:
    """Return ``value`` as a float, falling back to 0 for malformed input."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        if not math.isfinite(value):
            return 0.0
        return float(value)
    if isinstance(value, str):
        try:
            return coerce_number(float(value.strip()), field_name)
        except ValueError:
            pass
    if value is not None:
        _logger.warning("Coercing malformed %s=%r to 0", field_name, value)
    return 0.0


class ExercisePayload(BaseModel):
    """One exercise of a generated workout."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    sets: int = 0
    reps: str = ""
    rest: str = ""
    notes: str | None = None

    @field_validator("name", "reps", "rest", mode="before")
    @classmethod
    def coerce_text(cls, value: object) -> str:
        return "" if value is None else str(value)

    @field_validator("notes", mode="before")
    @classmethod
    def coerce_notes(cls, value: object) -> str | None:
        return None if value is None or value == "" else str(value)

    @field_validator("sets", mode="before")
    @classmethod
    def coerce_sets(cls, value: object) -> int:
        return max(0, round(coerce_number(value, "sets")))


class WorkoutPlanPayload(BaseModel):
    """Workout routine generated for a split and muscle focus."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    focus_group: str = ""
    exercises: list[ExercisePayload] = Field(default_factory=list)

    @field_validator("focus_group", mode="before")
    @classmethod
    def coerce_focus_group(cls, value: object) -> str:
        return "" if value is None else str(value)

    @field_validator("exercises", mode="before")
    @classmethod
    def drop_malformed(cls, value: object) -> list[object]:
        if not isinstance(value, list | tuple):
            return []
        return [item for item in value if isinstance(item, dict | ExercisePayload)]

    def to_exercises(self) -> list[WorkoutExercise]:
        return [
            WorkoutExercise(
                name=exercise.name,
                sets=exercise.sets,
                reps=exercise.reps,
                rest=exercise.rest,
                notes=exercise.notes,
            )
            for exercise in self.exercises
        ]
