"""Food image analysis and workout generation via an LLM."""

import base64
from dataclasses import dataclass
from typing import Protocol

from daily_ledger.domain.analysis import NutritionPayload, WorkoutPlanPayload
from daily_ledger.domain.users import UserProfile
from daily_ledger.domain.workouts import WorkoutSplit

_NUMBER = {"type": "number"}
_STRING = {"type": "string"}
_STRINGS = {"type": "array", "items": _STRING}

NUTRITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foodName": _STRING,
        "weightGrams": _NUMBER,
        "calories": _NUMBER,
        "carbs": _NUMBER,
        "protein": _NUMBER,
        "fat": _NUMBER,
        "confidence": {"type": "number", "minimum": 0, "maximum": 100},
        "healthScore": {"type": "number", "minimum": 0, "maximum": 10},
        "ingredients": _STRINGS,
        "insights": _STRINGS,
    },
    "required": [
        "foodName",
        "weightGrams",
        "calories",
        "carbs",
        "protein",
        "fat",
        "confidence",
        "healthScore",
        "ingredients",
        "insights",
    ],
    "additionalProperties": False,
}

WORKOUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "focusGroup": _STRING,
        "exercises": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": _STRING,
                    "sets": {"type": "integer", "minimum": 1},
                    "reps": _STRING,
                    "rest": _STRING,
                    "notes": _STRING,
                },
                "required": ["name", "sets", "reps", "rest", "notes"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["focusGroup", "exercises"],
    "additionalProperties": False,
}

NUTRITION_PROMPT = (
    "Identify the dish in the image and estimate its nutrition for the visible "
    "portion. Return the food name, estimated weight in grams, calories, carbs, "
    "protein and fat in grams, your confidence (0-100), a health score (0-10), "
    "the main ingredients and up to three short insights."
)

WORKOUT_PROMPT = (
    "Create a practical gym workout for today.\n"
    "Profile: {level} level, goal: {goal}.\n"
    "Training split: {split}.\n"
    "Muscle focus for today: {focus_group}.\n"
    "Use 4 to 7 biomechanically efficient exercises. For each give the number "
    "of sets, a rep range, rest time suited to the goal and a short execution "
    "tip. Name the session focus in focusGroup."
)

_GOALS = {
    "lose_weight": "fat loss and definition",
    "maintain": "maintenance and health",
    "gain_muscle": "muscle hypertrophy",
}
_LEVELS = {"sedentary": "beginner", "very_active": "advanced"}


@dataclass(frozen=True)
class StructuredRequest:
    """Prompt, optional image and the JSON schema the reply must follow."""

    name: str
    prompt: str
    schema: dict[str, object]
    image_data_url: str | None = None


class AnalysisClient(Protocol):
    """Interface for structured LLM completions."""

    async def complete(
        self,
        request: StructuredRequest,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
    ) -> dict[str, object]:
        """Return the JSON object produced for a request."""


@dataclass
class AnalysisService:
    """Service that prepares LLM requests and validates the replies."""

    client: AnalysisClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(self, image_bytes: bytes) -> NutritionPayload:
        """Estimate nutrition for a food image."""
        raw = await self._complete(
            StructuredRequest(
                name="nutrition_analysis",
                prompt=NUTRITION_PROMPT,
                schema=NUTRITION_SCHEMA,
                image_data_url=to_data_url(image_bytes),
            )
        )
        return NutritionPayload.model_validate(raw)

    async def generate_workout(
        self,
        profile: UserProfile | None,
        split: WorkoutSplit | str,
        focus_group: str,
    ) -> WorkoutPlanPayload:
        """Generate a routine for a split and muscle focus.

        The profile's activity level and weight goal shape the routine; an
        unknown user gets an intermediate, general-purpose one.
        """
        prompt = WORKOUT_PROMPT.format(
            level=_training_level(profile),
            goal=_training_goal(profile),
            split=WorkoutSplit(split),
            focus_group=focus_group,
        )
        raw = await self._complete(
            StructuredRequest(
                name="workout_routine", prompt=prompt, schema=WORKOUT_SCHEMA
            )
        )
        return WorkoutPlanPayload.model_validate(raw)

    async def _complete(self, request: StructuredRequest) -> dict[str, object]:
        return await self.client.complete(
            request,
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
        )


def _training_level(profile: UserProfile | None) -> str:
    if profile is None or profile.activity_level is None:
        return "intermediate"
    return _LEVELS.get(profile.activity_level, "intermediate")


def _training_goal(profile: UserProfile | None) -> str:
    if profile is None or profile.weight_goal is None:
        return "general fitness"
    return _GOALS.get(profile.weight_goal, "general fitness")


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
