"""Pydantic models for HTTP request bodies."""

from pydantic import BaseModel, Field

from daily_ledger.domain.users import UserGoals, UserProfile
from daily_ledger.domain.workouts import WorkoutExercise, WorkoutSplit


class SaveRecordRequest(BaseModel):
    """Analysis payload to store on the viewed day."""

    payload: dict[str, object]
    offset: int = 0
    meal_category: str | None = None
    existing_id: str | None = None
    media_ref: str | None = None
    timestamp: int | None = None


class WaterRequest(BaseModel):
    """Change to today's water intake in millilitres."""

    delta: int


class GoalsModel(BaseModel):
    """Daily targets."""

    calories: float = 2000
    protein: float = 140
    carbs: float = 220
    fat: float = 65
    water: int = Field(default=2500, ge=0)


class ProfileRequest(BaseModel):
    """User profile update."""

    name: str
    email: str
    joined_at: int = 0
    weight_kg: float | None = None
    height_cm: float | None = None
    age: int | None = None
    gender: str | None = None
    activity_level: str | None = None
    weight_goal: str | None = None
    goals: GoalsModel | None = None

    def to_profile(self, user_id: str) -> UserProfile:
        data = self.model_dump(exclude={"goals"})
        goals = UserGoals(**self.goals.model_dump()) if self.goals else None
        return UserProfile(id=user_id, goals=goals, **data)


class ExerciseModel(BaseModel):
    """Single exercise of a workout."""

    name: str
    sets: int = Field(ge=0)
    reps: str
    rest: str
    completed: bool = False
    notes: str | None = None

    def to_exercise(self) -> WorkoutExercise:
        return WorkoutExercise(**self.model_dump())


class WorkoutRequest(BaseModel):
    """Workout to start on the viewed day; no exercises means generate one."""

    split: WorkoutSplit
    focus_group: str
    exercises: list[ExerciseModel] = Field(default_factory=list)
    offset: int = 0
