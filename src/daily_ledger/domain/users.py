"""Domain models for users and their goals."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserGoals:
    """Daily nutrition and hydration targets."""

    calories: float = 2000
    protein: float = 140
    carbs: float = 220
    fat: float = 65
    water: int = 2500


DEFAULT_GOALS = UserGoals()


@dataclass(frozen=True)
class UserProfile:
    """Represents a user and their optional body stats."""

    id: str
    name: str
    email: str
    joined_at: int
    weight_kg: float | None = None
    height_cm: float | None = None
    age: int | None = None
    gender: str | None = None
    activity_level: str | None = None
    weight_goal: str | None = None
    goals: UserGoals | None = None
