"""Domain models for workout sessions."""

from dataclasses import dataclass, field
from enum import StrEnum


class WorkoutSplit(StrEnum):
    """Training split a session was generated for."""

    FULL_BODY = "FullBody"
    UPPER_LOWER = "UpperLower"
    ABC = "ABC"
    ABCD = "ABCD"
    ABCDE = "ABCDE"


@dataclass(frozen=True)
class WorkoutExercise:
    """Single exercise of a session."""

    name: str
    sets: int
    reps: str
    rest: str
    completed: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class WorkoutSession:
    """A generated workout stored alongside the food ledger."""

    id: str
    owner_id: str
    timestamp: int
    split: WorkoutSplit
    focus_group: str
    exercises: list[WorkoutExercise] = field(default_factory=list)
    completed: bool = False
