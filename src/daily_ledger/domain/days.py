"""Domain models for calendar days and the daily counter."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from zoneinfo import ZoneInfo

from daily_ledger.domain.calendar import shift_day_key, today_key
from daily_ledger.domain.records import AnalysisRecord, MealCategory
from daily_ledger.domain.users import UserGoals


@dataclass(frozen=True)
class LedgerContext:
    """Who is looking at the ledger and which day they are looking at."""

    owner_id: str
    viewing_offset: int = 0

    def viewing_day(self, now: datetime, tz: ZoneInfo) -> str:
        """Return the day key displayed for this context at ``now``."""
        return shift_day_key(today_key(now, tz), self.viewing_offset)

    def shifted(self, delta_days: int) -> "LedgerContext":
        """Return a context viewing ``delta_days`` further along."""
        return replace(self, viewing_offset=self.viewing_offset + delta_days)


@dataclass(frozen=True)
class DayStatus:
    """Marks a calendar day as finished for an owner."""

    owner_id: str
    day_key: str
    finished: bool
    set_at: datetime


@dataclass(frozen=True)
class DailyCounterState:
    """Stored water counter; only meaningful while ``as_of_day`` is today."""

    owner_id: str
    value: int
    as_of_day: str

    def effective_value(self, today: str) -> int:
        return self.value if self.as_of_day == today else 0


@dataclass(frozen=True)
class DayView:
    """Records of one owner's calendar day grouped by meal, with totals."""

    owner_id: str
    day_key: str
    goals: UserGoals
    grouped_meals: dict[MealCategory, list[AnalysisRecord]]
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    remaining: float

    @property
    def records(self) -> list[AnalysisRecord]:
        return [record for meals in self.grouped_meals.values() for record in meals]

    def calories_for(self, category: MealCategory) -> float:
        """Return the calorie sum of one meal group."""
        return sum(record.calories for record in self.grouped_meals[category])


@dataclass(frozen=True)
class DaySnapshot:
    """What the presentation layer shows for the viewed day."""

    context: LedgerContext
    day_key: str
    finished: bool
    view: DayView


@dataclass(frozen=True)
class HistoryDay:
    """A day of history with its records, newest first."""

    day_key: str
    records: list[AnalysisRecord] = field(default_factory=list)


@dataclass(frozen=True)
class WaterStatus:
    """Today's water intake against the goal."""

    owner_id: str
    day_key: str
    value: int
    goal: int

    @property
    def percent(self) -> float:
        if self.goal <= 0:
            return 100.0
        return min(100.0, self.value / self.goal * 100)
