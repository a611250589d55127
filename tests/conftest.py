"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TypeVar

import pytest

from daily_ledger.config import Settings
from daily_ledger.containers import AppContainer
from daily_ledger.domain.analysis import NutritionPayload
from daily_ledger.domain.calendar import to_epoch_ms
from daily_ledger.domain.days import DailyCounterState, DayStatus
from daily_ledger.domain.errors import LedgerError
from daily_ledger.domain.records import AnalysisRecord, MealCategory
from daily_ledger.domain.users import UserProfile
from daily_ledger.services.analysis import (
    AnalysisClient,
    AnalysisService,
    StructuredRequest,
)
from daily_ledger.services.days import DayStateService, DayStatusRepository
from daily_ledger.services.ledger import LedgerService, RecordStore
from daily_ledger.services.users import UserRepository, UserService
from daily_ledger.services.water import CounterRepository, WaterService
from daily_ledger.services.workouts import WorkoutService

T = TypeVar("T")

NOW = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)


@dataclass
class FakeClock:
    """Clock that only moves when told to."""

    now: datetime = NOW

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class InMemoryRecordStore(RecordStore[T]):
    """In-memory record store for tests."""

    records: dict[str, T] = field(default_factory=dict)
    error: LedgerError | None = None
    put_calls: int = 0

    async def put(self, record: T) -> None:
        self.put_calls += 1
        if self.error is not None:
            raise self.error
        self.records[record.id] = record

    async def delete(self, record_id: str) -> None:
        if self.error is not None:
            raise self.error
        self.records.pop(record_id, None)

    async def get(self, record_id: str) -> T | None:
        return self.records.get(record_id)

    async def get_all(self, owner_id: str | None = None) -> list[T]:
        if self.error is not None:
            raise self.error
        return [
            record
            for record in self.records.values()
            if owner_id is None or record.owner_id == owner_id
        ]


@dataclass
class BlockingRecordStore(InMemoryRecordStore[T]):
    """Record store whose writes wait until released."""

    release: asyncio.Event = field(default_factory=asyncio.Event)

    async def put(self, record: T) -> None:
        await self.release.wait()
        await super().put(record)


@dataclass
class InMemoryDayStatusRepository(DayStatusRepository):
    """In-memory day status repository for tests."""

    statuses: dict[tuple[str, str], DayStatus] = field(default_factory=dict)
    error: LedgerError | None = None

    async def get_status(self, owner_id: str, day_key: str) -> DayStatus | None:
        if self.error is not None:
            raise self.error
        return self.statuses.get((owner_id, day_key))

    async def put_status(self, status: DayStatus) -> None:
        self.statuses[(status.owner_id, status.day_key)] = status

    async def delete_status(self, owner_id: str, day_key: str) -> None:
        self.statuses.pop((owner_id, day_key), None)


@dataclass
class InMemoryCounterRepository(CounterRepository):
    """In-memory counter repository for tests."""

    counters: dict[str, DailyCounterState] = field(default_factory=dict)

    async def get_counter(self, owner_id: str) -> DailyCounterState | None:
        return self.counters.get(owner_id)

    async def put_counter(self, state: DailyCounterState) -> None:
        self.counters[state.owner_id] = state


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[str, UserProfile] = field(default_factory=dict)

    async def get_user(self, user_id: str) -> UserProfile | None:
        return self.users.get(user_id)

    async def save_user(self, user: UserProfile) -> None:
        self.users[user.id] = user


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client returning fixed nutrition and workout payloads."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "foodName": "Grilled chicken with rice",
            "weightGrams": 350,
            "calories": 520,
            "carbs": 55,
            "protein": 42,
            "fat": 12,
            "confidence": 88,
            "healthScore": 7.5,
            "ingredients": ["chicken", "rice", "broccoli"],
            "insights": ["High in protein"],
        }
    )
    workout: dict[str, object] = field(
        default_factory=lambda: {
            "focusGroup": "Chest and triceps",
            "exercises": [
                {
                    "name": "Bench press",
                    "sets": "4",
                    "reps": "6-8",
                    "rest": "120s",
                    "notes": "Keep shoulder blades retracted",
                },
                {
                    "name": "Cable pushdown",
                    "sets": 3.0,
                    "reps": "10-12",
                    "rest": "60s",
                    "notes": "",
                },
            ],
        }
    )
    requests: list[StructuredRequest] = field(default_factory=list)

    async def complete(
        self,
        request: StructuredRequest,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
    ) -> dict[str, object]:
        self.requests.append(request)
        if request.name == "nutrition_analysis":
            return self.payload
        return self.workout


def make_record(  # noqa: PLR0913
    record_id: str,
    *,
    owner_id: str = "owner-1",
    at: datetime = NOW,
    meal_category: MealCategory | None = MealCategory.LUNCH,
    calories: float = 100,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
) -> AnalysisRecord:
    return AnalysisRecord(
        id=record_id,
        owner_id=owner_id,
        timestamp=to_epoch_ms(at),
        meal_category=meal_category,
        food_name=f"food {record_id}",
        weight_grams=100,
        calories=calories,
        carbs=carbs,
        protein=protein,
        fat=fat,
        confidence=90,
    )


def make_payload(**overrides: object) -> NutritionPayload:
    data: dict[str, object] = {
        "foodName": "Salad",
        "weightGrams": 200,
        "calories": 500,
        "carbs": 40,
        "protein": 30,
        "fat": 20,
        "confidence": 80,
    }
    data.update(overrides)
    return NutritionPayload.model_validate(data)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_path=tmp_path / "ledger.db", timezone="UTC", openai_api_key=None
    )


@pytest.fixture
def container(settings: Settings, clock: FakeClock) -> AppContainer:
    ledger_service = LedgerService(
        store=InMemoryRecordStore(), timezone=settings.timezone, clock=clock
    )
    day_state_service = DayStateService(
        repository=InMemoryDayStatusRepository(), ledger=ledger_service
    )
    water_service = WaterService(
        InMemoryCounterRepository(), timezone=settings.timezone, clock=clock
    )
    workout_service = WorkoutService(
        InMemoryRecordStore(), timezone=settings.timezone, clock=clock
    )
    analysis_service = AnalysisService(
        client=FakeAnalysisClient(),
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ledger_service=ledger_service,
        day_state_service=day_state_service,
        water_service=water_service,
        workout_service=workout_service,
        user_service=UserService(InMemoryUserRepository()),
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
