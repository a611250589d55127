"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from daily_ledger.adapters.openai_analysis_client import OpenAIAnalysisClient
from daily_ledger.adapters.sqlite_counter_repository import SqliteCounterRepository
from daily_ledger.adapters.sqlite_database import SqliteDatabase
from daily_ledger.adapters.sqlite_day_status_repository import (
    SqliteDayStatusRepository,
)
from daily_ledger.adapters.sqlite_record_store import (
    analysis_record_store,
    workout_store,
)
from daily_ledger.adapters.sqlite_user_repository import SqliteUserRepository
from daily_ledger.config import Settings
from daily_ledger.services.analysis import AnalysisService
from daily_ledger.services.days import DayStateService
from daily_ledger.services.ledger import LedgerService
from daily_ledger.services.users import UserService
from daily_ledger.services.water import WaterService
from daily_ledger.services.workouts import WorkoutService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger_service: LedgerService
    day_state_service: DayStateService
    water_service: WaterService
    workout_service: WorkoutService
    user_service: UserService
    analysis_service: AnalysisService | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    database = SqliteDatabase(resolved_settings.database_path)
    timezone = resolved_settings.timezone
    ledger_service = LedgerService(
        store=analysis_record_store(database), timezone=timezone
    )
    day_state_service = DayStateService(
        repository=SqliteDayStatusRepository(database), ledger=ledger_service
    )
    water_service = WaterService(SqliteCounterRepository(database), timezone=timezone)
    workout_service = WorkoutService(workout_store(database), timezone=timezone)
    user_service = UserService(SqliteUserRepository(database))

    analysis_client = None
    analysis_service = None
    if resolved_settings.openai_api_key:
        analysis_client = OpenAIAnalysisClient.create(resolved_settings.openai_api_key)
        analysis_service = AnalysisService(
            client=analysis_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )

    async def close_resources() -> None:
        if analysis_client is not None:
            await analysis_client.close()

    return AppContainer(
        settings=resolved_settings,
        ledger_service=ledger_service,
        day_state_service=day_state_service,
        water_service=water_service,
        workout_service=workout_service,
        user_service=user_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
