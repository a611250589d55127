"""Ledger reconciliation: optimistic in-memory updates backed by the store."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Protocol, TypeVar
from uuid import uuid4
from zoneinfo import ZoneInfo

from daily_ledger.domain.analysis import NutritionPayload
from daily_ledger.domain.calendar import compose_timestamp, utc_now
from daily_ledger.domain.days import DayView, HistoryDay, LedgerContext
from daily_ledger.domain.errors import (
    LedgerError,
    PersistenceFailed,
    RecordNotFound,
    StorageUnavailable,
)
from daily_ledger.domain.records import (
    AnalysisRecord,
    MealCategory,
    meal_category_for_hour,
    parse_meal_category,
)
from daily_ledger.domain.users import UserGoals
from daily_ledger.services.ledger_index import (
    HISTORY_DAYS,
    LedgerIndex,
    SyncState,
    build_day_view,
    build_history,
)

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class RecordStore(Protocol[T]):
    """Durable keyed store with lookup by owner."""

    async def put(self, record: T) -> None:
        """Insert or fully replace the record with the same id."""

    async def delete(self, record_id: str) -> None:
        """Remove a record if present."""

    async def get(self, record_id: str) -> T | None:
        """Return a record by id, or None."""

    async def get_all(self, owner_id: str | None = None) -> list[T]:
        """Return all records, optionally for one owner, in no defined order."""


@dataclass
class LedgerService:
    """Applies ledger mutations in memory first, then persists them.

    A failed durable write is not rolled back: the record stays in the index
    tagged ``failed`` and the caller gets ``PersistenceFailed``. Re-invoking
    the same mutation with the same id retries it.
    """

    store: RecordStore[AnalysisRecord]
    timezone: str = "UTC"
    clock: Callable[[], datetime] = utc_now
    index: LedgerIndex = field(init=False)
    _loaded: set[str] = field(init=False, default_factory=set)

    def __post_init__(self) -> None:
        self.index = LedgerIndex(self.tz)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    async def load(self, owner_id: str) -> bool:
        """Rebuild an owner's cached records from the store.

        Returns False and keeps the in-memory records when the store cannot
        be opened.
        """
        try:
            records = await self.store.get_all(owner_id)
        except StorageUnavailable:
            _logger.warning("Ledger storage unavailable; serving cached records")
            return False
        self.index.replace_owner(owner_id, records)
        self._loaded.add(owner_id)
        _logger.info("Loaded %s records for owner %s", len(records), owner_id)
        return True

    async def ensure_loaded(self, owner_id: str) -> None:
        """Load an owner's records once per process."""
        if owner_id not in self._loaded:
            await self.load(owner_id)

    def viewing_day(self, ctx: LedgerContext) -> str:
        return ctx.viewing_day(self.clock(), self.tz)

    def day_view(self, owner_id: str, day_key: str, goals: UserGoals) -> DayView:
        """Return the grouped view of one owner's day."""
        return build_day_view(
            owner_id,
            day_key,
            self.index.records_for_day(owner_id, day_key),
            goals,
            self.tz,
        )

    def build_day_view(self, ctx: LedgerContext, goals: UserGoals) -> DayView:
        """Return the grouped view of the day the context is looking at."""
        return self.day_view(ctx.owner_id, self.viewing_day(ctx), goals)

    def history(self, owner_id: str, limit_days: int = HISTORY_DAYS) -> list[HistoryDay]:
        return build_history(
            owner_id, self.index.records_for_owner(owner_id), self.tz, limit_days
        )

    def sync_state(self, record_id: str) -> SyncState | None:
        return self.index.sync_state(record_id)

    async def save_analysis(  # noqa: PLR0913
        self,
        ctx: LedgerContext,
        payload: NutritionPayload,
        meal_category: MealCategory | str | None = None,
        existing_id: str | None = None,
        media_ref: str | None = None,
        timestamp: int | None = None,
    ) -> AnalysisRecord:
        """Create or update a record from an analysis payload.

        Raises ``RecordNotFound`` when ``existing_id`` names another owner's
        record.
        """
        existing = None
        if existing_id is not None:
            existing = await self._find(existing_id)
            if existing is not None and existing.owner_id != ctx.owner_id:
                raise RecordNotFound(existing_id)
        category = parse_meal_category(meal_category)
        if existing is not None:
            record = _merge(existing, payload, category, media_ref, timestamp)
        else:
            record = self._new_record(
                ctx, payload, category, existing_id, media_ref, timestamp
            )

        self.index.put(record, SyncState.PENDING)
        try:
            await self.store.put(record)
        except LedgerError as exc:
            self._mark_if_current(record, SyncState.FAILED)
            _logger.warning("Saving record %s failed: %s", record.id, exc)
            raise PersistenceFailed("save", record.id, exc) from exc
        self._mark_if_current(record, SyncState.SYNCED)
        return record

    async def delete_analysis(
        self, owner_id: str, record_id: str
    ) -> AnalysisRecord | None:
        """Remove an owner's record from the index and the store.

        Returns None, leaving storage untouched, when the owner has no record
        with this id.
        """
        found = await self._find(record_id)
        if found is None or found.owner_id != owner_id:
            return None
        removed = self.index.remove(record_id) or found
        try:
            await self.store.delete(record_id)
        except LedgerError as exc:
            _logger.warning("Deleting record %s failed: %s", record_id, exc)
            raise PersistenceFailed("delete", record_id, exc) from exc
        return removed

    async def _find(self, record_id: str) -> AnalysisRecord | None:
        return self.index.get(record_id) or await self.store.get(record_id)

    def _new_record(  # noqa: PLR0913
        self,
        ctx: LedgerContext,
        payload: NutritionPayload,
        category: MealCategory | None,
        record_id: str | None,
        media_ref: str | None,
        timestamp: int | None,
    ) -> AnalysisRecord:
        now = self.clock()
        if timestamp is None:
            timestamp = compose_timestamp(self.viewing_day(ctx), now, self.tz)
        if category is None:
            category = meal_category_for_hour(now.astimezone(self.tz).hour)
        return AnalysisRecord(
            id=record_id or str(uuid4()),
            owner_id=ctx.owner_id,
            timestamp=timestamp,
            meal_category=category,
            food_name=payload.food_name,
            weight_grams=payload.weight_grams,
            calories=payload.calories,
            carbs=payload.carbs,
            protein=payload.protein,
            fat=payload.fat,
            confidence=payload.confidence,
            health_score=payload.health_score,
            ingredients=list(payload.ingredients),
            insights=list(payload.insights),
            media_ref=media_ref,
        )

    def _mark_if_current(self, record: AnalysisRecord, state: SyncState) -> None:
        if self.index.get(record.id) is record:
            self.index.mark(record.id, state)


def _merge(
    existing: AnalysisRecord,
    payload: NutritionPayload,
    category: MealCategory | None,
    media_ref: str | None,
    timestamp: int | None,
) -> AnalysisRecord:
    changes: dict[str, object] = payload.model_dump(exclude_unset=True)
    if category is not None:
        changes["meal_category"] = category
    if media_ref is not None:
        changes["media_ref"] = media_ref
    if timestamp is not None:
        changes["timestamp"] = timestamp
    return replace(existing, **changes)
