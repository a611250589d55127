"""In-memory read model of the ledger and the day aggregation."""

from bisect import insort
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from zoneinfo import ZoneInfo

from daily_ledger.domain.calendar import day_key_for_timestamp
from daily_ledger.domain.days import DayView, HistoryDay
from daily_ledger.domain.records import AnalysisRecord, MealCategory
from daily_ledger.domain.users import UserGoals

HISTORY_DAYS = 10


class SyncState(StrEnum):
    """Durability of a record held by the index."""

    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"


@dataclass
class LedgerIndex:
    """Records grouped by owner and local calendar day.

    The index is a cache over the record store: it can be dropped and rebuilt
    from storage at any time. Each day bucket is ordered by timestamp; equal
    timestamps keep the order in which records were inserted.
    """

    tz: ZoneInfo
    _records: dict[str, AnalysisRecord]
    _days: dict[str, dict[str, list[AnalysisRecord]]]
    _sync: dict[str, SyncState]

    def __init__(self, tz: ZoneInfo) -> None:
        self.tz = tz
        self._records = {}
        self._days = {}
        self._sync = {}

    def replace_owner(self, owner_id: str, records: Iterable[AnalysisRecord]) -> None:
        """Drop an owner's cached records and load ``records`` in their place."""
        for record_id in [
            record.id for record in self._records.values() if record.owner_id == owner_id
        ]:
            self.remove(record_id)
        for record in records:
            if record.owner_id == owner_id:
                self.put(record, SyncState.SYNCED)

    def put(
        self, record: AnalysisRecord, state: SyncState = SyncState.PENDING
    ) -> None:
        """Insert a record or replace the one with the same id."""
        previous = self._records.get(record.id)
        self._records[record.id] = record
        self._sync[record.id] = state
        key = self._day_key(record)
        if previous is not None:
            bucket = self._bucket(previous.owner_id, self._day_key(previous))
            position = _position(bucket, previous.id)
            if (
                previous.timestamp == record.timestamp
                and previous.owner_id == record.owner_id
            ):
                bucket[position] = record
                return
            del bucket[position]
            self._prune(previous.owner_id, self._day_key(previous))
        insort(
            self._bucket(record.owner_id, key), record, key=lambda item: item.timestamp
        )

    def remove(self, record_id: str) -> AnalysisRecord | None:
        """Remove a record; return it, or None if it was not indexed."""
        record = self._records.pop(record_id, None)
        self._sync.pop(record_id, None)
        if record is None:
            return None
        key = self._day_key(record)
        bucket = self._bucket(record.owner_id, key)
        del bucket[_position(bucket, record_id)]
        self._prune(record.owner_id, key)
        return record

    def get(self, record_id: str) -> AnalysisRecord | None:
        return self._records.get(record_id)

    def records_for_day(self, owner_id: str, day_key: str) -> list[AnalysisRecord]:
        """Return an owner's records for one day ordered by timestamp."""
        return list(self._days.get(owner_id, {}).get(day_key, []))

    def records_for_owner(self, owner_id: str) -> list[AnalysisRecord]:
        """Return all of an owner's records ordered by day and timestamp."""
        days = self._days.get(owner_id, {})
        return [record for key in sorted(days) for record in days[key]]

    def mark(self, record_id: str, state: SyncState) -> None:
        if record_id in self._records:
            self._sync[record_id] = state

    def sync_state(self, record_id: str) -> SyncState | None:
        return self._sync.get(record_id)

    def _day_key(self, record: AnalysisRecord) -> str:
        return day_key_for_timestamp(record.timestamp, self.tz)

    def _bucket(self, owner_id: str, day_key: str) -> list[AnalysisRecord]:
        return self._days.setdefault(owner_id, {}).setdefault(day_key, [])

    def _prune(self, owner_id: str, day_key: str) -> None:
        days = self._days.get(owner_id, {})
        if not days.get(day_key, True):
            del days[day_key]
        if not days:
            self._days.pop(owner_id, None)


def build_day_view(
    owner_id: str,
    day_key: str,
    records: Iterable[AnalysisRecord],
    goals: UserGoals,
    tz: ZoneInfo,
) -> DayView:
    """Group one owner's records for a local day and compute totals.

    Pure function of its inputs. Records of other owners or other days are
    ignored; an empty day yields zero totals and the full calorie budget.
    """
    day_records = sorted(
        (
            record
            for record in records
            if record.owner_id == owner_id
            and day_key_for_timestamp(record.timestamp, tz) == day_key
        ),
        key=lambda record: record.timestamp,
    )
    grouped: dict[MealCategory, list[AnalysisRecord]] = {
        category: [] for category in MealCategory
    }
    calories = protein = carbs = fat = 0.0
    for record in day_records:
        grouped[record.effective_category].append(record)
        calories += record.calories
        protein += record.protein
        carbs += record.carbs
        fat += record.fat

    return DayView(
        owner_id=owner_id,
        day_key=day_key,
        goals=goals,
        grouped_meals=grouped,
        total_calories=calories,
        total_protein=protein,
        total_carbs=carbs,
        total_fat=fat,
        remaining=max(0.0, goals.calories - calories),
    )


def build_history(
    owner_id: str,
    records: Iterable[AnalysisRecord],
    tz: ZoneInfo,
    limit_days: int = HISTORY_DAYS,
) -> list[HistoryDay]:
    """Group an owner's records by day, newest day and record first."""
    newest_first = sorted(
        (record for record in records if record.owner_id == owner_id),
        key=lambda record: record.timestamp,
        reverse=True,
    )
    days: dict[str, list[AnalysisRecord]] = {}
    for record in newest_first:
        days.setdefault(day_key_for_timestamp(record.timestamp, tz), []).append(
            record
        )
    return [
        HistoryDay(day_key=key, records=day_records)
        for key, day_records in list(days.items())[:limit_days]
    ]


def _position(bucket: list[AnalysisRecord], record_id: str) -> int:
    for position, record in enumerate(bucket):
        if record.id == record_id:
            return position
    raise KeyError(record_id)
