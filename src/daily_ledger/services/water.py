"""Daily water counter with a lazy reset at local midnight."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from daily_ledger.domain.calendar import today_key, utc_now
from daily_ledger.domain.days import DailyCounterState, WaterStatus


class CounterRepository(Protocol):
    """Persistence interface for the daily counter."""

    async def get_counter(self, owner_id: str) -> DailyCounterState | None:
        """Return the stored counter for an owner."""

    async def put_counter(self, state: DailyCounterState) -> None:
        """Replace the stored counter for an owner."""


@dataclass
class WaterService:
    """Keeps one counter per owner for today's intake only.

    There is no reset job: a counter stored for an earlier day reads as 0,
    and the previous day's total is discarded on the next write.
    Adjustments are serialized: each one reads and writes the counter
    without another adjustment in between.
    """

    repository: CounterRepository
    timezone: str = "UTC"
    clock: Callable[[], datetime] = utc_now
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    def today(self) -> str:
        return today_key(self.clock(), ZoneInfo(self.timezone))

    async def current(self, owner_id: str) -> int:
        """Return today's intake."""
        state = await self.repository.get_counter(owner_id)
        if state is None:
            return 0
        return state.effective_value(self.today())

    async def adjust(self, owner_id: str, delta: int) -> int:
        """Add ``delta`` (possibly negative) to today's intake, floored at 0."""
        async with self._lock:
            today = self.today()
            state = await self.repository.get_counter(owner_id)
            previous = state.effective_value(today) if state is not None else 0
            value = max(0, previous + int(delta))
            await self.repository.put_counter(
                DailyCounterState(owner_id=owner_id, value=value, as_of_day=today)
            )
        return value

    async def status(self, owner_id: str, goal: int) -> WaterStatus:
        """Return today's intake together with the goal."""
        return WaterStatus(
            owner_id=owner_id,
            day_key=self.today(),
            value=await self.current(owner_id),
            goal=goal,
        )
