"""Day lifecycle: finished/open status and the viewing cursor."""

import logging
from dataclasses import dataclass
from typing import Protocol

from daily_ledger.domain.days import DaySnapshot, DayStatus, LedgerContext
from daily_ledger.domain.errors import StorageUnavailable
from daily_ledger.domain.users import UserGoals
from daily_ledger.services.ledger import LedgerService

_logger = logging.getLogger(__name__)


class DayStatusRepository(Protocol):
    """Persistence interface for per-day status."""

    async def get_status(self, owner_id: str, day_key: str) -> DayStatus | None:
        """Return the stored status for a day, if any."""

    async def put_status(self, status: DayStatus) -> None:
        """Store a status, replacing any for the same owner and day."""

    async def delete_status(self, owner_id: str, day_key: str) -> None:
        """Remove the status for a day if present."""


@dataclass
class DayStateService:
    """Tracks which days are finished and which day is being viewed.

    Writes to a finished day are not rejected here; hiding the "add entry"
    action for finished days is up to the presentation layer.
    """

    repository: DayStatusRepository
    ledger: LedgerService

    async def finish_day(self, owner_id: str, day_key: str) -> DayStatus:
        """Mark a day finished; a day already finished is left untouched."""
        existing = await self.repository.get_status(owner_id, day_key)
        if existing is not None and existing.finished:
            return existing
        status = DayStatus(
            owner_id=owner_id,
            day_key=day_key,
            finished=True,
            set_at=self.ledger.clock(),
        )
        await self.repository.put_status(status)
        _logger.info("Finished day %s for owner %s", day_key, owner_id)
        return status

    async def reopen_day(self, owner_id: str, day_key: str) -> None:
        """Return a day to the open state."""
        await self.repository.delete_status(owner_id, day_key)

    async def is_finished(self, owner_id: str, day_key: str) -> bool:
        status = await self.repository.get_status(owner_id, day_key)
        return status is not None and status.finished

    async def navigate(
        self, ctx: LedgerContext, delta: int, goals: UserGoals
    ) -> DaySnapshot:
        """Move the viewing cursor by ``delta`` days and describe that day."""
        moved = ctx.shifted(delta)
        day_key = self.ledger.viewing_day(moved)
        try:
            finished = await self.is_finished(moved.owner_id, day_key)
        except StorageUnavailable:
            _logger.warning("Day status unavailable for %s; assuming open", day_key)
            finished = False
        return DaySnapshot(
            context=moved,
            day_key=day_key,
            finished=finished,
            view=self.ledger.day_view(moved.owner_id, day_key, goals),
        )

    async def snapshot(self, ctx: LedgerContext, goals: UserGoals) -> DaySnapshot:
        """Describe the day the context is currently viewing."""
        return await self.navigate(ctx, 0, goals)
