"""Workout sessions stored next to the food ledger."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

from daily_ledger.domain.calendar import (
    compose_timestamp,
    day_key_for_timestamp,
    utc_now,
)
from daily_ledger.domain.days import LedgerContext
from daily_ledger.domain.workouts import WorkoutExercise, WorkoutSession, WorkoutSplit
from daily_ledger.services.ledger import RecordStore

_logger = logging.getLogger(__name__)


@dataclass
class WorkoutService:
    """Service for starting, tracking and finishing workouts."""

    store: RecordStore[WorkoutSession]
    timezone: str = "UTC"
    clock: Callable[[], datetime] = utc_now

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    async def list_sessions(self, owner_id: str) -> list[WorkoutSession]:
        """Return an owner's sessions, newest first."""
        sessions = await self.store.get_all(owner_id)
        return sorted(sessions, key=lambda session: session.timestamp, reverse=True)

    async def active_session(
        self, owner_id: str, day_key: str
    ) -> WorkoutSession | None:
        """Return the unfinished session for a day, if any."""
        for session in await self.list_sessions(owner_id):
            if (
                not session.completed
                and day_key_for_timestamp(session.timestamp, self.tz) == day_key
            ):
                return session
        return None

    async def start_session(
        self,
        ctx: LedgerContext,
        split: WorkoutSplit | str,
        focus_group: str,
        exercises: list[WorkoutExercise],
    ) -> WorkoutSession:
        """Store a new session on the viewed day."""
        now = self.clock()
        day_key = ctx.viewing_day(now, self.tz)
        session = WorkoutSession(
            id=str(uuid4()),
            owner_id=ctx.owner_id,
            timestamp=compose_timestamp(day_key, now, self.tz),
            split=WorkoutSplit(split),
            focus_group=focus_group,
            exercises=list(exercises),
        )
        await self.store.put(session)
        _logger.info("Started %s workout for owner %s", session.split, ctx.owner_id)
        return session

    async def toggle_exercise(
        self, session_id: str, index: int
    ) -> WorkoutSession | None:
        """Flip the completed flag of one exercise."""
        session = await self.store.get(session_id)
        if session is None or not 0 <= index < len(session.exercises):
            return None
        exercises = list(session.exercises)
        exercises[index] = replace(
            exercises[index], completed=not exercises[index].completed
        )
        updated = replace(session, exercises=exercises)
        await self.store.put(updated)
        return updated

    async def finish_session(self, session_id: str) -> WorkoutSession | None:
        session = await self.store.get(session_id)
        if session is None:
            return None
        if session.completed:
            return session
        finished = replace(session, completed=True)
        await self.store.put(finished)
        return finished
