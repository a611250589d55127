"""SQLite repository for the daily water counter."""

import sqlite3
from dataclasses import dataclass

from daily_ledger.adapters.sqlite_database import SqliteDatabase
from daily_ledger.domain.days import DailyCounterState
from daily_ledger.services.water import CounterRepository


@dataclass
class SqliteCounterRepository(CounterRepository):
    """SQLite implementation for daily counters."""

    database: SqliteDatabase

    async def get_counter(self, owner_id: str) -> DailyCounterState | None:
        def _get(conn: sqlite3.Connection) -> sqlite3.Row | None:
            return conn.execute(
                "SELECT owner_id, value, as_of_day FROM counters WHERE owner_id = ?",
                (owner_id,),
            ).fetchone()

        row = await self.database.read(_get)
        if row is None:
            return None
        return DailyCounterState(
            owner_id=row["owner_id"],
            value=int(row["value"]),
            as_of_day=row["as_of_day"],
        )

    async def put_counter(self, state: DailyCounterState) -> None:
        def _put(conn: sqlite3.Connection) -> None:
            conn.execute(
                "INSERT INTO counters (owner_id, value, as_of_day) VALUES (?, ?, ?) "
                "ON CONFLICT(owner_id) DO UPDATE SET "
                "value = excluded.value, as_of_day = excluded.as_of_day",
                (state.owner_id, state.value, state.as_of_day),
            )

        await self.database.write(_put)
