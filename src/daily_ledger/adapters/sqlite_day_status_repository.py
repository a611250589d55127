"""SQLite repository for day status."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime

from daily_ledger.adapters.sqlite_database import SqliteDatabase
from daily_ledger.domain.days import DayStatus
from daily_ledger.services.days import DayStatusRepository


@dataclass
class SqliteDayStatusRepository(DayStatusRepository):
    """SQLite implementation for per-day status."""

    database: SqliteDatabase

    async def get_status(self, owner_id: str, day_key: str) -> DayStatus | None:
        def _get(conn: sqlite3.Connection) -> sqlite3.Row | None:
            return conn.execute(
                "SELECT owner_id, day_key, finished, set_at FROM day_status "
                "WHERE owner_id = ? AND day_key = ?",
                (owner_id, day_key),
            ).fetchone()

        row = await self.database.read(_get)
        if row is None:
            return None
        return DayStatus(
            owner_id=row["owner_id"],
            day_key=row["day_key"],
            finished=bool(row["finished"]),
            set_at=datetime.fromisoformat(row["set_at"]),
        )

    async def put_status(self, status: DayStatus) -> None:
        """Store a status, replacing the row for the same owner and day."""

        def _put(conn: sqlite3.Connection) -> None:
            conn.execute(
                "INSERT INTO day_status (owner_id, day_key, finished, set_at) "
                "VALUES (?, ?, ?, ?) ON CONFLICT(owner_id, day_key) DO UPDATE SET "
                "finished = excluded.finished, set_at = excluded.set_at",
                (
                    status.owner_id,
                    status.day_key,
                    int(status.finished),
                    status.set_at.isoformat(),
                ),
            )

        await self.database.write(_put)

    async def delete_status(self, owner_id: str, day_key: str) -> None:
        def _delete(conn: sqlite3.Connection) -> None:
            conn.execute(
                "DELETE FROM day_status WHERE owner_id = ? AND day_key = ?",
                (owner_id, day_key),
            )

        await self.database.write(_delete)
