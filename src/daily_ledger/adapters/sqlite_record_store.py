"""SQLite record store for ledger records and workout sessions."""

import json
import sqlite3
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from daily_ledger.adapters.sqlite_database import SqliteDatabase
from daily_ledger.domain.records import AnalysisRecord, parse_meal_category
from daily_ledger.domain.workouts import WorkoutExercise, WorkoutSession, WorkoutSplit
from daily_ledger.services.ledger import RecordStore

T = TypeVar("T", AnalysisRecord, WorkoutSession)


@dataclass
class SqliteRecordStore(RecordStore[T]):
    """Keyed store over one table with an ``owner_id`` index.

    Rows keep their storage position on update, so records read back in the
    order they were first inserted.
    """

    database: SqliteDatabase
    table: str
    encode: Callable[[T], dict[str, Any]]
    decode: Callable[[dict[str, Any]], T]

    async def put(self, record: T) -> None:
        """Insert or replace a record by id."""
        row = (
            record.id,
            record.owner_id,
            record.timestamp,
            json.dumps(self.encode(record), ensure_ascii=False),
        )

        def _put(conn: sqlite3.Connection) -> None:
            conn.execute(
                f"INSERT INTO {self.table} (id, owner_id, timestamp, body) "  # noqa: S608
                "VALUES (?, ?, ?, ?) ON CONFLICT(id) DO UPDATE SET "
                "owner_id = excluded.owner_id, timestamp = excluded.timestamp, "
                "body = excluded.body",
                row,
            )

        await self.database.write(_put)

    async def delete(self, record_id: str) -> None:
        def _delete(conn: sqlite3.Connection) -> None:
            conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (record_id,))  # noqa: S608

        await self.database.write(_delete)

    async def get(self, record_id: str) -> T | None:
        def _get(conn: sqlite3.Connection) -> sqlite3.Row | None:
            return conn.execute(
                f"SELECT body FROM {self.table} WHERE id = ?",  # noqa: S608
                (record_id,),
            ).fetchone()

        row = await self.database.read(_get)
        if row is None:
            return None
        return self.decode(json.loads(row["body"]))

    async def get_all(self, owner_id: str | None = None) -> list[T]:
        """Return records in storage order, optionally for one owner."""

        def _get_all(conn: sqlite3.Connection) -> list[sqlite3.Row]:
            if owner_id is None:
                cursor = conn.execute(
                    f"SELECT body FROM {self.table} ORDER BY rowid"  # noqa: S608
                )
            else:
                cursor = conn.execute(
                    f"SELECT body FROM {self.table} WHERE owner_id = ? "  # noqa: S608
                    "ORDER BY rowid",
                    (owner_id,),
                )
            return cursor.fetchall()

        rows = await self.database.read(_get_all)
        return [self.decode(json.loads(row["body"])) for row in rows]


def analysis_record_store(
    database: SqliteDatabase,
) -> SqliteRecordStore[AnalysisRecord]:
    return SqliteRecordStore(
        database=database,
        table="records",
        encode=asdict,
        decode=parse_analysis_record,
    )


def workout_store(database: SqliteDatabase) -> SqliteRecordStore[WorkoutSession]:
    return SqliteRecordStore(
        database=database,
        table="workouts",
        encode=asdict,
        decode=parse_workout_session,
    )


def parse_analysis_record(row: dict[str, Any]) -> AnalysisRecord:
    health_score = row.get("health_score")
    return AnalysisRecord(
        id=str(row["id"]),
        owner_id=str(row["owner_id"]),
        timestamp=int(row["timestamp"]),
        meal_category=parse_meal_category(row.get("meal_category")),
        food_name=str(row.get("food_name") or ""),
        weight_grams=float(row.get("weight_grams") or 0.0),
        calories=float(row.get("calories") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        protein=float(row.get("protein") or 0.0),
        fat=float(row.get("fat") or 0.0),
        confidence=float(row.get("confidence") or 0.0),
        health_score=float(health_score) if health_score is not None else None,
        ingredients=[str(item) for item in row.get("ingredients") or []],
        insights=[str(item) for item in row.get("insights") or []],
        media_ref=row.get("media_ref"),
    )


def parse_workout_session(row: dict[str, Any]) -> WorkoutSession:
    return WorkoutSession(
        id=str(row["id"]),
        owner_id=str(row["owner_id"]),
        timestamp=int(row["timestamp"]),
        split=WorkoutSplit(row["split"]),
        focus_group=str(row.get("focus_group") or ""),
        exercises=[
            WorkoutExercise(
                name=str(item.get("name", "")),
                sets=int(item.get("sets", 0)),
                reps=str(item.get("reps", "")),
                rest=str(item.get("rest", "")),
                completed=bool(item.get("completed", False)),
                notes=item.get("notes"),
            )
            for item in row.get("exercises") or []
        ],
        completed=bool(row.get("completed", False)),
    )
