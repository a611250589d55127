"""SQLite-backed user repository."""

import json
import sqlite3
from dataclasses import asdict, dataclass
from typing import Any

from daily_ledger.adapters.sqlite_database import SqliteDatabase
from daily_ledger.domain.users import UserGoals, UserProfile
from daily_ledger.services.users import UserRepository


@dataclass
class SqliteUserRepository(UserRepository):
    """SQLite implementation for user profiles."""

    database: SqliteDatabase

    async def get_user(self, user_id: str) -> UserProfile | None:
        def _get(conn: sqlite3.Connection) -> sqlite3.Row | None:
            return conn.execute(
                "SELECT body FROM users WHERE id = ?", (user_id,)
            ).fetchone()

        row = await self.database.read(_get)
        if row is None:
            return None
        return _parse_user(json.loads(row["body"]))

    async def save_user(self, user: UserProfile) -> None:
        body = json.dumps(asdict(user), ensure_ascii=False)

        def _save(conn: sqlite3.Connection) -> None:
            conn.execute(
                "INSERT INTO users (id, body) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET body = excluded.body",
                (user.id, body),
            )

        await self.database.write(_save)


def _parse_user(row: dict[str, Any]) -> UserProfile:
    goals = row.get("goals")
    return UserProfile(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or ""),
        joined_at=int(row.get("joined_at") or 0),
        weight_kg=row.get("weight_kg"),
        height_cm=row.get("height_cm"),
        age=row.get("age"),
        gender=row.get("gender"),
        activity_level=row.get("activity_level"),
        weight_goal=row.get("weight_goal"),
        goals=UserGoals(**goals) if isinstance(goals, dict) else None,
    )
