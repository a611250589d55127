"""Local SQLite database shared by the storage adapters."""

import asyncio
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from daily_ledger.domain.errors import StorageError, StorageUnavailable

R = TypeVar("R")

SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    timestamp INTEGER NOT NULL,
    body TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS records_owner_id ON records (owner_id);
CREATE TABLE IF NOT EXISTS workouts (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    timestamp INTEGER NOT NULL,
    body TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS workouts_owner_id ON workouts (owner_id);
CREATE TABLE IF NOT EXISTS day_status (
    owner_id TEXT NOT NULL,
    day_key TEXT NOT NULL,
    finished INTEGER NOT NULL,
    set_at TEXT NOT NULL,
    PRIMARY KEY (owner_id, day_key)
);
CREATE TABLE IF NOT EXISTS counters (
    owner_id TEXT PRIMARY KEY,
    value INTEGER NOT NULL,
    as_of_day TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    body TEXT NOT NULL
);
"""


@dataclass
class SqliteDatabase:
    """Opens short-lived connections to the ledger database file.

    Every call commits before returning. Blocking sqlite work runs in a worker
    thread; writes go through one lock so they complete in the order issued.
    """

    path: Path
    _write_lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)
    _initialized: bool = field(init=False, default=False)

    async def read(self, func: Callable[[sqlite3.Connection], R]) -> R:
        return await asyncio.to_thread(self._run, func)

    async def write(self, func: Callable[[sqlite3.Connection], R]) -> R:
        async with self._write_lock:
            return await asyncio.to_thread(self._run, func)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, committing on success."""
        conn = self._open()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _run(self, func: Callable[[sqlite3.Connection], R]) -> R:
        with self.connect() as conn:
            return func(conn)

    def _open(self) -> sqlite3.Connection:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailable(
                f"Cannot open ledger database at {self.path}: {exc}"
            ) from exc
        conn.row_factory = sqlite3.Row
        if not self._initialized:
            try:
                conn.executescript(SCHEMA)
            except sqlite3.Error as exc:
                conn.close()
                raise StorageUnavailable(
                    f"Cannot initialize ledger database at {self.path}: {exc}"
                ) from exc
            self._initialized = True
        return conn
