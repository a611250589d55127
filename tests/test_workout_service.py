"""Tests for workout sessions."""

import asyncio
from datetime import UTC, datetime

from daily_ledger.domain.calendar import to_epoch_ms
from daily_ledger.domain.days import LedgerContext
from daily_ledger.domain.workouts import WorkoutExercise, WorkoutSplit
from daily_ledger.services.workouts import WorkoutService
from tests.conftest import FakeClock, InMemoryRecordStore


def _exercises() -> list[WorkoutExercise]:
    return [
        WorkoutExercise(name="Squat", sets=4, reps="6-8", rest="120s"),
        WorkoutExercise(name="Bench press", sets=3, reps="8-10", rest="90s"),
    ]


def test_start_session_on_viewed_day() -> None:
    store = InMemoryRecordStore()
    service = WorkoutService(store, clock=FakeClock())

    session = asyncio.run(
        service.start_session(
            LedgerContext(owner_id="owner-1", viewing_offset=-1),
            "FullBody",
            "Legs",
            _exercises(),
        )
    )

    assert session.split == WorkoutSplit.FULL_BODY
    assert session.timestamp == to_epoch_ms(datetime(2024, 4, 30, 12, 30, tzinfo=UTC))
    assert store.records[session.id] == session
    assert asyncio.run(service.active_session("owner-1", "2024-04-30")) == session
    assert asyncio.run(service.active_session("owner-1", "2024-05-01")) is None


def test_toggle_and_finish_session() -> None:
    store = InMemoryRecordStore()
    service = WorkoutService(store, clock=FakeClock())
    session = asyncio.run(
        service.start_session(
            LedgerContext(owner_id="owner-1"), WorkoutSplit.ABC, "Push", _exercises()
        )
    )

    toggled = asyncio.run(service.toggle_exercise(session.id, 1))
    assert toggled is not None
    assert [exercise.completed for exercise in toggled.exercises] == [False, True]

    untoggled = asyncio.run(service.toggle_exercise(session.id, 1))
    assert untoggled is not None
    assert not untoggled.exercises[1].completed

    finished = asyncio.run(service.finish_session(session.id))
    assert finished is not None
    assert finished.completed
    assert store.records[session.id].completed
    assert asyncio.run(service.active_session("owner-1", "2024-05-01")) is None


def test_missing_session_or_exercise_returns_none() -> None:
    service = WorkoutService(InMemoryRecordStore(), clock=FakeClock())
    session = asyncio.run(
        service.start_session(
            LedgerContext(owner_id="owner-1"), "ABCD", "Pull", _exercises()
        )
    )

    assert asyncio.run(service.toggle_exercise("missing", 0)) is None
    assert asyncio.run(service.toggle_exercise(session.id, 5)) is None
    assert asyncio.run(service.finish_session("missing")) is None


def test_list_sessions_newest_first() -> None:
    clock = FakeClock()
    service = WorkoutService(InMemoryRecordStore(), clock=clock)
    ctx = LedgerContext(owner_id="owner-1")
    older = asyncio.run(service.start_session(ctx, "ABC", "Push", []))
    clock.advance(days=1)
    newer = asyncio.run(service.start_session(ctx, "ABC", "Pull", []))
    asyncio.run(
        service.start_session(LedgerContext(owner_id="owner-2"), "ABC", "Legs", [])
    )

    sessions = asyncio.run(service.list_sessions("owner-1"))

    assert [session.id for session in sessions] == [newer.id, older.id]
