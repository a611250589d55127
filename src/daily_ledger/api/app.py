"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from daily_ledger.api.models import (
    ProfileRequest,
    SaveRecordRequest,
    WaterRequest,
    WorkoutRequest,
)
from daily_ledger.app_logging import configure_logging
from daily_ledger.containers import AppContainer
from daily_ledger.domain.analysis import NutritionPayload
from daily_ledger.domain.calendar import parse_day_key
from daily_ledger.domain.days import DaySnapshot, LedgerContext
from daily_ledger.domain.errors import (
    LedgerError,
    PersistenceFailed,
    RecordNotFound,
)
from daily_ledger.domain.records import AnalysisRecord
from daily_ledger.domain.workouts import WorkoutSession
from daily_ledger.services.ledger import LedgerService
from daily_ledger.services.ledger_index import SyncState


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Ledger database at %s", container.settings.database_path)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(PersistenceFailed)
    async def persistence_failed(
        request: Request, exc: PersistenceFailed
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "detail": str(exc),
                "operation": exc.operation,
                "record_id": exc.record_id,
            },
        )

    @app.exception_handler(RecordNotFound)
    async def record_not_found(
        request: Request, exc: RecordNotFound
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc), "record_id": exc.record_id},
        )

    @app.exception_handler(LedgerError)
    async def ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
        logger.error("Ledger storage error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/owners/{owner_id}/day")
    async def day_snapshot(
        owner_id: str, request: Request, offset: int = 0, delta: int = 0
    ) -> dict[str, object]:
        """Return the day at ``offset``, optionally moved by ``delta`` days."""
        state: AppContainer = request.app.state.container
        await state.ledger_service.ensure_loaded(owner_id)
        goals = await state.user_service.get_goals(owner_id)
        snapshot = await state.day_state_service.navigate(
            LedgerContext(owner_id=owner_id, viewing_offset=offset), delta, goals
        )
        return _serialize_snapshot(snapshot, state.ledger_service)

    @app.post("/owners/{owner_id}/records")
    async def save_record(
        owner_id: str, body: SaveRecordRequest, request: Request
    ) -> dict[str, object]:
        """Create a record, or update it when ``existing_id`` is given."""
        state: AppContainer = request.app.state.container
        await state.ledger_service.ensure_loaded(owner_id)
        record = await state.ledger_service.save_analysis(
            LedgerContext(owner_id=owner_id, viewing_offset=body.offset),
            NutritionPayload.model_validate(body.payload),
            meal_category=body.meal_category,
            existing_id=body.existing_id,
            media_ref=body.media_ref,
            timestamp=body.timestamp,
        )
        return {
            "record": _serialize_record(
                record, state.ledger_service.sync_state(record.id)
            )
        }

    @app.delete("/owners/{owner_id}/records/{record_id}")
    async def delete_record(
        owner_id: str, record_id: str, request: Request
    ) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        await state.ledger_service.ensure_loaded(owner_id)
        removed = await state.ledger_service.delete_analysis(owner_id, record_id)
        return {"deleted": removed is not None}

    @app.get("/owners/{owner_id}/history")
    async def history(owner_id: str, request: Request) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        await state.ledger_service.ensure_loaded(owner_id)
        days = state.ledger_service.history(owner_id)
        return {
            "days": [
                {
                    "day_key": day.day_key,
                    "records": [
                        _serialize_record(
                            record, state.ledger_service.sync_state(record.id)
                        )
                        for record in day.records
                    ],
                }
                for day in days
            ]
        }

    @app.post("/owners/{owner_id}/days/{day_key}/finish")
    async def finish_day(
        owner_id: str, day_key: str, request: Request
    ) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        day_status = await state.day_state_service.finish_day(
            owner_id, _validated_day_key(day_key)
        )
        return {"day_key": day_status.day_key, "finished": day_status.finished}

    @app.delete("/owners/{owner_id}/days/{day_key}/finish")
    async def reopen_day(
        owner_id: str, day_key: str, request: Request
    ) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        await state.day_state_service.reopen_day(owner_id, _validated_day_key(day_key))
        return {"day_key": day_key, "finished": False}

    @app.get("/owners/{owner_id}/water")
    async def water_status(owner_id: str, request: Request) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        goals = await state.user_service.get_goals(owner_id)
        water = await state.water_service.status(owner_id, goals.water)
        return {**asdict(water), "percent": water.percent}

    @app.post("/owners/{owner_id}/water")
    async def adjust_water(
        owner_id: str, body: WaterRequest, request: Request
    ) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        value = await state.water_service.adjust(owner_id, body.delta)
        return {"owner_id": owner_id, "value": value}

    @app.get("/owners/{owner_id}/profile")
    async def get_profile(owner_id: str, request: Request) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        profile = await state.user_service.get_profile(owner_id)
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        goals = await state.user_service.get_goals(owner_id)
        return {**asdict(profile), "goals": asdict(goals)}

    @app.put("/owners/{owner_id}/profile")
    async def save_profile(
        owner_id: str, body: ProfileRequest, request: Request
    ) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        profile = await state.user_service.save_profile(body.to_profile(owner_id))
        return asdict(profile)

    @app.get("/owners/{owner_id}/workouts")
    async def list_workouts(owner_id: str, request: Request) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        sessions = await state.workout_service.list_sessions(owner_id)
        return {"workouts": [_serialize_workout(session) for session in sessions]}

    @app.get("/owners/{owner_id}/workouts/active")
    async def active_workout(
        owner_id: str, request: Request, offset: int = 0
    ) -> dict[str, object]:
        """Return the unfinished workout of the viewed day, if any."""
        state: AppContainer = request.app.state.container
        day_key = state.ledger_service.viewing_day(
            LedgerContext(owner_id=owner_id, viewing_offset=offset)
        )
        session = await state.workout_service.active_session(owner_id, day_key)
        return {
            "day_key": day_key,
            "workout": _serialize_workout(session) if session else None,
        }

    @app.post("/owners/{owner_id}/workouts")
    async def start_workout(
        owner_id: str, body: WorkoutRequest, request: Request
    ) -> dict[str, object]:
        """Start a workout; without exercises a routine is generated first."""
        state: AppContainer = request.app.state.container
        focus_group = body.focus_group
        exercises = [exercise.to_exercise() for exercise in body.exercises]
        if not exercises:
            if state.analysis_service is None:
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail="Workout generation is not configured.",
                )
            profile = await state.user_service.get_profile(owner_id)
            try:
                plan = await state.analysis_service.generate_workout(
                    profile, body.split, body.focus_group
                )
            except Exception as exc:
                logger.exception("Workout generation failed")
                raise HTTPException(
                    status_code=status.HTTP_502_BAD_GATEWAY,
                    detail="Could not create a workout routine. Try again.",
                ) from exc
            focus_group = plan.focus_group or focus_group
            exercises = plan.to_exercises()
        session = await state.workout_service.start_session(
            LedgerContext(owner_id=owner_id, viewing_offset=body.offset),
            body.split,
            focus_group,
            exercises,
        )
        return {"workout": _serialize_workout(session)}

    @app.post("/workouts/{session_id}/exercises/{index}/toggle")
    async def toggle_exercise(
        session_id: str, index: int, request: Request
    ) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        session = await state.workout_service.toggle_exercise(session_id, index)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"workout": _serialize_workout(session)}

    @app.post("/workouts/{session_id}/finish")
    async def finish_workout(session_id: str, request: Request) -> dict[str, object]:
        state: AppContainer = request.app.state.container
        session = await state.workout_service.finish_session(session_id)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"workout": _serialize_workout(session)}

    @app.post("/analyze")
    async def analyze(request: Request) -> dict[str, object]:
        """Estimate nutrition for the raw image in the request body."""
        state: AppContainer = request.app.state.container
        if state.analysis_service is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Image analysis is not configured.",
            )
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Empty image."
            )
        try:
            payload = await state.analysis_service.analyze(image_bytes)
        except Exception as exc:
            logger.exception("Image analysis failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Could not identify the food. Try a clearer photo.",
            ) from exc
        return {"analysis": payload.model_dump()}

    return app


def _validated_day_key(day_key: str) -> str:
    try:
        return parse_day_key(day_key).isoformat()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid day key: {day_key}",
        ) from exc


def _serialize_record(
    record: AnalysisRecord, sync_state: SyncState | None = None
) -> dict[str, object]:
    return {**asdict(record), "sync_state": sync_state}


def _serialize_workout(session: WorkoutSession) -> dict[str, object]:
    return asdict(session)


def _serialize_snapshot(
    snapshot: DaySnapshot, ledger: LedgerService
) -> dict[str, object]:
    view = snapshot.view
    return {
        "owner_id": view.owner_id,
        "offset": snapshot.context.viewing_offset,
        "day_key": snapshot.day_key,
        "finished": snapshot.finished,
        "goals": asdict(view.goals),
        "totals": {
            "calories": view.total_calories,
            "protein": view.total_protein,
            "carbs": view.total_carbs,
            "fat": view.total_fat,
        },
        "remaining": view.remaining,
        "meals": {
            str(category): [
                _serialize_record(record, ledger.sync_state(record.id))
                for record in records
            ]
            for category, records in view.grouped_meals.items()
        },
        "meal_calories": {
            str(category): view.calories_for(category)
            for category in view.grouped_meals
        },
    }
