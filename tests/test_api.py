"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from daily_ledger.api.app import create_app
from daily_ledger.domain.errors import StorageError

PAYLOAD = {
    "foodName": "Salad",
    "weightGrams": 200,
    "calories": 500,
    "carbs": 40,
    "protein": 30,
    "fat": 20,
    "confidence": 80,
}


def test_health_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_saved_record_appears_in_day(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/owners/owner-1/records", json={"payload": PAYLOAD, "meal_category": "lunch"}
    )
    assert response.status_code == 200
    record = response.json()["record"]
    assert record["meal_category"] == "lunch"

    day = client.get("/owners/owner-1/day").json()
    assert day["day_key"] == "2024-05-01"
    assert day["finished"] is False
    assert day["totals"]["calories"] == 500
    assert day["remaining"] == 1500
    assert [item["id"] for item in day["meals"]["lunch"]] == [record["id"]]
    assert day["meals"]["lunch"][0]["sync_state"] == "synced"
    assert day["meal_calories"]["lunch"] == 500
    assert day["meal_calories"]["dinner"] == 0

    yesterday = client.get("/owners/owner-1/day", params={"delta": -1}).json()
    assert yesterday["offset"] == -1
    assert yesterday["day_key"] == "2024-04-30"
    assert yesterday["totals"]["calories"] == 0


def test_update_and_delete_record(container) -> None:
    client = TestClient(create_app(container))
    created = client.post(
        "/owners/owner-1/records", json={"payload": PAYLOAD, "meal_category": "lunch"}
    ).json()["record"]

    updated = client.post(
        "/owners/owner-1/records",
        json={"payload": {"calories": 350}, "existing_id": created["id"]},
    ).json()["record"]
    assert updated["id"] == created["id"]
    assert updated["calories"] == 350
    assert updated["food_name"] == "Salad"

    response = client.delete(f"/owners/owner-1/records/{created['id']}")
    assert response.json() == {"deleted": True}
    day = client.get("/owners/owner-1/day").json()
    assert day["totals"]["calories"] == 0


def test_records_are_scoped_to_their_owner(container) -> None:
    client = TestClient(create_app(container))
    created = client.post(
        "/owners/owner-1/records", json={"payload": PAYLOAD, "meal_category": "lunch"}
    ).json()["record"]

    deleted = client.delete(f"/owners/owner-2/records/{created['id']}")
    edited = client.post(
        "/owners/owner-2/records",
        json={"payload": {"calories": 1}, "existing_id": created["id"]},
    )

    assert deleted.json() == {"deleted": False}
    assert edited.status_code == 404
    assert edited.json()["record_id"] == created["id"]
    day = client.get("/owners/owner-1/day").json()
    assert day["totals"]["calories"] == 500
    assert day["meals"]["lunch"][0]["calories"] == 500
    assert client.get("/owners/owner-2/day").json()["totals"]["calories"] == 0


def test_failed_save_returns_service_unavailable(container) -> None:
    store = container.ledger_service.store
    client = TestClient(create_app(container))
    assert client.get("/owners/owner-1/day").status_code == 200
    store.error = StorageError("disk full")

    response = client.post("/owners/owner-1/records", json={"payload": PAYLOAD})

    assert response.status_code == 503
    assert response.json()["operation"] == "save"
    store.error = None
    day = client.get("/owners/owner-1/day").json()
    assert day["totals"]["calories"] == 500


def test_finish_and_reopen_day(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/owners/owner-1/days/2024-05-01/finish")
    assert response.json() == {"day_key": "2024-05-01", "finished": True}
    assert client.get("/owners/owner-1/day").json()["finished"] is True

    client.delete("/owners/owner-1/days/2024-05-01/finish")
    assert client.get("/owners/owner-1/day").json()["finished"] is False


def test_invalid_day_key_is_rejected(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/owners/owner-1/days/yesterday/finish")

    assert response.status_code == 422


def test_water_endpoints(container) -> None:
    client = TestClient(create_app(container))

    for delta in (250, 250, -250):
        response = client.post("/owners/owner-1/water", json={"delta": delta})
    assert response.json() == {"owner_id": "owner-1", "value": 250}

    status = client.get("/owners/owner-1/water").json()
    assert status["value"] == 250
    assert status["goal"] == 2500
    assert status["percent"] == 10


def test_profile_endpoints(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/owners/owner-1/profile").status_code == 404

    response = client.put(
        "/owners/owner-1/profile",
        json={
            "name": "Alex",
            "email": "alex@example.com",
            "goals": {"calories": 1800, "water": 3000},
        },
    )
    assert response.status_code == 200

    profile = client.get("/owners/owner-1/profile").json()
    assert profile["name"] == "Alex"
    assert profile["goals"]["calories"] == 1800
    assert client.get("/owners/owner-1/day").json()["goals"]["water"] == 3000


def test_history_endpoint(container) -> None:
    client = TestClient(create_app(container))
    client.post("/owners/owner-1/records", json={"payload": PAYLOAD})
    client.post("/owners/owner-1/records", json={"payload": PAYLOAD, "offset": -2})

    days = client.get("/owners/owner-1/history").json()["days"]

    assert [day["day_key"] for day in days] == ["2024-05-01", "2024-04-29"]


def test_workout_endpoints(container) -> None:
    client = TestClient(create_app(container))

    workout = client.post(
        "/owners/owner-1/workouts",
        json={
            "split": "FullBody",
            "focus_group": "Legs",
            "exercises": [{"name": "Squat", "sets": 4, "reps": "6-8", "rest": "120s"}],
        },
    ).json()["workout"]

    toggled = client.post(f"/workouts/{workout['id']}/exercises/0/toggle").json()
    assert toggled["workout"]["exercises"][0]["completed"] is True
    finished = client.post(f"/workouts/{workout['id']}/finish").json()
    assert finished["workout"]["completed"] is True
    assert client.post("/workouts/missing/finish").status_code == 404

    listed = client.get("/owners/owner-1/workouts").json()["workouts"]
    assert [item["id"] for item in listed] == [workout["id"]]


def test_analyze_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/analyze", content=b"\xff\xd8\xffimage")
    assert response.status_code == 200
    assert response.json()["analysis"]["calories"] == 520

    assert client.post("/analyze", content=b"").status_code == 400

    container.analysis_service = None
    assert client.post("/analyze", content=b"\xff\xd8\xff").status_code == 503


def test_workout_without_exercises_is_generated(container) -> None:
    client = TestClient(create_app(container))
    client.put(
        "/owners/owner-1/profile",
        json={"name": "Ana", "email": "ana@example.com", "weight_goal": "lose_weight"},
    )

    response = client.post(
        "/owners/owner-1/workouts", json={"split": "ABC", "focus_group": "Chest"}
    )

    assert response.status_code == 200
    workout = response.json()["workout"]
    assert workout["split"] == "ABC"
    assert workout["focus_group"] == "Chest and triceps"
    assert [exercise["name"] for exercise in workout["exercises"]] == [
        "Bench press",
        "Cable pushdown",
    ]
    assert workout["exercises"][0]["sets"] == 4
    prompt = container.analysis_service.client.requests[-1].prompt
    assert "fat loss and definition" in prompt

    active = client.get("/owners/owner-1/workouts/active").json()
    assert active["day_key"] == "2024-05-01"
    assert active["workout"]["id"] == workout["id"]

    client.post(f"/workouts/{workout['id']}/finish")
    assert client.get("/owners/owner-1/workouts/active").json()["workout"] is None


def test_workout_generation_unavailable(container) -> None:
    client = TestClient(create_app(container))
    container.analysis_service = None

    response = client.post(
        "/owners/owner-1/workouts", json={"split": "ABC", "focus_group": "Chest"}
    )

    assert response.status_code == 503
    assert client.get("/owners/owner-1/workouts").json()["workouts"] == []
