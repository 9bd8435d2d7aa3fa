"""Tests for HTTP endpoints."""

from fastapi.testclient import TestClient

from lazy_lifts.api.app import create_app
from lazy_lifts.domain.errors import EstimationError, PersistenceError
from tests.conftest import FakeClock

OWNER_HEADERS = {"X-Owner-Id": "user-1"}


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_workout_log_select_and_undo(container) -> None:
    client = TestClient(create_app(container))

    state = client.get("/workouts", headers=OWNER_HEADERS).json()
    logged = client.post("/workouts/log", headers=OWNER_HEADERS).json()
    selected = client.post(
        "/workouts/select", json={"week": 1, "day": "Fri"}, headers=OWNER_HEADERS
    ).json()
    undone = client.post("/workouts/undo", headers=OWNER_HEADERS).json()
    second_undo = client.post("/workouts/undo", headers=OWNER_HEADERS)

    assert state["cycle"] == 1
    assert len(state["sessions"]) == 32
    assert state["active"] == {"week": 1, "day": "Mon"}
    assert logged["logged"]["day"] == "Mon"
    assert logged["active"] == {"week": 1, "day": "Tue"}
    assert selected["selected"] == {"week": 1, "day": "Fri"}
    assert selected["selected_is_future"] is True
    assert undone["undone"] == {"week": 1, "day": "Mon"}
    assert second_undo.status_code == 200
    assert second_undo.json()["undone"] is None


def test_stale_undo_is_ignored(container, clock: FakeClock) -> None:
    client = TestClient(create_app(container))
    client.post("/workouts/log", headers=OWNER_HEADERS)
    clock.advance(minutes=61)

    response = client.post("/workouts/undo", headers=OWNER_HEADERS)

    assert response.status_code == 200
    assert response.json()["undone"] is None
    assert response.json()["active"] == {"week": 1, "day": "Tue"}


def test_invalid_selection_is_bad_request(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/workouts/select", json={"week": 12, "day": "Mon"}, headers=OWNER_HEADERS
    )

    assert response.status_code == 400


def test_persistence_failure_maps_to_503(container) -> None:
    repository = container.cycle_service.repository
    client = TestClient(create_app(container))
    client.get("/workouts", headers=OWNER_HEADERS)
    repository.fail_writes = True

    response = client.post("/workouts/log", headers=OWNER_HEADERS)

    assert response.status_code == 503


def test_anonymous_workouts_are_allowed(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/workouts/log")

    assert response.status_code == 200
    assert response.json()["active"] == {"week": 1, "day": "Tue"}


def test_meal_crud_and_grouping(container) -> None:
    client = TestClient(create_app(container))

    created = client.post(
        "/meals",
        json={
            "description": "Eggs",
            "calories": 300,
            "protein": 20,
            "carbs": 2,
            "fat": 22,
            "timestamp": "2024-06-01T08:00:00+00:00",
        },
        headers=OWNER_HEADERS,
    ).json()
    client.post(
        "/meals",
        json={
            "description": "Pasta",
            "calories": 500,
            "protein": 18,
            "carbs": 80,
            "fat": 10,
            "timestamp": "2024-06-01T23:00:00+00:00",
        },
        headers=OWNER_HEADERS,
    )
    grouped = client.get("/meals", headers=OWNER_HEADERS).json()
    weekly = client.get(
        "/meals/weekly",
        params={"reference_date": "2024-06-01"},
        headers=OWNER_HEADERS,
    ).json()
    deleted = client.delete(f"/meals/{created['id']}", headers=OWNER_HEADERS)
    missing = client.delete("/meals/unknown", headers=OWNER_HEADERS)

    day = grouped["years"][0]["days"][0]
    assert day["date"] == "2024-06-01"
    assert day["total_calories"] == 800
    assert [entry["description"] for entry in day["entries"]] == ["Pasta", "Eggs"]
    assert len(weekly["days"]) == 7
    assert weekly["days"][-1]["calories"] == 800
    assert weekly["days"][-1]["is_today"] is True
    assert deleted.status_code == 200
    assert missing.status_code == 200


def test_meals_require_owner(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/meals")
    created = client.post(
        "/meals",
        json={"description": "Eggs", "calories": 1, "protein": 1, "carbs": 1, "fat": 1},
    )

    assert response.status_code == 401
    assert created.status_code == 401


def test_estimate_photo_and_audio(container) -> None:
    client = TestClient(create_app(container))

    estimated = client.post(
        "/meals/estimate", json={"description": "oatmeal"}, headers=OWNER_HEADERS
    )
    photo = client.post(
        "/meals/photo", content=b"\xff\xd8\xffimage", headers=OWNER_HEADERS
    )
    audio = client.post("/meals/audio", content=b"audio", headers=OWNER_HEADERS)
    reestimated = client.post(
        "/meals/estimate",
        json={"description": "porridge", "meal_id": estimated.json()["id"]},
        headers=OWNER_HEADERS,
    )

    assert estimated.status_code == 200
    assert estimated.json()["calories"] == 350
    assert photo.json()["description"] == "Oatmeal with banana"
    assert audio.json()["description"] == "two eggs and toast"
    assert reestimated.json()["id"] == estimated.json()["id"]
    assert reestimated.json()["description"] == "porridge"


def test_estimation_failure_maps_to_502(container) -> None:
    client_stub = container.nutrition_service.client
    client_stub.error = EstimationError("upstream down")
    client = TestClient(create_app(container))

    response = client.post(
        "/meals/estimate", json={"description": "oatmeal"}, headers=OWNER_HEADERS
    )

    assert response.status_code == 502
    assert response.json() == {"detail": "upstream down"}


def test_weight_endpoints(container) -> None:
    client = TestClient(create_app(container))

    created = client.post("/weights", json={"weight": 80.5}, headers=OWNER_HEADERS)
    entry_id = created.json()["id"]
    updated = client.put(
        f"/weights/{entry_id}", json={"weight": 80.1}, headers=OWNER_HEADERS
    )
    listed = client.get("/weights", headers=OWNER_HEADERS).json()
    rejected = client.post("/weights", json={"weight": -1}, headers=OWNER_HEADERS)
    deleted = client.delete(f"/weights/{entry_id}", headers=OWNER_HEADERS)

    assert updated.json()["weight"] == 80.1
    assert listed["weights"][0]["id"] == entry_id
    assert rejected.status_code == 400
    assert deleted.status_code == 200
    assert client.get("/weights", headers=OWNER_HEADERS).json() == {"weights": []}


def test_meal_write_failure_maps_to_503(container) -> None:
    repository = container.meal_log_service.repository

    def fail(*_args: object) -> None:
        raise PersistenceError("offline")

    repository.save_meal = fail
    client = TestClient(create_app(container))

    response = client.post(
        "/meals",
        json={"description": "Eggs", "calories": 1, "protein": 1, "carbs": 1, "fat": 1},
        headers=OWNER_HEADERS,
    )

    assert response.status_code == 503
