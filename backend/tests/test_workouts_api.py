from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from conftest import unique_email  # noqa: E402
from db.database import SessionLocal  # noqa: E402
from db.models import User  # noqa: E402


def test_create_workout_with_optional_notes(make_client):
    email = unique_email("runner")
    client = make_client(email)

    with_notes = client.post(
        "/api/workouts",
        json={"date": "2024-05-01", "title": "Run", "duration": 30, "notes": "easy pace"},
    )
    assert with_notes.status_code == 201
    body = with_notes.json()
    db = SessionLocal()
    try:
        assert body["userId"] == db.query(User).filter(User.email == email).one().id
    finally:
        db.close()
    assert body["notes"] == "easy pace"
    assert body["duration"] == 30

    without_notes = client.post("/api/workouts", json={"date": "2024-05-02", "title": "Push day", "duration": 45})
    assert without_notes.status_code == 201
    assert without_notes.json()["notes"] is None

    rows = client.get("/api/workouts").json()
    assert [row["title"] for row in rows] == ["Push day", "Run"]


def test_workout_validation_matches_food_policy(user_client: TestClient):
    missing_duration = user_client.post("/api/workouts", json={"date": "2024-05-01", "title": "Run"})
    assert missing_duration.status_code == 400
    assert missing_duration.json() == {"error": "Missing required fields"}

    missing_title = user_client.post("/api/workouts", json={"date": "2024-05-01", "title": "", "duration": 10})
    assert missing_title.status_code == 400
    assert missing_title.json() == {"error": "Missing required fields"}

    not_a_number = user_client.post(
        "/api/workouts",
        json={"date": "2024-05-01", "title": "Run", "duration": "half an hour"},
    )
    assert not_a_number.status_code == 400
    assert not_a_number.json() == {"error": "Invalid fields: duration"}


def test_malformed_json_body_is_rejected(user_client: TestClient):
    response = user_client.post(
        "/api/workouts",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON body"}


def test_workouts_are_isolated_per_user(make_client):
    owner = make_client(unique_email("owner"))
    other = make_client(unique_email("other"))
    owner.post("/api/workouts", json={"date": "2024-05-01", "title": "Swim", "duration": 20})

    assert other.get("/api/workouts").json() == []


def test_delete_workout_ownership_rules(make_client):
    owner = make_client(unique_email("owner"))
    intruder = make_client(unique_email("intruder"))
    workout_id = owner.post(
        "/api/workouts", json={"date": "2024-05-01", "title": "Swim", "duration": 20}
    ).json()["id"]

    assert intruder.delete(f"/api/workouts/{workout_id}").status_code == 403
    assert owner.get("/api/workouts").json()[0]["id"] == workout_id

    deleted = owner.delete(f"/api/workouts/{workout_id}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}

    missing = owner.delete("/api/workouts/987654321")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Workout not found"}


def test_workout_endpoints_require_session(client: TestClient):
    assert client.get("/api/workouts").status_code == 401
    assert client.post("/api/workouts", json={"date": "2024-05-01", "title": "Run", "duration": 5}).status_code == 401
    assert client.delete("/api/workouts/1").status_code == 401


def test_delete_failure_is_reported_as_generic_error(user_client: TestClient, monkeypatch):
    import api.workouts as workouts_api

    workout_id = user_client.post(
        "/api/workouts", json={"date": "2024-05-01", "title": "Row", "duration": 15}
    ).json()["id"]

    def _boom(*args, **kwargs):
        raise OperationalError("DELETE", {}, Exception("disk I/O error"))

    monkeypatch.setattr(workouts_api, "delete_owned_entry", _boom)
    response = user_client.delete(f"/api/workouts/{workout_id}")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to delete workout"}


def test_create_workout_rejects_non_finite_duration(user_client: TestClient):
    response = user_client.post("/api/workouts", json={"date": "2024-05-01", "title": "Run", "duration": "Infinity"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid fields: duration"}
    assert user_client.get("/api/workouts").json() == []


def test_delete_workout_with_out_of_range_id_is_not_found(user_client: TestClient):
    response = user_client.delete(f"/api/workouts/{2**63}")
    assert response.status_code == 404
    assert response.json() == {"error": "Workout not found"}


def test_missing_session_is_reported_before_body_errors(client: TestClient):
    for path in ("/api/workouts", "/api/food"):
        response = client.post(path, content="{not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    missing_fields = client.post("/api/workouts", json={"title": "Run"})
    assert missing_fields.status_code == 401
