from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from conftest import sign_in, unique_email  # noqa: E402
from db.database import SessionLocal  # noqa: E402
from db.models import User  # noqa: E402
from main import app  # noqa: E402


def _user_id(email: str) -> int:
    db = SessionLocal()
    try:
        return db.query(User).filter(User.email == email).one().id
    finally:
        db.close()


def test_create_food_is_owned_by_session_user_and_hidden_from_others(make_client):
    email_a = unique_email("alice")
    client_a = make_client(email_a)
    client_b = make_client(unique_email("bob"))

    created = client_a.post("/api/food", json={"date": "2024-01-01", "name": "Apple", "calories": 95})
    assert created.status_code == 201
    body = created.json()
    assert body["userId"] == _user_id(email_a)
    assert body["name"] == "Apple"
    assert body["calories"] == 95
    assert body["date"] == "2024-01-01"

    listed_b = client_b.get("/api/food")
    assert listed_b.status_code == 200
    assert listed_b.json() == []

    listed_a = client_a.get("/api/food")
    assert [row["id"] for row in listed_a.json()] == [body["id"]]


def test_create_food_missing_name_is_rejected(user_client: TestClient):
    response = user_client.post("/api/food", json={"date": "2024-01-01", "calories": 95})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_create_food_blank_name_counts_as_missing(user_client: TestClient):
    response = user_client.post("/api/food", json={"date": "2024-01-01", "name": "   ", "calories": 10})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_create_food_coerces_numeric_string_calories(user_client: TestClient):
    response = user_client.post("/api/food", json={"date": "2024-01-02", "name": "Toast", "calories": "120"})
    assert response.status_code == 201
    assert response.json()["calories"] == 120


def test_create_food_accepts_zero_calories(user_client: TestClient):
    response = user_client.post("/api/food", json={"date": "2024-01-02", "name": "Water", "calories": 0})
    assert response.status_code == 201


def test_create_food_rejects_negative_calories_bad_date_and_unknown_fields(user_client: TestClient):
    negative = user_client.post("/api/food", json={"date": "2024-01-02", "name": "Toast", "calories": -5})
    assert negative.status_code == 400
    assert negative.json() == {"error": "Invalid fields: calories"}

    bad_date = user_client.post("/api/food", json={"date": "01/02/2024", "name": "Toast", "calories": 5})
    assert bad_date.status_code == 400
    assert bad_date.json() == {"error": "Invalid fields: date"}

    extra = user_client.post(
        "/api/food",
        json={"date": "2024-01-02", "name": "Toast", "calories": 5, "userId": 999},
    )
    assert extra.status_code == 400
    assert extra.json() == {"error": "Invalid fields: userId"}


def test_list_food_orders_by_date_descending(user_client: TestClient):
    for day, name in [("2024-03-01", "Oats"), ("2024-03-03", "Rice"), ("2024-03-02", "Soup")]:
        assert user_client.post("/api/food", json={"date": day, "name": name, "calories": 100}).status_code == 201

    rows = user_client.get("/api/food").json()
    assert [row["date"] for row in rows] == ["2024-03-03", "2024-03-02", "2024-03-01"]


def test_food_endpoints_require_session(client: TestClient):
    assert client.get("/api/food").status_code == 401
    response = client.post("/api/food", json={"date": "2024-01-01", "name": "Apple", "calories": 95})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert client.delete("/api/food/1").status_code == 401


def test_tampered_session_cookie_is_rejected(client: TestClient):
    client.cookies.set("fittrack_session", "not-a-real-token")
    assert client.get("/api/food").status_code == 401


def test_session_without_user_row_is_not_found():
    client = TestClient(app)
    sign_in(client, unique_email("ghost"), create_user=False)
    response = client.get("/api/food")
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}

    created = client.post("/api/food", json={"date": "2024-01-01", "name": "Apple", "calories": 95})
    assert created.status_code == 404


def test_delete_food_ownership_rules(make_client):
    owner = make_client(unique_email("owner"))
    intruder = make_client(unique_email("intruder"))
    food_id = owner.post("/api/food", json={"date": "2024-01-01", "name": "Apple", "calories": 95}).json()["id"]

    forbidden = intruder.delete(f"/api/food/{food_id}")
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Unauthorized"}

    deleted = owner.delete(f"/api/food/{food_id}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}
    assert owner.get("/api/food").json() == []

    missing = owner.delete(f"/api/food/{food_id}")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Food entry not found"}


def test_unexpected_persistence_failure_returns_generic_error(user_client: TestClient, monkeypatch):
    import api.food as food_api

    def _boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(food_api, "list_entries", _boom)
    response = user_client.get("/api/food")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch foods"}

    monkeypatch.setattr(food_api, "create_entry", _boom)
    response = user_client.post("/api/food", json={"date": "2024-01-01", "name": "Apple", "calories": 95})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create food entry"}


def test_create_food_rejects_non_finite_calories(user_client: TestClient):
    for calories in ("Infinity", "inf", "NaN"):
        response = user_client.post("/api/food", json={"date": "2024-01-02", "name": "Toast", "calories": calories})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid fields: calories"}

    overflow = user_client.post(
        "/api/food",
        content='{"date": "2024-01-02", "name": "Toast", "calories": 1e400}',
        headers={"Content-Type": "application/json"},
    )
    assert overflow.status_code == 400
    assert overflow.json() == {"error": "Invalid fields: calories"}
    assert user_client.get("/api/food").json() == []


def test_delete_food_with_out_of_range_id_is_not_found(user_client: TestClient):
    response = user_client.delete("/api/food/99999999999999999999999")
    assert response.status_code == 404
    assert response.json() == {"error": "Food entry not found"}

    negative = user_client.delete("/api/food/-99999999999999999999999")
    assert negative.status_code == 404
