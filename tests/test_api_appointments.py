from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from pettrack.core.config import Settings
from pettrack.database import build_engine
from pettrack.infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from pettrack.main import create_app
from pettrack.utils import create_jwt_token, generate_id

API = "/api/v1"
ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "zipCode": "62701", "country": "USA"}


def _future(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _book(client, world, days=2):
    return client.post(f"{API}/appointments", json={
        "petId": world["pet"]["id"],
        "doctorId": world["doctor"]["user"]["id"],
        "date": _future(days),
        "reason": "Annual checkup and vaccines",
    }, headers=_auth(world["owner"]["token"]))


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
    assert res.headers["X-Content-Type-Options"] == "nosniff"


def test_booking_lifecycle(client, world):
    res = _book(client, world)
    assert res.status_code == 201
    appt = res.json()["data"]
    assert appt["status"] == "pending"
    assert appt["petName"] == "Rex"
    assert appt["doctorName"] == "Dr. Who"

    doctor_headers = _auth(world["doctor"]["token"])
    res = client.patch(f"{API}/doctor/{appt['id']}/confirm", headers=doctor_headers)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "confirmed"

    res = client.patch(f"{API}/doctor/{appt['id']}/confirm", headers=doctor_headers)
    assert res.status_code == 409
    assert res.json()["success"] is False

    res = client.patch(f"{API}/doctor/{appt['id']}/complete", json={"notes": "Healthy"}, headers=doctor_headers)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "completed"
    assert res.json()["data"]["notes"] == "Healthy"

    res = client.patch(f"{API}/appointments/{appt['id']}/cancel", headers=_auth(world["owner"]["token"]))
    assert res.status_code == 400
    assert res.json()["message"] == "Cannot cancel a completed appointment"


def test_listing_is_shaped_by_role(client, world):
    _book(client, world, days=2)
    _book(client, world, days=3)

    res = client.get(f"{API}/appointments", headers=_auth(world["owner"]["token"]))
    body = res.json()
    assert res.status_code == 200
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 2, "pages": 1}

    res = client.get(f"{API}/doctor/upcoming", headers=_auth(world["doctor"]["token"]))
    assert res.json()["pagination"]["total"] == 2

    res = client.get(f"{API}/doctor/past", headers=_auth(world["doctor"]["token"]))
    assert res.json()["pagination"]["total"] == 0

    res = client.get(f"{API}/doctor/upcoming", headers=_auth(world["owner"]["token"]))
    assert res.status_code == 403


def test_reschedule_and_cancel(client, world):
    appt = _book(client, world).json()["data"]
    owner_headers = _auth(world["owner"]["token"])

    res = client.patch(f"{API}/appointments/{appt['id']}/reschedule", json={"date": _future(7)}, headers=owner_headers)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "pending"

    res = client.patch(f"{API}/appointments/{appt['id']}/cancel", headers=owner_headers)
    assert res.json()["data"]["status"] == "cancelled"

    res = client.patch(f"{API}/appointments/{appt['id']}/reschedule", json={"date": _future(8)}, headers=owner_headers)
    assert res.status_code == 400


def test_errors_use_the_envelope(client, world):
    res = client.get(f"{API}/appointments")
    assert res.status_code == 401
    assert res.json()["success"] is False

    res = client.get(f"{API}/appointments/not-a-uuid", headers=_auth(world["owner"]["token"]))
    assert res.status_code == 400

    res = client.post(f"{API}/appointments", json={
        "petId": world["pet"]["id"],
        "doctorId": world["doctor"]["user"]["id"],
        "date": _future(-1),
        "reason": "short",
    }, headers=_auth(world["owner"]["token"]))
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert {"date", "reason"} <= fields


def test_pet_with_history_cannot_be_deleted(client, world):
    _book(client, world)
    res = client.delete(f"{API}/pets/{world['pet']['id']}", headers=_auth(world["owner"]["token"]))
    assert res.status_code == 400


def test_dates_come_back_in_utc(client, world):
    appt = _book(client, world).json()["data"]
    res = client.get(f"{API}/appointments/{appt['id']}", headers=_auth(world["owner"]["token"]))
    body = res.json()["data"]
    for key in ("date", "createdAt", "updatedAt"):
        parsed = datetime.fromisoformat(body[key].replace("Z", "+00:00"))
        assert parsed.utcoffset() == timedelta(0)


def test_emails_are_validated_and_lowercased(client):
    res = client.post(f"{API}/auth/register/pet-owner", json={
        "email": "not-an-email", "password": "Str0ng!Pass", "firstName": "Bo", "lastName": "Ng",
        "phone": "1234567890", "address": ADDRESS,
    })
    assert res.status_code == 400
    assert "email" in {e["field"] for e in res.json()["errors"]}

    res = client.post(f"{API}/auth/register/pet-owner", json={
        "email": "Bo.Ng@VetMail.COM", "password": "Str0ng!Pass", "firstName": "Bo", "lastName": "Ng",
        "phone": "1234567890", "address": ADDRESS,
    })
    assert res.status_code == 201
    assert res.json()["data"]["user"]["email"] == "bo.ng@vetmail.com"

    res = client.post(f"{API}/auth/login", json={"email": "BO.NG@vetmail.com", "password": "Str0ng!Pass"})
    assert res.status_code == 200


def _exploding_app(monkeypatch, debug: bool):
    def explode(self, *args, **kwargs):
        raise RuntimeError("db exploded: secret-dsn")

    monkeypatch.setattr(SqlAppointmentsRepository, "search", explode)
    app = create_app(Settings(DEBUG=debug, RATE_LIMIT_ENABLED=False, DATABASE_URL="sqlite://"))
    app.state.engine = build_engine("sqlite://")
    return app


@pytest.mark.parametrize("debug", [False, True])
def test_unexpected_errors_become_a_500_envelope(monkeypatch, debug):
    app = _exploding_app(monkeypatch, debug)
    token = create_jwt_token(generate_id(), "admin")
    with TestClient(app, raise_server_exceptions=False) as c:
        res = c.get(f"{API}/appointments", headers=_auth(token))
    app.state.engine.dispose()

    assert res.status_code == 500
    body = res.json()
    assert body["success"] is False
    if debug:
        assert "db exploded: secret-dsn" in body["message"]
    else:
        assert body["message"] == "Internal server error"
        assert "secret-dsn" not in res.text


def test_missing_and_bad_tokens_are_401(client):
    res = client.get(f"{API}/pets")
    assert res.status_code == 401
    assert res.json()["message"] == "Authentication required"

    res = client.get(f"{API}/pets", headers=_auth("garbage"))
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid or expired token"
