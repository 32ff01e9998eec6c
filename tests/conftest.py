import pytest
from fastapi.testclient import TestClient

from pettrack.core.config import Settings
from pettrack.database import build_engine
from pettrack.main import create_app

PASSWORD = "Str0ng!Pass"
ADMIN_EMAIL = "admin@vet.com"
ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "zipCode": "62701", "country": "USA"}
API = "/api/v1"


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client():
    settings = Settings(
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD=PASSWORD,
        RATE_LIMIT_ENABLED=False,
        DATABASE_URL="sqlite://",
    )
    app = create_app(settings)
    engine = build_engine("sqlite://")
    app.state.engine = engine
    with TestClient(app) as c:
        yield c
    engine.dispose()


@pytest.fixture
def world(client):
    """Admin, a hospital, a doctor, and an owner with one pet."""
    admin = client.post(f"{API}/auth/login", json={"email": ADMIN_EMAIL, "password": PASSWORD}).json()["data"]
    hospital = client.post(
        f"{API}/hospitals",
        json={"name": "City Vet", "address": ADDRESS, "contactNumber": "1234567890", "email": "city@vet.com"},
        headers=_auth(admin["token"]),
    ).json()["data"]

    doctor = client.post(f"{API}/auth/register/doctor", json={
        "email": "doc@vet.com", "password": PASSWORD, "name": "Dr. Who", "specialization": "Surgery",
        "hospitalId": hospital["id"], "contactNumber": "1234567890",
    }).json()["data"]
    owner = client.post(f"{API}/auth/register/pet-owner", json={
        "email": "ann@x.com", "password": PASSWORD, "firstName": "Ann", "lastName": "Lee",
        "phone": "1234567890", "address": ADDRESS,
    }).json()["data"]
    pet = client.post(
        f"{API}/pets",
        json={"name": "Rex", "type": "dog", "breed": "Labrador", "age": 3, "weight": 20.5},
        headers=_auth(owner["token"]),
    ).json()["data"]
    return {"admin": admin, "hospital": hospital, "doctor": doctor, "owner": owner, "pet": pet}
