from datetime import datetime, timedelta, timezone

API = "/api/v1"
PASSWORD = "Str0ng!Pass"


def _future(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _treat(client, world):
    """Book the doctor for the pet so they become one of its treating doctors."""
    res = client.post(f"{API}/appointments", json={
        "petId": world["pet"]["id"],
        "doctorId": world["doctor"]["user"]["id"],
        "date": _future(1),
        "reason": "Persistent cough for a week",
    }, headers=_auth(world["owner"]["token"]))
    assert res.status_code == 201
    return res.json()["data"]


def _second_doctor(client, world):
    return client.post(f"{API}/auth/register/doctor", json={
        "email": "doc2@vet.com", "password": PASSWORD, "name": "Dr. No", "specialization": "Dentistry",
        "hospitalId": world["hospital"]["id"], "contactNumber": "1234567890",
    }).json()["data"]


def test_medical_records_flow(client, world):
    pet_id = world["pet"]["id"]
    doctor = _auth(world["doctor"]["token"])
    owner = _auth(world["owner"]["token"])
    record_body = {"symptoms": ["cough"], "diagnosis": "Kennel cough", "treatment": ["rest", "fluids"]}

    # no appointment yet
    res = client.post(f"{API}/medical/pets/{pet_id}/records", json=record_body, headers=doctor)
    assert res.status_code == 403

    appt = _treat(client, world)
    res = client.post(
        f"{API}/medical/pets/{pet_id}/records",
        json={**record_body, "appointmentId": appt["id"], "followUpDate": _future(14)},
        headers=doctor,
    )
    assert res.status_code == 201
    record = res.json()["data"]
    assert record["doctorName"] == "Dr. Who"
    assert record["treatment"] == ["rest", "fluids"]

    res = client.get(f"{API}/medical/pets/{pet_id}/records", headers=owner)
    assert res.status_code == 200
    assert res.json()["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    res = client.get(f"{API}/medical/appointments/{appt['id']}/records", headers=owner)
    assert [r["id"] for r in res.json()["data"]] == [record["id"]]

    res = client.patch(f"{API}/medical/records/{record['id']}", json={"diagnosis": "Bronchitis", "followUpDate": None}, headers=doctor)
    assert res.status_code == 200
    assert res.json()["data"]["diagnosis"] == "Bronchitis"
    assert res.json()["data"]["followUpDate"] is None

    res = client.patch(f"{API}/medical/records/{record['id']}", json={"diagnosis": "Flu"}, headers=owner)
    assert res.status_code == 403

    res = client.get(f"{API}/medical/records/{record['id']}", headers=_auth(world["admin"]["token"]))
    assert res.status_code == 403

    res = client.post(f"{API}/medical/pets/{pet_id}/records", json={**record_body, "symptoms": []}, headers=doctor)
    assert res.status_code == 400


def test_records_are_hidden_from_other_owners_and_doctors(client, world):
    pet_id = world["pet"]["id"]
    _treat(client, world)
    record = client.post(
        f"{API}/medical/pets/{pet_id}/records",
        json={"symptoms": ["limp"], "diagnosis": "Sprain", "treatment": ["rest"]},
        headers=_auth(world["doctor"]["token"]),
    ).json()["data"]

    stranger = client.post(f"{API}/auth/register/pet-owner", json={
        "email": "zed@x.com", "password": PASSWORD, "firstName": "Zed", "lastName": "Ray",
        "phone": "1234567890",
        "address": {"street": "2 Elm St", "city": "Springfield", "state": "IL", "zipCode": "62701", "country": "USA"},
    }).json()["data"]
    res = client.get(f"{API}/medical/records/{record['id']}", headers=_auth(stranger["token"]))
    assert res.status_code == 404
    assert res.json()["message"] == "Medical record not found"

    other_doctor = _second_doctor(client, world)
    res = client.get(f"{API}/medical/pets/{pet_id}/records", headers=_auth(other_doctor["token"]))
    assert res.status_code == 403


def test_prescriptions_flow(client, world):
    pet_id = world["pet"]["id"]
    _treat(client, world)
    res = client.post(f"{API}/prescriptions/pets/{pet_id}/prescriptions", json={
        "medications": [{"name": "Amoxicillin", "dosage": "250mg", "frequency": "twice daily", "duration": "7 days"}],
        "instructions": "Give with food",
    }, headers=_auth(world["doctor"]["token"]))
    assert res.status_code == 201
    prescription = res.json()["data"]
    assert prescription["petName"] == "Rex"
    assert prescription["medications"][0]["dosage"] == "250mg"

    owner = _auth(world["owner"]["token"])
    res = client.get(f"{API}/prescriptions/pets/{pet_id}/prescriptions", headers=owner)
    assert res.json()["pagination"]["total"] == 1

    res = client.get(f"{API}/prescriptions/{prescription['id']}/print", headers=owner)
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/plain")
    assert "Doctor: Dr. Who" in res.text
    assert "  - Amoxicillin: 250mg, twice daily for 7 days" in res.text

    res = client.post(f"{API}/prescriptions/pets/{pet_id}/prescriptions", json={"medications": []},
                      headers=_auth(world["doctor"]["token"]))
    assert res.status_code == 400


def test_vaccinations_flow(client, world):
    pet_id = world["pet"]["id"]
    _treat(client, world)
    doctor = _auth(world["doctor"]["token"])
    res = client.post(f"{API}/vaccinations/pets/{pet_id}/vaccinations",
                      json={"name": "Rabies", "nextDueDate": _future(10)}, headers=doctor)
    assert res.status_code == 201
    assert res.json()["data"]["administeredByName"] == "Dr. Who"
    client.post(f"{API}/vaccinations/pets/{pet_id}/vaccinations",
                json={"name": "Leptospirosis", "nextDueDate": _future(200)}, headers=doctor)

    res = client.post(f"{API}/vaccinations/pets/{pet_id}/vaccinations",
                      json={"name": "Parvo", "date": _future(1), "nextDueDate": _future(30)}, headers=doctor)
    assert res.status_code == 400

    owner = _auth(world["owner"]["token"])
    res = client.get(f"{API}/vaccinations/pets/{pet_id}/vaccinations", headers=owner)
    assert res.json()["pagination"]["total"] == 2

    res = client.get(f"{API}/vaccinations/upcoming", headers=owner)
    assert res.status_code == 200
    assert [v["name"] for v in res.json()["data"]] == ["Rabies"]

    res = client.get(f"{API}/vaccinations/upcoming", headers=doctor)
    assert res.status_code == 403
