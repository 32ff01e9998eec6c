from datetime import datetime, timezone
from typing import Optional

import pytest

from pettrack.application.ports.hospital_repo import HospitalDto
from pettrack.application.ports.user_repo import AdminDto, DoctorDto, PetOwnerDto, UserRepository, UserDto
from pettrack.application.services.auth_service import AuthService
from pettrack.exceptions import BadRequestError, NotFoundError, UnauthorizedError, ValidationError
from pettrack.utils import decode_jwt_token, hash_password, to_utc, verify_password

PASSWORD = "Str0ng!Pass"
ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "zipCode": "62701"}


class FakeUserRepo(UserRepository):
    def __init__(self):
        self.users = {}
        self.hashes = {}

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        return self.users.get(user_id)

    def get_credentials(self, email: str):
        for u in self.users.values():
            if u.email == email:
                return u, self.hashes[u.id]
        return None

    def email_exists(self, email: str) -> bool:
        return any(u.email == email for u in self.users.values())

    def _store(self, user, password_hash):
        self.users[user.id] = user
        self.hashes[user.id] = password_hash
        return user

    def create_pet_owner(self, email, password_hash, first_name, last_name, phone, address):
        uid = f"u{len(self.users) + 1}"
        return self._store(PetOwnerDto(uid, email, first_name, last_name, phone, address, datetime.now(timezone.utc)), password_hash)

    def create_doctor(self, email, password_hash, name, specialization, hospital_id, contact_number):
        uid = f"u{len(self.users) + 1}"
        return self._store(DoctorDto(uid, email, name, specialization, hospital_id, contact_number, datetime.now(timezone.utc)), password_hash)

    def create_admin(self, email, password_hash):
        uid = f"u{len(self.users) + 1}"
        return self._store(AdminDto(uid, email, datetime.now(timezone.utc)), password_hash)

    def list_doctors_for_hospital(self, hospital_id):
        return [u for u in self.users.values() if isinstance(u, DoctorDto) and u.hospital_id == hospital_id]


class FakeHospitalRepo:
    def __init__(self):
        self.hospitals = {"h1": HospitalDto("h1", "City Vet", ADDRESS, "1234567890", "city@vet.com")}

    def get_by_id(self, hospital_id):
        return self.hospitals.get(hospital_id)


def make_service():
    return AuthService(user_repo=FakeUserRepo(), hospital_repo=FakeHospitalRepo())


def test_register_pet_owner_returns_token_with_role():
    svc = make_service()
    user, token = svc.register_pet_owner("ann@x.com", PASSWORD, "Ann", "Lee", "1234567890", ADDRESS)
    assert isinstance(user, PetOwnerDto)
    payload = decode_jwt_token(token)
    assert payload["sub"] == user.id
    assert payload["role"] == "petOwner"


def test_register_rejects_duplicate_email_and_weak_password():
    svc = make_service()
    svc.register_pet_owner("ann@x.com", PASSWORD, "Ann", "Lee", "1234567890", ADDRESS)
    with pytest.raises(BadRequestError):
        svc.register_pet_owner("ann@x.com", PASSWORD, "Ann", "Lee", "1234567890", ADDRESS)
    with pytest.raises(ValidationError):
        svc.register_pet_owner("bob@x.com", "weakpass", "Bob", "Lee", "1234567890", ADDRESS)


def test_register_doctor_requires_existing_hospital():
    svc = make_service()
    doctor, token = svc.register_doctor("doc@vet.com", PASSWORD, "Dr. Who", "Surgery", "h1", "1234567890")
    assert isinstance(doctor, DoctorDto)
    assert decode_jwt_token(token)["role"] == "doctor"
    with pytest.raises(NotFoundError):
        svc.register_doctor("doc2@vet.com", PASSWORD, "Dr. No", "Surgery", "h9", "1234567890")


def test_login_checks_password():
    svc = make_service()
    user, _ = svc.register_pet_owner("ann@x.com", PASSWORD, "Ann", "Lee", "1234567890", ADDRESS)
    logged_in, token = svc.login("ann@x.com", PASSWORD)
    assert logged_in.id == user.id
    assert decode_jwt_token(token)["sub"] == user.id
    with pytest.raises(UnauthorizedError):
        svc.login("ann@x.com", "Wr0ng!Pass")
    with pytest.raises(UnauthorizedError):
        svc.login("nobody@x.com", PASSWORD)


def test_get_profile_and_ensure_admin_is_idempotent():
    svc = make_service()
    admin = svc.ensure_admin("admin@vet.com", PASSWORD)
    assert isinstance(admin, AdminDto)
    assert svc.ensure_admin("admin@vet.com", PASSWORD) is None
    assert svc.get_profile(admin.id).email == "admin@vet.com"
    with pytest.raises(NotFoundError):
        svc.get_profile("missing")


def test_passwords_are_stored_as_bcrypt_hashes():
    svc = make_service()
    user, _ = svc.register_pet_owner("ann@x.com", PASSWORD, "Ann", "Lee", "1234567890", ADDRESS)
    stored = svc.user_repo.hashes[user.id]
    assert stored.startswith("$2b$")
    assert PASSWORD not in stored
    assert verify_password(PASSWORD, stored)


def test_verify_password_rejects_unknown_hash_formats():
    assert hash_password(PASSWORD) != hash_password(PASSWORD)
    assert verify_password(PASSWORD, "") is False
    assert verify_password(PASSWORD, "not-a-hash") is False
    assert verify_password(PASSWORD, "pbkdf2_sha256$100000$abc$def") is False


def test_to_utc_makes_naive_values_aware():
    naive = datetime(2030, 1, 1, 12, 0)
    assert to_utc(naive) == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert to_utc(naive).tzinfo is timezone.utc
    assert to_utc(None) is None
