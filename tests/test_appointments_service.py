from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from pettrack.application.ports.appointments_repo import AppointmentDto
from pettrack.application.ports.pet_repo import PetDto
from pettrack.application.ports.user_repo import CurrentUser, DoctorDto, PetOwnerDto, UserRole
from pettrack.application.services.appointments_service import AppointmentsService
from pettrack.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError, ValidationError

NOW = datetime(2030, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

OWNER = CurrentUser(id="owner-1", role=UserRole.PET_OWNER)
OTHER_OWNER = CurrentUser(id="owner-2", role=UserRole.PET_OWNER)
DOCTOR = CurrentUser(id="doc-1", role=UserRole.DOCTOR)
OTHER_DOCTOR = CurrentUser(id="doc-2", role=UserRole.DOCTOR)
ADMIN = CurrentUser(id="admin-1", role=UserRole.ADMIN)


class FakeApptRepo:
    def __init__(self):
        self._id = 1
        self.appts = {}
        self.searches = []
        self.lose_next_write = False

    def create(self, pet_id, doctor_id, created_by, date, reason, notes):
        a = AppointmentDto(
            id=f"a{self._id}", pet_id=pet_id, doctor_id=doctor_id, created_by=created_by,
            date=date, status="pending", reason=reason, notes=notes, created_at=NOW, updated_at=NOW,
        )
        self.appts[a.id] = a
        self._id += 1
        return a

    def get_by_id(self, appointment_id):
        return self.appts.get(appointment_id)

    def search(self, criteria, offset, limit, descending=False):
        self.searches.append(criteria)
        rows = list(self.appts.values())
        if criteria.pet_ids is not None:
            rows = [a for a in rows if a.pet_id in criteria.pet_ids]
        if criteria.doctor_id is not None:
            rows = [a for a in rows if a.doctor_id == criteria.doctor_id]
        if criteria.statuses is not None:
            rows = [a for a in rows if a.status in criteria.statuses]
        if criteria.date_gte is not None:
            rows = [a for a in rows if a.date >= criteria.date_gte]
        if criteria.date_lte is not None:
            rows = [a for a in rows if a.date <= criteria.date_lte]
        if criteria.date_lt is not None:
            rows = [a for a in rows if a.date < criteria.date_lt]
        rows.sort(key=lambda a: (a.date, a.id), reverse=descending)
        return rows[offset:offset + limit], len(rows)

    def update_if_status(self, appointment_id, allowed_statuses, values):
        a = self.appts.get(appointment_id)
        if self.lose_next_write:
            # another request moved the appointment first
            self.lose_next_write = False
            return None
        if a is None or a.status not in allowed_statuses:
            return None
        updated = replace(a, **values)
        self.appts[appointment_id] = updated
        return updated


class FakePetRepo:
    def __init__(self):
        self.pets = {
            "p1": PetDto("p1", "Rex", "dog", "Lab", 3, 20.0, "owner-1", NOW, NOW),
            "p2": PetDto("p2", "Tom", "cat", "Tabby", 2, 4.0, "owner-1", NOW, NOW),
            "p3": PetDto("p3", "Kiwi", "bird", "Parrot", 1, 0.3, "owner-2", NOW, NOW),
        }

    def get_by_id(self, pet_id):
        return self.pets.get(pet_id)

    def ids_for_owner(self, owner_id):
        return [p.id for p in self.pets.values() if p.owner_id == owner_id]


class FakeUserRepo:
    def __init__(self):
        self.users = {
            "doc-1": DoctorDto("doc-1", "d1@vet.com", "Dr. One", "Surgery", "h1", "1234567890", NOW),
            "doc-2": DoctorDto("doc-2", "d2@vet.com", "Dr. Two", "Dental", "h1", "1234567890", NOW),
            "owner-1": PetOwnerDto("owner-1", "o1@x.com", "Ann", "Lee", "1234567890", {}, NOW),
        }

    def get_by_id(self, user_id):
        return self.users.get(user_id)


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, actor_id, role, appointment_id=None, success=True, details=None):
        self.entries.append((action, actor_id, appointment_id))


def make_service():
    return AppointmentsService(
        repo=FakeApptRepo(), pet_repo=FakePetRepo(), user_repo=FakeUserRepo(),
        audit=FakeAudit(), clock=lambda: NOW,
    )


def book(svc, pet_id="p1", doctor_id="doc-1", days=1, user=OWNER):
    return svc.create(user, pet_id, doctor_id, NOW + timedelta(days=days), "Annual checkup visit")


def test_create_starts_pending_and_audits():
    svc = make_service()
    a = book(svc)
    assert a.status == "pending"
    assert a.created_by == "owner-1"
    assert svc.audit.entries == [("appointment.create", "owner-1", a.id)]


def test_create_rejects_past_date_and_short_reason():
    svc = make_service()
    with pytest.raises(ValidationError):
        svc.create(OWNER, "p1", "doc-1", NOW - timedelta(minutes=1), "Annual checkup visit")
    with pytest.raises(ValidationError):
        svc.create(OWNER, "p1", "doc-1", NOW + timedelta(days=1), "short")


def test_create_checks_pet_ownership_and_doctor():
    svc = make_service()
    with pytest.raises(ForbiddenError):
        book(svc, pet_id="p3")
    with pytest.raises(NotFoundError):
        book(svc, pet_id="missing")
    with pytest.raises(NotFoundError):
        book(svc, doctor_id="owner-1")
    with pytest.raises(ForbiddenError):
        book(svc, user=DOCTOR)


def test_full_lifecycle_confirm_then_complete():
    svc = make_service()
    a = book(svc)
    assert svc.confirm(DOCTOR, a.id).status == "confirmed"
    done = svc.complete(DOCTOR, a.id, notes="All good")
    assert done.status == "completed"
    assert done.notes == "All good"
    with pytest.raises(BadRequestError):
        svc.cancel(OWNER, a.id)


def test_confirm_only_by_assigned_doctor_and_only_from_pending():
    svc = make_service()
    a = book(svc)
    with pytest.raises(ForbiddenError):
        svc.confirm(OTHER_DOCTOR, a.id)
    with pytest.raises(ForbiddenError):
        svc.confirm(OWNER, a.id)
    svc.confirm(DOCTOR, a.id)
    with pytest.raises(ConflictError):
        svc.confirm(DOCTOR, a.id)


def test_complete_from_pending_is_allowed_but_not_twice():
    svc = make_service()
    a = book(svc)
    assert svc.complete(DOCTOR, a.id).status == "completed"
    with pytest.raises(BadRequestError):
        svc.complete(DOCTOR, a.id)


def test_cancel_by_creator_and_terminal_rules():
    svc = make_service()
    a = book(svc)
    with pytest.raises(ForbiddenError):
        svc.cancel(OTHER_OWNER, a.id)
    assert svc.cancel(OWNER, a.id).status == "cancelled"
    with pytest.raises(BadRequestError):
        svc.cancel(DOCTOR, a.id)
    with pytest.raises(BadRequestError):
        svc.complete(DOCTOR, a.id)
    with pytest.raises(ConflictError):
        svc.confirm(DOCTOR, a.id)


def test_reschedule_keeps_status_and_rejects_terminal():
    svc = make_service()
    a = book(svc)
    svc.confirm(DOCTOR, a.id)
    moved = svc.reschedule(OWNER, a.id, NOW + timedelta(days=5))
    assert moved.status == "confirmed"
    assert moved.date == NOW + timedelta(days=5)
    with pytest.raises(ValidationError):
        svc.reschedule(OWNER, a.id, NOW - timedelta(days=1))
    svc.cancel(DOCTOR, a.id)
    with pytest.raises(BadRequestError):
        svc.reschedule(OWNER, a.id, NOW + timedelta(days=6))


def test_update_status_goes_through_transition_rules():
    svc = make_service()
    a = book(svc)
    with pytest.raises(ForbiddenError):
        svc.update(OWNER, a.id, status="confirmed")
    with pytest.raises(BadRequestError):
        svc.update(DOCTOR, a.id, status="pending")
    updated = svc.update(DOCTOR, a.id, status="confirmed", notes="Bring records")
    assert updated.status == "confirmed"
    assert updated.notes == "Bring records"
    with pytest.raises(ForbiddenError):
        svc.update(OTHER_DOCTOR, a.id, reason="Something else entirely")


def test_lost_race_reports_conflict():
    svc = make_service()
    a = book(svc)
    svc.repo.lose_next_write = True
    with pytest.raises(ConflictError):
        svc.confirm(DOCTOR, a.id)
    assert svc.repo.get_by_id(a.id).status == "pending"


def test_get_authorization():
    svc = make_service()
    a = book(svc)
    assert svc.get(OWNER, a.id).id == a.id
    assert svc.get(DOCTOR, a.id).id == a.id
    assert svc.get(ADMIN, a.id).id == a.id
    with pytest.raises(ForbiddenError):
        svc.get(OTHER_OWNER, a.id)
    with pytest.raises(ForbiddenError):
        svc.get(OTHER_DOCTOR, a.id)
    with pytest.raises(NotFoundError):
        svc.get(ADMIN, "nope")


def test_owner_listing_is_limited_to_owned_pets():
    svc = make_service()
    book(svc, pet_id="p1")
    book(svc, pet_id="p2", days=2)
    other = AppointmentsService(repo=svc.repo, pet_repo=svc.pet_repo, user_repo=svc.user_repo, clock=lambda: NOW)
    other.create(OTHER_OWNER, "p3", "doc-1", NOW + timedelta(days=3), "Wing feather check")

    page = svc.list_appointments(OWNER)
    assert page.total == 2
    assert [a.pet_id for a in page.items] == ["p1", "p2"]

    narrowed = svc.list_appointments(OWNER, pet_ids=["p2", "p3"])
    assert [a.pet_id for a in narrowed.items] == ["p2"]

    assert svc.list_appointments(OWNER, pet_ids=["p3"]).total == 0


def test_doctor_listing_is_pinned_to_self():
    svc = make_service()
    book(svc, doctor_id="doc-1")
    book(svc, doctor_id="doc-2", days=2)
    assert svc.list_appointments(DOCTOR).total == 1
    assert svc.list_appointments(DOCTOR, doctor_id="doc-2").total == 0
    assert svc.list_appointments(ADMIN).total == 2
    assert svc.list_appointments(ADMIN, doctor_id="doc-2").total == 1


def test_listing_pagination_and_validation():
    svc = make_service()
    for day in range(1, 6):
        book(svc, days=day)
    page = svc.list_appointments(OWNER, page=2, limit=2)
    assert page.total == 5
    assert page.pages == 3
    assert len(page.items) == 2
    assert page.pagination() == {"page": 2, "limit": 2, "total": 5, "pages": 3}
    with pytest.raises(ValidationError):
        svc.list_appointments(OWNER, limit=101)
    with pytest.raises(ValidationError):
        svc.list_appointments(OWNER, status="missed")


def test_upcoming_and_past_for_doctor():
    svc = make_service()
    soon = book(svc, days=1)
    later = book(svc, days=2)
    # past appointments are seeded directly since booking requires a future date
    old = svc.repo.create("p1", "doc-1", "owner-1", NOW - timedelta(days=3), "Old visit here", None)
    svc.repo.appts[old.id] = replace(old, status="completed")
    older = svc.repo.create("p1", "doc-1", "owner-1", NOW - timedelta(days=5), "Older visit here", None)
    svc.repo.appts[older.id] = replace(older, status="cancelled")

    upcoming = svc.upcoming(DOCTOR)
    assert [a.id for a in upcoming.items] == [soon.id, later.id]

    past = svc.past(DOCTOR)
    assert [a.id for a in past.items] == [old.id, older.id]

    with pytest.raises(ForbiddenError):
        svc.upcoming(OWNER)


def test_list_for_doctor_filters_status():
    svc = make_service()
    a = book(svc)
    book(svc, days=2)
    svc.confirm(DOCTOR, a.id)
    assert svc.list_for_doctor(DOCTOR, status="confirmed").total == 1
    assert svc.list_for_doctor(DOCTOR).total == 2
