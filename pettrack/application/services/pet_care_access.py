from dataclasses import dataclass
from typing import List, Tuple

from ..ports.appointments_repo import AppointmentFilter, AppointmentsRepository, AppointmentStatus
from ..ports.pet_repo import PetDto, PetRepository
from ..ports.user_repo import CurrentUser
from ...exceptions import ForbiddenError, NotFoundError, ValidationError

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# An appointment in any of these makes a doctor one of the pet's treating doctors
TREATING_STATUSES = [
    AppointmentStatus.PENDING.value,
    AppointmentStatus.CONFIRMED.value,
    AppointmentStatus.COMPLETED.value,
]


@dataclass
class PetCareAccess:
    """Who may read and write a pet's care history.

    Owners read their own pets. Doctors read and write for pets they have a
    live or completed appointment with. Admins have no access.
    """

    pet_repo: PetRepository
    appointments: AppointmentsRepository

    def is_treating_doctor(self, doctor_id: str, pet_id: str) -> bool:
        criteria = AppointmentFilter(pet_ids=[pet_id], doctor_id=doctor_id, statuses=TREATING_STATUSES)
        _, total = self.appointments.search(criteria, offset=0, limit=1)
        return total > 0

    def readable_pet(self, user: CurrentUser, pet_id: str, not_found: str = "Pet not found") -> PetDto:
        pet = self.pet_repo.get_by_id(pet_id)
        if not pet:
            raise NotFoundError(not_found)
        if user.is_pet_owner:
            # another owner's pet is reported as missing
            if pet.owner_id != user.id:
                raise NotFoundError(not_found)
            return pet
        if user.is_doctor:
            if not self.is_treating_doctor(user.id, pet_id):
                raise ForbiddenError("Only doctors treating this pet can access its records")
            return pet
        raise ForbiddenError("Not authorized to access pet records")

    def writable_pet(self, user: CurrentUser, pet_id: str) -> PetDto:
        if not user.is_doctor:
            raise ForbiddenError("Only doctors can add to a pet's records")
        pet = self.pet_repo.get_by_id(pet_id)
        if not pet:
            raise NotFoundError("Pet not found")
        if not self.is_treating_doctor(user.id, pet_id):
            raise ForbiddenError("Only doctors treating this pet can add to its records")
        return pet


def check_paging(page: int, limit: int) -> Tuple[int, int]:
    """Validate paging and return ``(offset, limit)``."""
    if page < 1:
        raise ValidationError("Page must be at least 1", errors=[{"field": "page", "message": "Page must be at least 1"}])
    if limit < 1 or limit > MAX_PAGE_SIZE:
        message = f"Limit must be between 1 and {MAX_PAGE_SIZE}"
        raise ValidationError(message, errors=[{"field": "limit", "message": message}])
    return (page - 1) * limit, limit


def clean_list(values: List[str], field: str, required: bool = True) -> List[str]:
    cleaned = [v.strip() for v in (values or [])]
    if any(not v for v in cleaned):
        message = "Entries cannot be empty"
        raise ValidationError(message, errors=[{"field": field, "message": message}])
    if required and not cleaned:
        message = "At least one entry is required"
        raise ValidationError(message, errors=[{"field": field, "message": message}])
    return cleaned
