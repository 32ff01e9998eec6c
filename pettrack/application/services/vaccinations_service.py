import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from ..ports.audit_logger import AuditLogger
from ..ports.user_repo import CurrentUser
from ..ports.vaccinations_repo import VaccinationDto, VaccinationsRepository
from .pet_care_access import DEFAULT_PAGE_SIZE, PetCareAccess, check_paging
from ...exceptions import ForbiddenError, ValidationError
from ...utils import to_utc, utcnow

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 30


def _field_error(field: str, message: str) -> ValidationError:
    return ValidationError(message, errors=[{"field": field, "message": message}])


@dataclass
class VaccinationsService:
    repo: VaccinationsRepository
    access: PetCareAccess
    audit: Optional[AuditLogger] = None
    clock: Callable[[], datetime] = utcnow

    def add(
        self,
        user: CurrentUser,
        pet_id: str,
        name: str,
        next_due_date: datetime,
        date: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> VaccinationDto:
        self.access.writable_pet(user, pet_id)
        name = (name or "").strip()
        if not name:
            raise _field_error("name", "Vaccine name is required")
        given = to_utc(date) if date else self.clock()
        if given > self.clock():
            raise _field_error("date", "Vaccination date cannot be in the future")
        next_due_date = to_utc(next_due_date)
        if next_due_date <= given:
            raise _field_error("nextDueDate", "Next due date must be after the vaccination date")

        vaccination = self.repo.create(pet_id, user.id, name, given, next_due_date, notes.strip() if notes else None)
        logger.info(f"Vaccination {vaccination.id} ({name}) recorded by {user.id} for pet {pet_id}")
        if self.audit is not None:
            self.audit.log(
                action="vaccination.create",
                actor_id=user.id,
                role=user.role.value,
                details={"vaccinationId": vaccination.id, "petId": pet_id, "nextDueDate": next_due_date.isoformat()},
            )
        return vaccination

    def list_for_pet(self, user: CurrentUser, pet_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Tuple[List[VaccinationDto], int]:
        offset, limit = check_paging(page, limit)
        self.access.readable_pet(user, pet_id)
        return self.repo.list_for_pet(pet_id, offset, limit)

    def upcoming(self, user: CurrentUser, days: int = UPCOMING_WINDOW_DAYS) -> List[VaccinationDto]:
        """Doses due within ``days`` for the caller's pets, overdue ones included."""
        if not user.is_pet_owner:
            raise ForbiddenError("Only pet owners can view upcoming vaccinations")
        pet_ids = self.access.pet_repo.ids_for_owner(user.id)
        if not pet_ids:
            return []
        return self.repo.due_for_pets(list(pet_ids), self.clock() + timedelta(days=days))
