from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Tuple


@dataclass
class VaccinationDto:
    id: str
    pet_id: str
    administered_by: str
    name: str
    date: datetime
    next_due_date: datetime
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    pet_name: Optional[str] = None
    administered_by_name: Optional[str] = None


class VaccinationsRepository(Protocol):
    def create(self, pet_id: str, administered_by: str, name: str, date: datetime, next_due_date: datetime, notes: Optional[str]) -> VaccinationDto:
        ...

    def list_for_pet(self, pet_id: str, offset: int, limit: int) -> Tuple[List[VaccinationDto], int]:
        """Newest first."""
        ...

    def due_for_pets(self, pet_ids: List[str], due_before: datetime) -> List[VaccinationDto]:
        """Vaccinations of ``pet_ids`` whose next dose is due on or before ``due_before``, soonest first."""
        ...
