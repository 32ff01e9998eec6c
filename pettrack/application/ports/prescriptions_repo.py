from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Protocol, Tuple


@dataclass
class MedicationDto:
    name: str
    dosage: str
    frequency: str
    duration: str


@dataclass
class PrescriptionDto:
    id: str
    pet_id: str
    doctor_id: str
    date: datetime
    medications: List[MedicationDto] = field(default_factory=list)
    instructions: Optional[str] = None
    created_at: Optional[datetime] = None
    pet_name: Optional[str] = None
    doctor_name: Optional[str] = None


class PrescriptionsRepository(Protocol):
    def create(self, pet_id: str, doctor_id: str, date: datetime, medications: List[MedicationDto], instructions: Optional[str]) -> PrescriptionDto:
        ...

    def get_by_id(self, prescription_id: str) -> Optional[PrescriptionDto]:
        ...

    def list_for_pet(self, pet_id: str, offset: int, limit: int) -> Tuple[List[PrescriptionDto], int]:
        """Newest first."""
        ...
