from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple


@dataclass
class MedicalRecordDto:
    id: str
    pet_id: str
    doctor_id: str
    appointment_id: Optional[str]
    date: datetime
    symptoms: List[str]
    diagnosis: str
    treatment: List[str]
    prescribed_medications: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    doctor_name: Optional[str] = None


class MedicalRecordsRepository(Protocol):
    def create(
        self,
        pet_id: str,
        doctor_id: str,
        appointment_id: Optional[str],
        date: datetime,
        symptoms: List[str],
        diagnosis: str,
        treatment: List[str],
        prescribed_medications: List[str],
        notes: Optional[str],
        follow_up_date: Optional[datetime],
    ) -> MedicalRecordDto:
        ...

    def get_by_id(self, record_id: str) -> Optional[MedicalRecordDto]:
        ...

    def list_for_pet(self, pet_id: str, offset: int, limit: int) -> Tuple[List[MedicalRecordDto], int]:
        """Newest first."""
        ...

    def list_for_appointment(self, appointment_id: str) -> List[MedicalRecordDto]:
        ...

    def update(self, record_id: str, fields: Dict[str, Any]) -> Optional[MedicalRecordDto]:
        ...
