# pettrack/schemas/prescriptions/prescription.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..common.common import CamelModel, Pagination, RequestModel
from ...application.ports.prescriptions_repo import MedicationDto, PrescriptionDto


class MedicationIn(RequestModel):
    name: str = Field(min_length=1)
    dosage: str = Field(min_length=1)
    frequency: str = Field(min_length=1)
    duration: str = Field(min_length=1)

    def to_dto(self) -> MedicationDto:
        return MedicationDto(name=self.name, dosage=self.dosage, frequency=self.frequency, duration=self.duration)


class PrescriptionCreate(RequestModel):
    medications: List[MedicationIn] = Field(min_length=1)
    instructions: Optional[str] = Field(default=None, max_length=1000)


class MedicationOut(CamelModel):
    name: str
    dosage: str
    frequency: str
    duration: str


class PrescriptionResponse(CamelModel):
    id: str
    pet_id: str
    pet_name: Optional[str] = None
    doctor_id: str
    doctor_name: Optional[str] = None
    date: datetime
    medications: List[MedicationOut]
    instructions: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dto(cls, p: PrescriptionDto) -> "PrescriptionResponse":
        return cls(
            id=p.id,
            pet_id=p.pet_id,
            pet_name=p.pet_name,
            doctor_id=p.doctor_id,
            doctor_name=p.doctor_name,
            date=p.date,
            medications=[
                MedicationOut(name=m.name, dosage=m.dosage, frequency=m.frequency, duration=m.duration)
                for m in p.medications
            ],
            instructions=p.instructions,
            created_at=p.created_at,
        )


class PrescriptionEnvelope(BaseModel):
    success: bool = True
    data: PrescriptionResponse


class PrescriptionPageEnvelope(BaseModel):
    success: bool = True
    data: List[PrescriptionResponse]
    pagination: Pagination
