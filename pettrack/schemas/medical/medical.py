# pettrack/schemas/medical/medical.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..common.common import CamelModel, Pagination, RequestModel, check_uuid
from ...application.ports.medical_records_repo import MedicalRecordDto


def _non_empty_entries(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return values
    cleaned = [v.strip() for v in values]
    if any(not v for v in cleaned):
        raise ValueError("Entries cannot be empty")
    return cleaned


class MedicalRecordCreate(RequestModel):
    symptoms: List[str] = Field(min_length=1)
    diagnosis: str = Field(min_length=1)
    treatment: List[str] = Field(min_length=1)
    prescribed_medications: Optional[List[str]] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    follow_up_date: Optional[datetime] = None
    appointment_id: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("symptoms", "treatment", "prescribed_medications")
    @classmethod
    def validate_entries(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _non_empty_entries(v)

    @field_validator("appointment_id")
    @classmethod
    def validate_appointment_id(cls, v: Optional[str]) -> Optional[str]:
        return check_uuid(v) if v is not None else v


class MedicalRecordUpdate(RequestModel):
    symptoms: Optional[List[str]] = Field(default=None, min_length=1)
    diagnosis: Optional[str] = Field(default=None, min_length=1)
    treatment: Optional[List[str]] = Field(default=None, min_length=1)
    prescribed_medications: Optional[List[str]] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    follow_up_date: Optional[datetime] = None

    @field_validator("symptoms", "treatment", "prescribed_medications")
    @classmethod
    def validate_entries(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _non_empty_entries(v)


class MedicalRecordResponse(CamelModel):
    id: str
    pet_id: str
    doctor_id: str
    doctor_name: Optional[str] = None
    appointment_id: Optional[str] = None
    date: datetime
    symptoms: List[str]
    diagnosis: str
    treatment: List[str]
    prescribed_medications: List[str]
    notes: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dto(cls, r: MedicalRecordDto) -> "MedicalRecordResponse":
        return cls(
            id=r.id,
            pet_id=r.pet_id,
            doctor_id=r.doctor_id,
            doctor_name=r.doctor_name,
            appointment_id=r.appointment_id,
            date=r.date,
            symptoms=r.symptoms,
            diagnosis=r.diagnosis,
            treatment=r.treatment,
            prescribed_medications=r.prescribed_medications,
            notes=r.notes,
            follow_up_date=r.follow_up_date,
            created_at=r.created_at,
            updated_at=r.updated_at,
        )


class MedicalRecordEnvelope(BaseModel):
    success: bool = True
    data: MedicalRecordResponse


class MedicalRecordPageEnvelope(BaseModel):
    success: bool = True
    data: List[MedicalRecordResponse]
    pagination: Pagination


class MedicalRecordListEnvelope(BaseModel):
    success: bool = True
    data: List[MedicalRecordResponse]
