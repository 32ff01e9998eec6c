# pettrack/schemas/appointments/appointment.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..common.common import CamelModel, Pagination, RequestModel, check_uuid
from ...application.ports.appointments_repo import AppointmentDto, AppointmentStatus
from ...utils import to_utc, utcnow


def _must_be_future(value: datetime, message: str) -> datetime:
    if to_utc(value) <= utcnow():
        raise ValueError(message)
    return value


class AppointmentCreate(RequestModel):
    pet_id: str
    doctor_id: str
    date: datetime
    reason: str = Field(min_length=10, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("pet_id", "doctor_id")
    @classmethod
    def validate_ids(cls, v: str) -> str:
        return check_uuid(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: datetime) -> datetime:
        return _must_be_future(v, "Appointment date must be in the future")


class AppointmentUpdate(RequestModel):
    date: Optional[datetime] = None
    reason: Optional[str] = Field(default=None, min_length=10, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[AppointmentStatus] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        return _must_be_future(v, "Appointment date must be in the future")


class AppointmentReschedule(RequestModel):
    date: datetime

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: datetime) -> datetime:
        return _must_be_future(v, "New date must be in the future")


class AppointmentComplete(RequestModel):
    notes: Optional[str] = Field(default=None, max_length=1000)


class AppointmentQuery(BaseModel):
    pet_ids: Optional[List[str]] = None
    doctor_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class AppointmentResponse(CamelModel):
    id: str
    pet_id: str
    pet_name: Optional[str] = None
    doctor_id: str
    doctor_name: Optional[str] = None
    created_by: str
    date: datetime
    status: AppointmentStatus
    reason: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_dto(cls, a: AppointmentDto) -> "AppointmentResponse":
        return cls(
            id=a.id,
            pet_id=a.pet_id,
            pet_name=a.pet_name,
            doctor_id=a.doctor_id,
            doctor_name=a.doctor_name,
            created_by=a.created_by,
            date=a.date,
            status=AppointmentStatus(a.status),
            reason=a.reason,
            notes=a.notes,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )


class AppointmentEnvelope(BaseModel):
    success: bool = True
    data: AppointmentResponse


class AppointmentListEnvelope(BaseModel):
    success: bool = True
    data: List[AppointmentResponse]
    pagination: Pagination
