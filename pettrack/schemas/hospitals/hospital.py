# pettrack/schemas/hospitals/hospital.py
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..common.common import Address, CamelModel, Pagination, RequestModel, lower_email
from ...application.ports.hospital_repo import HospitalDto
from ...application.ports.user_repo import DoctorDto


class HospitalCreate(RequestModel):
    name: str = Field(min_length=2)
    address: Address
    contact_number: str = Field(min_length=10)
    email: EmailStr
    services: List[str] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return lower_email(v)

    @field_validator("services")
    @classmethod
    def validate_services(cls, v: List[str]) -> List[str]:
        for service in v:
            if len(service.strip()) < 2:
                raise ValueError("Service must be at least 2 characters")
        return [s.strip() for s in v]


class HospitalResponse(CamelModel):
    id: str
    name: str
    address: Dict[str, str]
    contact_number: str
    email: str
    services: List[str]
    created_at: Optional[datetime] = None

    @classmethod
    def from_dto(cls, h: HospitalDto) -> "HospitalResponse":
        return cls(
            id=h.id, name=h.name, address=h.address, contact_number=h.contact_number,
            email=h.email, services=h.services, created_at=h.created_at,
        )


class HospitalBrief(BaseModel):
    id: str
    name: str


class DoctorBrief(CamelModel):
    id: str
    name: str
    email: str
    specialization: str

    @classmethod
    def from_dto(cls, d: DoctorDto) -> "DoctorBrief":
        return cls(id=d.id, name=d.name, email=d.email, specialization=d.specialization)


class HospitalEnvelope(BaseModel):
    success: bool = True
    data: HospitalResponse


class HospitalListEnvelope(BaseModel):
    success: bool = True
    data: List[HospitalResponse]
    pagination: Pagination


class HospitalBriefListEnvelope(BaseModel):
    success: bool = True
    data: List[HospitalBrief]


class DoctorBriefListEnvelope(BaseModel):
    success: bool = True
    data: List[DoctorBrief]
