# pettrack/schemas/vaccinations/vaccination.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..common.common import CamelModel, Pagination, RequestModel
from ...application.ports.vaccinations_repo import VaccinationDto


class VaccinationCreate(RequestModel):
    name: str = Field(min_length=2, max_length=100)
    date: Optional[datetime] = None
    next_due_date: datetime
    notes: Optional[str] = Field(default=None, max_length=1000)


class VaccinationResponse(CamelModel):
    id: str
    pet_id: str
    pet_name: Optional[str] = None
    administered_by: str
    administered_by_name: Optional[str] = None
    name: str
    date: datetime
    next_due_date: datetime
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dto(cls, v: VaccinationDto) -> "VaccinationResponse":
        return cls(
            id=v.id,
            pet_id=v.pet_id,
            pet_name=v.pet_name,
            administered_by=v.administered_by,
            administered_by_name=v.administered_by_name,
            name=v.name,
            date=v.date,
            next_due_date=v.next_due_date,
            notes=v.notes,
            created_at=v.created_at,
        )


class VaccinationEnvelope(BaseModel):
    success: bool = True
    data: VaccinationResponse


class VaccinationPageEnvelope(BaseModel):
    success: bool = True
    data: List[VaccinationResponse]
    pagination: Pagination


class VaccinationListEnvelope(BaseModel):
    success: bool = True
    data: List[VaccinationResponse]
