# pettrack/schemas/pets/pet.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..common.common import CamelModel, RequestModel
from ...application.ports.pet_repo import PetDto


class PetType(str, Enum):
    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    OTHER = "other"


class PetCreate(RequestModel):
    name: str = Field(min_length=2, max_length=50)
    type: PetType
    breed: str = Field(min_length=2)
    age: float = Field(ge=0)
    weight: float = Field(ge=0.1)


class PetUpdate(RequestModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    type: Optional[PetType] = None
    breed: Optional[str] = Field(default=None, min_length=2)
    age: Optional[float] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0.1)


class PetResponse(CamelModel):
    id: str
    name: str
    type: str
    breed: str
    age: float
    weight: float
    owner_id: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_dto(cls, p: PetDto) -> "PetResponse":
        return cls(
            id=p.id, name=p.name, type=p.type, breed=p.breed, age=p.age, weight=p.weight,
            owner_id=p.owner_id, created_at=p.created_at, updated_at=p.updated_at,
        )


class PetEnvelope(BaseModel):
    success: bool = True
    data: PetResponse


class PetListEnvelope(BaseModel):
    success: bool = True
    data: List[PetResponse]
