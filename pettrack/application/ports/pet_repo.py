from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol


@dataclass
class PetDto:
    id: str
    name: str
    type: str
    breed: str
    age: float
    weight: float
    owner_id: str
    created_at: datetime
    updated_at: datetime


class PetRepository(Protocol):
    def get_by_id(self, pet_id: str) -> Optional[PetDto]:
        ...

    def list_for_owner(self, owner_id: str) -> List[PetDto]:
        ...

    def ids_for_owner(self, owner_id: str) -> List[str]:
        ...

    def create(self, owner_id: str, name: str, type: str, breed: str, age: float, weight: float) -> PetDto:
        ...

    def update(self, pet_id: str, fields: Dict[str, Any]) -> Optional[PetDto]:
        ...

    def has_appointments(self, pet_id: str) -> bool:
        ...

    def delete(self, pet_id: str) -> bool:
        ...
