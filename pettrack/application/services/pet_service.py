from dataclasses import dataclass
from typing import Any, Dict, List

from ..ports.pet_repo import PetDto, PetRepository
from ...exceptions import BadRequestError, NotFoundError


@dataclass
class PetService:
    repo: PetRepository

    def create(self, owner_id: str, name: str, type: str, breed: str, age: float, weight: float) -> PetDto:
        return self.repo.create(owner_id, name, type, breed, age, weight)

    def list_for_owner(self, owner_id: str) -> List[PetDto]:
        return self.repo.list_for_owner(owner_id)

    def get(self, owner_id: str, pet_id: str) -> PetDto:
        pet = self.repo.get_by_id(pet_id)
        # another owner's pet is reported as missing
        if not pet or pet.owner_id != owner_id:
            raise NotFoundError("Pet not found")
        return pet

    def update(self, owner_id: str, pet_id: str, fields: Dict[str, Any]) -> PetDto:
        pet = self.get(owner_id, pet_id)
        if not fields:
            return pet
        updated = self.repo.update(pet_id, fields)
        if not updated:
            raise NotFoundError("Pet not found")
        return updated

    def delete(self, owner_id: str, pet_id: str) -> None:
        self.get(owner_id, pet_id)
        if self.repo.has_appointments(pet_id):
            raise BadRequestError("Cannot delete a pet with appointment history")
        self.repo.delete(pet_id)
