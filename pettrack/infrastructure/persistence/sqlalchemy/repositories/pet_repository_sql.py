from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from .....db.models import Appointment, Pet
from .....application.ports.pet_repo import PetDto, PetRepository
from .....utils import generate_id, to_utc, utcnow


class SqlPetRepository(PetRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, p: Pet) -> PetDto:
        return PetDto(
            id=p.id,
            name=p.name,
            type=p.type,
            breed=p.breed,
            age=p.age,
            weight=p.weight,
            owner_id=p.owner_id,
            created_at=to_utc(p.created_at),
            updated_at=to_utc(p.updated_at),
        )

    def get_by_id(self, pet_id: str) -> Optional[PetDto]:
        p = self.session.get(Pet, pet_id)
        return self._to_dto(p) if p else None

    def list_for_owner(self, owner_id: str) -> List[PetDto]:
        rows = self.session.exec(
            select(Pet).where(Pet.owner_id == owner_id).order_by(Pet.created_at)
        ).all()
        return [self._to_dto(r) for r in rows]

    def ids_for_owner(self, owner_id: str) -> List[str]:
        return list(self.session.exec(select(Pet.id).where(Pet.owner_id == owner_id)).all())

    def create(self, owner_id: str, name: str, type: str, breed: str, age: float, weight: float) -> PetDto:
        pet = Pet(id=generate_id(), owner_id=owner_id, name=name, type=type, breed=breed, age=age, weight=weight)
        self.session.add(pet)
        self.session.commit()
        self.session.refresh(pet)
        return self._to_dto(pet)

    def update(self, pet_id: str, fields: Dict[str, Any]) -> Optional[PetDto]:
        pet = self.session.get(Pet, pet_id)
        if not pet:
            return None
        for key, value in fields.items():
            setattr(pet, key, value)
        pet.updated_at = utcnow()
        self.session.add(pet)
        self.session.commit()
        self.session.refresh(pet)
        return self._to_dto(pet)

    def has_appointments(self, pet_id: str) -> bool:
        return self.session.exec(select(Appointment.id).where(Appointment.pet_id == pet_id)).first() is not None

    def delete(self, pet_id: str) -> bool:
        pet = self.session.get(Pet, pet_id)
        if not pet:
            return False
        self.session.delete(pet)
        self.session.commit()
        return True
