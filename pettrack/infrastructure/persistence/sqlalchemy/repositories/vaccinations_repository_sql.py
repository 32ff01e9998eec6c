from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models import Pet, User, Vaccination
from .....application.ports.vaccinations_repo import VaccinationDto, VaccinationsRepository
from .....utils import generate_id, to_utc


class SqlVaccinationsRepository(VaccinationsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, v: Vaccination) -> VaccinationDto:
        pet = self.session.get(Pet, v.pet_id)
        vet = self.session.get(User, v.administered_by)
        return VaccinationDto(
            id=v.id,
            pet_id=v.pet_id,
            administered_by=v.administered_by,
            name=v.name,
            date=to_utc(v.date),
            next_due_date=to_utc(v.next_due_date),
            notes=v.notes,
            created_at=to_utc(v.created_at),
            pet_name=pet.name if pet else None,
            administered_by_name=vet.name if vet else None,
        )

    def create(self, pet_id: str, administered_by: str, name: str, date: datetime, next_due_date: datetime, notes: Optional[str]) -> VaccinationDto:
        v = Vaccination(
            id=generate_id(),
            pet_id=pet_id,
            administered_by=administered_by,
            name=name,
            date=date,
            next_due_date=next_due_date,
            notes=notes,
        )
        self.session.add(v)
        self.session.commit()
        self.session.refresh(v)
        return self._to_dto(v)

    def list_for_pet(self, pet_id: str, offset: int, limit: int) -> Tuple[List[VaccinationDto], int]:
        total = self.session.exec(
            select(func.count()).select_from(Vaccination).where(Vaccination.pet_id == pet_id)
        ).one()
        rows = self.session.exec(
            select(Vaccination)
            .where(Vaccination.pet_id == pet_id)
            .order_by(Vaccination.date.desc(), Vaccination.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._to_dto(r) for r in rows], int(total)

    def due_for_pets(self, pet_ids: List[str], due_before: datetime) -> List[VaccinationDto]:
        rows = self.session.exec(
            select(Vaccination)
            .where(Vaccination.pet_id.in_(pet_ids))
            .where(Vaccination.next_due_date <= due_before)
            .order_by(Vaccination.next_due_date, Vaccination.id)
        ).all()
        return [self._to_dto(r) for r in rows]
