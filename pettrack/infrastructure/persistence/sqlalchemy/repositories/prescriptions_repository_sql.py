import json
from dataclasses import asdict
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models import Pet, Prescription, User
from .....application.ports.prescriptions_repo import MedicationDto, PrescriptionDto, PrescriptionsRepository
from .....utils import generate_id, to_utc


class SqlPrescriptionsRepository(PrescriptionsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, p: Prescription) -> PrescriptionDto:
        pet = self.session.get(Pet, p.pet_id)
        doctor = self.session.get(User, p.doctor_id)
        return PrescriptionDto(
            id=p.id,
            pet_id=p.pet_id,
            doctor_id=p.doctor_id,
            date=to_utc(p.date),
            medications=[MedicationDto(**m) for m in json.loads(p.medications or "[]")],
            instructions=p.instructions,
            created_at=to_utc(p.created_at),
            pet_name=pet.name if pet else None,
            doctor_name=doctor.name if doctor else None,
        )

    def create(self, pet_id: str, doctor_id: str, date: datetime, medications: List[MedicationDto], instructions: Optional[str]) -> PrescriptionDto:
        p = Prescription(
            id=generate_id(),
            pet_id=pet_id,
            doctor_id=doctor_id,
            date=date,
            medications=json.dumps([asdict(m) for m in medications]),
            instructions=instructions,
        )
        self.session.add(p)
        self.session.commit()
        self.session.refresh(p)
        return self._to_dto(p)

    def get_by_id(self, prescription_id: str) -> Optional[PrescriptionDto]:
        p = self.session.get(Prescription, prescription_id)
        return self._to_dto(p) if p else None

    def list_for_pet(self, pet_id: str, offset: int, limit: int) -> Tuple[List[PrescriptionDto], int]:
        total = self.session.exec(
            select(func.count()).select_from(Prescription).where(Prescription.pet_id == pet_id)
        ).one()
        rows = self.session.exec(
            select(Prescription)
            .where(Prescription.pet_id == pet_id)
            .order_by(Prescription.date.desc(), Prescription.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._to_dto(r) for r in rows], int(total)
