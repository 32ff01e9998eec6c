import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models import MedicalRecord, User
from .....application.ports.medical_records_repo import MedicalRecordDto, MedicalRecordsRepository
from .....utils import generate_id, to_utc, utcnow

# Columns holding JSON encoded string lists
_LIST_FIELDS = ("symptoms", "treatment", "prescribed_medications")


class SqlMedicalRecordsRepository(MedicalRecordsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, r: MedicalRecord) -> MedicalRecordDto:
        doctor = self.session.get(User, r.doctor_id)
        return MedicalRecordDto(
            id=r.id,
            pet_id=r.pet_id,
            doctor_id=r.doctor_id,
            appointment_id=r.appointment_id,
            date=to_utc(r.date),
            symptoms=json.loads(r.symptoms or "[]"),
            diagnosis=r.diagnosis,
            treatment=json.loads(r.treatment or "[]"),
            prescribed_medications=json.loads(r.prescribed_medications or "[]"),
            notes=r.notes,
            follow_up_date=to_utc(r.follow_up_date),
            created_at=to_utc(r.created_at),
            updated_at=to_utc(r.updated_at),
            doctor_name=doctor.name if doctor else None,
        )

    def create(
        self,
        pet_id: str,
        doctor_id: str,
        appointment_id: Optional[str],
        date: datetime,
        symptoms: List[str],
        diagnosis: str,
        treatment: List[str],
        prescribed_medications: List[str],
        notes: Optional[str],
        follow_up_date: Optional[datetime],
    ) -> MedicalRecordDto:
        record = MedicalRecord(
            id=generate_id(),
            pet_id=pet_id,
            doctor_id=doctor_id,
            appointment_id=appointment_id,
            date=date,
            symptoms=json.dumps(symptoms),
            diagnosis=diagnosis,
            treatment=json.dumps(treatment),
            prescribed_medications=json.dumps(prescribed_medications),
            notes=notes,
            follow_up_date=follow_up_date,
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return self._to_dto(record)

    def get_by_id(self, record_id: str) -> Optional[MedicalRecordDto]:
        r = self.session.get(MedicalRecord, record_id)
        return self._to_dto(r) if r else None

    def list_for_pet(self, pet_id: str, offset: int, limit: int) -> Tuple[List[MedicalRecordDto], int]:
        total = self.session.exec(
            select(func.count()).select_from(MedicalRecord).where(MedicalRecord.pet_id == pet_id)
        ).one()
        rows = self.session.exec(
            select(MedicalRecord)
            .where(MedicalRecord.pet_id == pet_id)
            .order_by(MedicalRecord.date.desc(), MedicalRecord.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._to_dto(r) for r in rows], int(total)

    def list_for_appointment(self, appointment_id: str) -> List[MedicalRecordDto]:
        rows = self.session.exec(
            select(MedicalRecord)
            .where(MedicalRecord.appointment_id == appointment_id)
            .order_by(MedicalRecord.date.desc(), MedicalRecord.id)
        ).all()
        return [self._to_dto(r) for r in rows]

    def update(self, record_id: str, fields: Dict[str, Any]) -> Optional[MedicalRecordDto]:
        record = self.session.get(MedicalRecord, record_id)
        if not record:
            return None
        for key, value in fields.items():
            if key in _LIST_FIELDS:
                value = json.dumps(value)
            setattr(record, key, value)
        record.updated_at = utcnow()
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return self._to_dto(record)
