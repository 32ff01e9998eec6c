import json
from typing import Dict, List, Optional, Tuple
from sqlalchemy import func, or_
from sqlmodel import Session, select

from .....db.models import Hospital
from .....application.ports.hospital_repo import HospitalDto, HospitalRepository
from .....utils import generate_id, to_utc


class SqlHospitalRepository(HospitalRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, h: Hospital) -> HospitalDto:
        return HospitalDto(
            id=h.id,
            name=h.name,
            address=json.loads(h.address or "{}"),
            contact_number=h.contact_number,
            email=h.email,
            services=json.loads(h.services or "[]"),
            created_at=to_utc(h.created_at),
        )

    def get_by_id(self, hospital_id: str) -> Optional[HospitalDto]:
        h = self.session.get(Hospital, hospital_id)
        return self._to_dto(h) if h else None

    def exists_with(self, name: str, email: str) -> bool:
        existing = self.session.exec(
            select(Hospital.id).where(or_(Hospital.name == name, Hospital.email == email.lower()))
        ).first()
        return existing is not None

    def create(self, name: str, address: Dict[str, str], contact_number: str, email: str, services: List[str]) -> HospitalDto:
        h = Hospital(
            id=generate_id(),
            name=name,
            address=json.dumps(address),
            contact_number=contact_number,
            email=email.lower(),
            services=json.dumps(services),
        )
        self.session.add(h)
        self.session.commit()
        self.session.refresh(h)
        return self._to_dto(h)

    def list_page(self, offset: int, limit: int) -> Tuple[List[HospitalDto], int]:
        total = self.session.exec(select(func.count()).select_from(Hospital)).one()
        rows = self.session.exec(select(Hospital).order_by(Hospital.name).offset(offset).limit(limit)).all()
        return [self._to_dto(r) for r in rows], int(total)

    def list_all(self) -> List[HospitalDto]:
        rows = self.session.exec(select(Hospital).order_by(Hospital.name)).all()
        return [self._to_dto(r) for r in rows]
