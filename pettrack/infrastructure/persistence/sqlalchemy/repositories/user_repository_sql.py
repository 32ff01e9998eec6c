import json
from typing import Dict, List, Optional, Tuple
from sqlmodel import Session, select

from .....db.models import User
from .....application.ports.user_repo import (
    AdminDto,
    DoctorDto,
    PetOwnerDto,
    UserDto,
    UserRepository,
    UserRole,
)
from .....utils import generate_id, to_utc


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, u: User) -> UserDto:
        if u.role == UserRole.DOCTOR.value:
            return DoctorDto(
                id=u.id,
                email=u.email,
                name=u.name or "",
                specialization=u.specialization or "",
                hospital_id=u.hospital_id or "",
                contact_number=u.contact_number or "",
                created_at=to_utc(u.created_at),
            )
        if u.role == UserRole.PET_OWNER.value:
            return PetOwnerDto(
                id=u.id,
                email=u.email,
                first_name=u.first_name or "",
                last_name=u.last_name or "",
                phone=u.phone or "",
                address=json.loads(u.address) if u.address else {},
                created_at=to_utc(u.created_at),
            )
        return AdminDto(id=u.id, email=u.email, created_at=to_utc(u.created_at))

    def _save(self, u: User) -> UserDto:
        self.session.add(u)
        self.session.commit()
        self.session.refresh(u)
        return self._to_dto(u)

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        u = self.session.get(User, user_id)
        return self._to_dto(u) if u else None

    def get_credentials(self, email: str) -> Optional[Tuple[UserDto, str]]:
        u = self.session.exec(select(User).where(User.email == email.lower())).first()
        if not u:
            return None
        return self._to_dto(u), u.password_hash

    def email_exists(self, email: str) -> bool:
        return self.session.exec(select(User.id).where(User.email == email.lower())).first() is not None

    def create_pet_owner(self, email: str, password_hash: str, first_name: str, last_name: str, phone: str, address: Dict[str, str]) -> PetOwnerDto:
        return self._save(User(
            id=generate_id(),
            email=email.lower(),
            password_hash=password_hash,
            role=UserRole.PET_OWNER.value,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            address=json.dumps(address),
        ))

    def create_doctor(self, email: str, password_hash: str, name: str, specialization: str, hospital_id: str, contact_number: str) -> DoctorDto:
        return self._save(User(
            id=generate_id(),
            email=email.lower(),
            password_hash=password_hash,
            role=UserRole.DOCTOR.value,
            name=name,
            specialization=specialization,
            hospital_id=hospital_id,
            contact_number=contact_number,
        ))

    def create_admin(self, email: str, password_hash: str) -> AdminDto:
        return self._save(User(
            id=generate_id(),
            email=email.lower(),
            password_hash=password_hash,
            role=UserRole.ADMIN.value,
        ))

    def list_doctors_for_hospital(self, hospital_id: str) -> List[DoctorDto]:
        rows = self.session.exec(
            select(User)
            .where(User.role == UserRole.DOCTOR.value)
            .where(User.hospital_id == hospital_id)
            .order_by(User.name)
        ).all()
        return [self._to_dto(r) for r in rows]
