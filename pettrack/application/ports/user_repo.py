from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple, Union


class UserRole(str, Enum):
    PET_OWNER = "petOwner"
    DOCTOR = "doctor"
    ADMIN = "admin"


@dataclass
class PetOwnerDto:
    id: str
    email: str
    first_name: str
    last_name: str
    phone: str
    address: Dict[str, str]
    created_at: datetime
    role: UserRole = field(default=UserRole.PET_OWNER, init=False)


@dataclass
class DoctorDto:
    id: str
    email: str
    name: str
    specialization: str
    hospital_id: str
    contact_number: str
    created_at: datetime
    role: UserRole = field(default=UserRole.DOCTOR, init=False)


@dataclass
class AdminDto:
    id: str
    email: str
    created_at: datetime
    role: UserRole = field(default=UserRole.ADMIN, init=False)


UserDto = Union[PetOwnerDto, DoctorDto, AdminDto]


@dataclass(frozen=True)
class CurrentUser:
    """Identity decoded from a bearer token."""
    id: str
    role: UserRole

    @property
    def is_pet_owner(self) -> bool:
        return self.role == UserRole.PET_OWNER

    @property
    def is_doctor(self) -> bool:
        return self.role == UserRole.DOCTOR

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def get_credentials(self, email: str) -> Optional[Tuple[UserDto, str]]:
        ...

    def email_exists(self, email: str) -> bool:
        ...

    def create_pet_owner(self, email: str, password_hash: str, first_name: str, last_name: str, phone: str, address: Dict[str, str]) -> PetOwnerDto:
        ...

    def create_doctor(self, email: str, password_hash: str, name: str, specialization: str, hospital_id: str, contact_number: str) -> DoctorDto:
        ...

    def create_admin(self, email: str, password_hash: str) -> AdminDto:
        ...

    def list_doctors_for_hospital(self, hospital_id: str) -> List[DoctorDto]:
        ...
