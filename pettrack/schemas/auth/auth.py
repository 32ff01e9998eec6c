# pettrack/schemas/auth/auth.py
from datetime import datetime
from typing import Dict, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..common.common import Address, CamelModel, RequestModel, lower_email, check_phone, check_uuid
from ...application.ports.user_repo import AdminDto, DoctorDto, PetOwnerDto, UserDto


class LoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(min_length=8)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return lower_email(v)


class RegisterPetOwnerRequest(RequestModel):
    email: EmailStr
    password: str
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    phone: str
    address: Address

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return lower_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return check_phone(v)


class RegisterDoctorRequest(RequestModel):
    email: EmailStr
    password: str
    name: str = Field(min_length=2, max_length=100)
    specialization: str = Field(min_length=2, max_length=100)
    hospital_id: str
    contact_number: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return lower_email(v)

    @field_validator("contact_number")
    @classmethod
    def validate_contact_number(cls, v: str) -> str:
        return check_phone(v)

    @field_validator("hospital_id")
    @classmethod
    def validate_hospital_id(cls, v: str) -> str:
        return check_uuid(v)


class PetOwnerOut(CamelModel):
    id: str
    email: str
    role: str
    first_name: str
    last_name: str
    phone: str
    address: Dict[str, str]
    created_at: datetime


class DoctorOut(CamelModel):
    id: str
    email: str
    role: str
    name: str
    specialization: str
    hospital_id: str
    contact_number: str
    created_at: datetime


class AdminOut(CamelModel):
    id: str
    email: str
    role: str
    created_at: datetime


UserOut = Union[PetOwnerOut, DoctorOut, AdminOut]


def user_out(user: UserDto) -> UserOut:
    if isinstance(user, PetOwnerDto):
        return PetOwnerOut(
            id=user.id, email=user.email, role=user.role.value,
            first_name=user.first_name, last_name=user.last_name,
            phone=user.phone, address=user.address, created_at=user.created_at,
        )
    if isinstance(user, DoctorDto):
        return DoctorOut(
            id=user.id, email=user.email, role=user.role.value,
            name=user.name, specialization=user.specialization,
            hospital_id=user.hospital_id, contact_number=user.contact_number,
            created_at=user.created_at,
        )
    if isinstance(user, AdminDto):
        return AdminOut(id=user.id, email=user.email, role=user.role.value, created_at=user.created_at)
    raise TypeError(f"Unknown user type: {type(user).__name__}")


class AuthData(BaseModel):
    user: UserOut
    token: str


class AuthEnvelope(BaseModel):
    success: bool = True
    data: AuthData


class UserEnvelope(BaseModel):
    success: bool = True
    data: UserOut
