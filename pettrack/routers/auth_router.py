from fastapi import APIRouter, Depends

from ..application.ports.user_repo import CurrentUser
from ..application.services.auth_service import AuthService
from ..schemas.auth.auth import (
    AuthData,
    AuthEnvelope,
    LoginRequest,
    RegisterDoctorRequest,
    RegisterPetOwnerRequest,
    UserEnvelope,
    user_out,
)
from .deps import get_auth_service, get_current_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register/pet-owner", response_model=AuthEnvelope, status_code=201)
def register_pet_owner(body: RegisterPetOwnerRequest, svc: AuthService = Depends(get_auth_service)):
    user, token = svc.register_pet_owner(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        address=body.address.model_dump(by_alias=True),
    )
    return AuthEnvelope(data=AuthData(user=user_out(user), token=token))


@router.post("/register/doctor", response_model=AuthEnvelope, status_code=201)
def register_doctor(body: RegisterDoctorRequest, svc: AuthService = Depends(get_auth_service)):
    user, token = svc.register_doctor(
        email=body.email,
        password=body.password,
        name=body.name,
        specialization=body.specialization,
        hospital_id=body.hospital_id,
        contact_number=body.contact_number,
    )
    return AuthEnvelope(data=AuthData(user=user_out(user), token=token))


@router.post("/login", response_model=AuthEnvelope)
def login(body: LoginRequest, svc: AuthService = Depends(get_auth_service)):
    user, token = svc.login(body.email, body.password)
    return AuthEnvelope(data=AuthData(user=user_out(user), token=token))


@router.get("/me", response_model=UserEnvelope)
def me(current: CurrentUser = Depends(get_current_user), svc: AuthService = Depends(get_auth_service)):
    return UserEnvelope(data=user_out(svc.get_profile(current.id)))
