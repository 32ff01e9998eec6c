from fastapi import APIRouter, Depends, Query

from ..application.ports.user_repo import CurrentUser, UserRole
from ..application.services.vaccinations_service import VaccinationsService
from ..schemas.common.common import page_info
from ..schemas.vaccinations.vaccination import (
    VaccinationCreate,
    VaccinationEnvelope,
    VaccinationListEnvelope,
    VaccinationPageEnvelope,
    VaccinationResponse,
)
from ..utils import parse_id
from .deps import get_vaccinations_service, require_roles

router = APIRouter(prefix="/vaccinations", tags=["Vaccinations"])

require_doctor = require_roles(UserRole.DOCTOR)
require_pet_owner = require_roles(UserRole.PET_OWNER)
require_care_reader = require_roles(UserRole.DOCTOR, UserRole.PET_OWNER)


@router.post("/pets/{pet_id}/vaccinations", response_model=VaccinationEnvelope, status_code=201)
def add_vaccination(
    pet_id: str,
    body: VaccinationCreate,
    user: CurrentUser = Depends(require_doctor),
    svc: VaccinationsService = Depends(get_vaccinations_service),
):
    vaccination = svc.add(
        user,
        parse_id(pet_id, "petId"),
        name=body.name,
        next_due_date=body.next_due_date,
        date=body.date,
        notes=body.notes,
    )
    return VaccinationEnvelope(data=VaccinationResponse.from_dto(vaccination))


@router.get("/pets/{pet_id}/vaccinations", response_model=VaccinationPageEnvelope)
def list_pet_vaccinations(
    pet_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_care_reader),
    svc: VaccinationsService = Depends(get_vaccinations_service),
):
    items, total = svc.list_for_pet(user, parse_id(pet_id, "petId"), page=page, limit=limit)
    return VaccinationPageEnvelope(
        data=[VaccinationResponse.from_dto(v) for v in items],
        pagination=page_info(page, limit, total),
    )


@router.get("/upcoming", response_model=VaccinationListEnvelope)
def upcoming_vaccinations(
    days: int = Query(30, ge=1, le=365),
    user: CurrentUser = Depends(require_pet_owner),
    svc: VaccinationsService = Depends(get_vaccinations_service),
):
    return VaccinationListEnvelope(data=[VaccinationResponse.from_dto(v) for v in svc.upcoming(user, days=days)])
