from fastapi import APIRouter, Depends, Query

from ..application.ports.user_repo import CurrentUser, UserRole
from ..application.services.hospital_service import HospitalService
from ..schemas.common.common import page_info
from ..schemas.hospitals.hospital import (
    DoctorBrief,
    DoctorBriefListEnvelope,
    HospitalBrief,
    HospitalBriefListEnvelope,
    HospitalCreate,
    HospitalEnvelope,
    HospitalListEnvelope,
    HospitalResponse,
)
from ..utils import parse_id
from .deps import get_current_user, get_hospital_service, require_roles

router = APIRouter(prefix="/hospitals", tags=["Hospitals"])


@router.post("", response_model=HospitalEnvelope, status_code=201)
def create_hospital(
    body: HospitalCreate,
    user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
    svc: HospitalService = Depends(get_hospital_service),
):
    hospital = svc.create(body.name, body.address.model_dump(by_alias=True), body.contact_number, body.email, body.services)
    return HospitalEnvelope(data=HospitalResponse.from_dto(hospital))


@router.get("", response_model=HospitalListEnvelope)
def list_hospitals(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    svc: HospitalService = Depends(get_hospital_service),
):
    items, total = svc.list_page(page, limit)
    return HospitalListEnvelope(
        data=[HospitalResponse.from_dto(h) for h in items],
        pagination=page_info(page, limit, total),
    )


# Public: the doctor registration form needs it before any login
@router.get("/list-for-registration", response_model=HospitalBriefListEnvelope)
def list_for_registration(svc: HospitalService = Depends(get_hospital_service)):
    return HospitalBriefListEnvelope(data=[HospitalBrief(id=h.id, name=h.name) for h in svc.list_for_registration()])


@router.get("/{hospital_id}", response_model=HospitalEnvelope)
def get_hospital(
    hospital_id: str,
    user: CurrentUser = Depends(get_current_user),
    svc: HospitalService = Depends(get_hospital_service),
):
    return HospitalEnvelope(data=HospitalResponse.from_dto(svc.get(parse_id(hospital_id, "hospitalId"))))


@router.get("/{hospital_id}/doctors", response_model=DoctorBriefListEnvelope)
def list_hospital_doctors(
    hospital_id: str,
    user: CurrentUser = Depends(get_current_user),
    svc: HospitalService = Depends(get_hospital_service),
):
    doctors = svc.list_doctors(parse_id(hospital_id, "hospitalId"))
    return DoctorBriefListEnvelope(data=[DoctorBrief.from_dto(d) for d in doctors])
