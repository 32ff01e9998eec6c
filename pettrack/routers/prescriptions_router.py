from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from ..application.ports.user_repo import CurrentUser, UserRole
from ..application.services.prescriptions_service import PrescriptionsService
from ..schemas.common.common import page_info
from ..schemas.prescriptions.prescription import (
    PrescriptionCreate,
    PrescriptionEnvelope,
    PrescriptionPageEnvelope,
    PrescriptionResponse,
)
from ..utils import parse_id
from .deps import get_prescriptions_service, require_roles

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

require_doctor = require_roles(UserRole.DOCTOR)
require_care_reader = require_roles(UserRole.DOCTOR, UserRole.PET_OWNER)


@router.post("/pets/{pet_id}/prescriptions", response_model=PrescriptionEnvelope, status_code=201)
def create_prescription(
    pet_id: str,
    body: PrescriptionCreate,
    user: CurrentUser = Depends(require_doctor),
    svc: PrescriptionsService = Depends(get_prescriptions_service),
):
    prescription = svc.create(
        user,
        parse_id(pet_id, "petId"),
        medications=[m.to_dto() for m in body.medications],
        instructions=body.instructions,
    )
    return PrescriptionEnvelope(data=PrescriptionResponse.from_dto(prescription))


@router.get("/pets/{pet_id}/prescriptions", response_model=PrescriptionPageEnvelope)
def list_pet_prescriptions(
    pet_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_care_reader),
    svc: PrescriptionsService = Depends(get_prescriptions_service),
):
    items, total = svc.list_for_pet(user, parse_id(pet_id, "petId"), page=page, limit=limit)
    return PrescriptionPageEnvelope(
        data=[PrescriptionResponse.from_dto(p) for p in items],
        pagination=page_info(page, limit, total),
    )


@router.get("/{prescription_id}", response_model=PrescriptionEnvelope)
def get_prescription(
    prescription_id: str,
    user: CurrentUser = Depends(require_care_reader),
    svc: PrescriptionsService = Depends(get_prescriptions_service),
):
    return PrescriptionEnvelope(data=PrescriptionResponse.from_dto(svc.get(user, parse_id(prescription_id, "prescriptionId"))))


@router.get("/{prescription_id}/print", response_class=PlainTextResponse)
def print_prescription(
    prescription_id: str,
    user: CurrentUser = Depends(require_care_reader),
    svc: PrescriptionsService = Depends(get_prescriptions_service),
):
    return PlainTextResponse(svc.render(user, parse_id(prescription_id, "prescriptionId")))
