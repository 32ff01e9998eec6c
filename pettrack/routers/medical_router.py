from fastapi import APIRouter, Depends, Query

from ..application.ports.user_repo import CurrentUser, UserRole
from ..application.services.medical_records_service import MedicalRecordsService
from ..schemas.common.common import page_info
from ..schemas.medical.medical import (
    MedicalRecordCreate,
    MedicalRecordEnvelope,
    MedicalRecordListEnvelope,
    MedicalRecordPageEnvelope,
    MedicalRecordResponse,
    MedicalRecordUpdate,
)
from ..utils import parse_id
from .deps import get_medical_records_service, require_roles

router = APIRouter(prefix="/medical", tags=["Medical records"])

require_doctor = require_roles(UserRole.DOCTOR)
require_care_reader = require_roles(UserRole.DOCTOR, UserRole.PET_OWNER)


@router.post("/pets/{pet_id}/records", response_model=MedicalRecordEnvelope, status_code=201)
def create_medical_record(
    pet_id: str,
    body: MedicalRecordCreate,
    user: CurrentUser = Depends(require_doctor),
    svc: MedicalRecordsService = Depends(get_medical_records_service),
):
    record = svc.create(
        user,
        parse_id(pet_id, "petId"),
        symptoms=body.symptoms,
        diagnosis=body.diagnosis,
        treatment=body.treatment,
        prescribed_medications=body.prescribed_medications,
        notes=body.notes,
        follow_up_date=body.follow_up_date,
        appointment_id=body.appointment_id,
        date=body.date,
    )
    return MedicalRecordEnvelope(data=MedicalRecordResponse.from_dto(record))


@router.get("/pets/{pet_id}/records", response_model=MedicalRecordPageEnvelope)
def list_pet_medical_records(
    pet_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_care_reader),
    svc: MedicalRecordsService = Depends(get_medical_records_service),
):
    items, total = svc.list_for_pet(user, parse_id(pet_id, "petId"), page=page, limit=limit)
    return MedicalRecordPageEnvelope(
        data=[MedicalRecordResponse.from_dto(r) for r in items],
        pagination=page_info(page, limit, total),
    )


@router.get("/records/{record_id}", response_model=MedicalRecordEnvelope)
def get_medical_record(
    record_id: str,
    user: CurrentUser = Depends(require_care_reader),
    svc: MedicalRecordsService = Depends(get_medical_records_service),
):
    return MedicalRecordEnvelope(data=MedicalRecordResponse.from_dto(svc.get(user, parse_id(record_id, "recordId"))))


@router.patch("/records/{record_id}", response_model=MedicalRecordEnvelope)
def update_medical_record(
    record_id: str,
    body: MedicalRecordUpdate,
    user: CurrentUser = Depends(require_doctor),
    svc: MedicalRecordsService = Depends(get_medical_records_service),
):
    # exclude_unset keeps an explicit null followUpDate, which clears it
    fields = body.model_dump(exclude_unset=True)
    record = svc.update(user, parse_id(record_id, "recordId"), fields)
    return MedicalRecordEnvelope(data=MedicalRecordResponse.from_dto(record))


@router.get("/appointments/{appointment_id}/records", response_model=MedicalRecordListEnvelope)
def list_appointment_medical_records(
    appointment_id: str,
    user: CurrentUser = Depends(require_care_reader),
    svc: MedicalRecordsService = Depends(get_medical_records_service),
):
    records = svc.list_for_appointment(user, parse_id(appointment_id, "appointmentId"))
    return MedicalRecordListEnvelope(data=[MedicalRecordResponse.from_dto(r) for r in records])
