from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..application.ports.appointments_repo import AppointmentPage, AppointmentStatus
from ..application.ports.user_repo import CurrentUser, UserRole
from ..application.services.appointments_service import AppointmentsService
from ..schemas.appointments.appointment import (
    AppointmentComplete,
    AppointmentCreate,
    AppointmentEnvelope,
    AppointmentListEnvelope,
    AppointmentQuery,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentUpdate,
)
from ..schemas.common.common import Pagination
from ..utils import parse_id
from .deps import get_appointments_service, get_current_user, require_roles

router = APIRouter(prefix="/appointments", tags=["Appointments"])
doctor_router = APIRouter(prefix="/doctor", tags=["Doctor appointments"])

require_pet_owner = require_roles(UserRole.PET_OWNER)
require_doctor = require_roles(UserRole.DOCTOR)


def appointment_query(
    pet_id: Optional[List[str]] = Query(None, alias="petId"),
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    status: Optional[AppointmentStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> AppointmentQuery:
    return AppointmentQuery(
        pet_ids=[parse_id(p, "petId") for p in pet_id] if pet_id else None,
        doctor_id=parse_id(doctor_id, "doctorId") if doctor_id else None,
        start_date=start_date,
        end_date=end_date,
        status=status,
        page=page,
        limit=limit,
    )


def _one(appt) -> AppointmentEnvelope:
    return AppointmentEnvelope(data=AppointmentResponse.from_dto(appt))


def _many(result: AppointmentPage) -> AppointmentListEnvelope:
    return AppointmentListEnvelope(
        data=[AppointmentResponse.from_dto(a) for a in result.items],
        pagination=Pagination(**result.pagination()),
    )


@router.post("", response_model=AppointmentEnvelope, status_code=201)
def create_appointment(
    body: AppointmentCreate,
    user: CurrentUser = Depends(require_pet_owner),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    appt = svc.create(user, body.pet_id, body.doctor_id, body.date, body.reason, body.notes)
    return _one(appt)


@router.get("", response_model=AppointmentListEnvelope)
def list_appointments(
    query: AppointmentQuery = Depends(appointment_query),
    user: CurrentUser = Depends(get_current_user),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    result = svc.list_appointments(
        user,
        pet_ids=query.pet_ids,
        doctor_id=query.doctor_id,
        status=query.status.value if query.status else None,
        start_date=query.start_date,
        end_date=query.end_date,
        page=query.page,
        limit=query.limit,
    )
    return _many(result)


@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
def get_appointment(
    appointment_id: str,
    user: CurrentUser = Depends(get_current_user),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    return _one(svc.get(user, parse_id(appointment_id)))


@router.patch("/{appointment_id}", response_model=AppointmentEnvelope)
def update_appointment(
    appointment_id: str,
    body: AppointmentUpdate,
    user: CurrentUser = Depends(get_current_user),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    appt = svc.update(
        user,
        parse_id(appointment_id),
        date=body.date,
        reason=body.reason,
        notes=body.notes,
        status=body.status.value if body.status else None,
    )
    return _one(appt)


@router.patch("/{appointment_id}/cancel", response_model=AppointmentEnvelope)
def cancel_appointment(
    appointment_id: str,
    user: CurrentUser = Depends(get_current_user),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    return _one(svc.cancel(user, parse_id(appointment_id)))


@router.patch("/{appointment_id}/reschedule", response_model=AppointmentEnvelope)
def reschedule_appointment(
    appointment_id: str,
    body: AppointmentReschedule,
    user: CurrentUser = Depends(get_current_user),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    return _one(svc.reschedule(user, parse_id(appointment_id), body.date))


# Doctor-scoped routes
@doctor_router.get("/my-appointments", response_model=AppointmentListEnvelope)
def my_appointments(
    status: Optional[AppointmentStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_doctor),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    return _many(svc.list_for_doctor(user, status=status.value if status else None, page=page, limit=limit))


@doctor_router.get("/upcoming", response_model=AppointmentListEnvelope)
def upcoming_appointments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_doctor),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    return _many(svc.upcoming(user, page=page, limit=limit))


@doctor_router.get("/past", response_model=AppointmentListEnvelope)
def past_appointments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(require_doctor),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    return _many(svc.past(user, page=page, limit=limit))


@doctor_router.patch("/{appointment_id}/confirm", response_model=AppointmentEnvelope)
def confirm_appointment(
    appointment_id: str,
    user: CurrentUser = Depends(require_doctor),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    return _one(svc.confirm(user, parse_id(appointment_id)))


@doctor_router.patch("/{appointment_id}/complete", response_model=AppointmentEnvelope)
def complete_appointment(
    appointment_id: str,
    body: Optional[AppointmentComplete] = None,
    user: CurrentUser = Depends(require_doctor),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    notes = body.notes if body else None
    return _one(svc.complete(user, parse_id(appointment_id), notes=notes))
