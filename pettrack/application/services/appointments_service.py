import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..ports.appointments_repo import (
    AppointmentDto,
    AppointmentFilter,
    AppointmentPage,
    AppointmentsRepository,
    AppointmentStatus,
    OPEN_STATUSES,
    TERMINAL_STATUSES,
)
from ..ports.audit_logger import AuditLogger
from ..ports.pet_repo import PetRepository
from ..ports.user_repo import CurrentUser, DoctorDto, UserRepository
from ...exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from ...utils import to_utc, utcnow

logger = logging.getLogger(__name__)

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
NOTES_MAX_LENGTH = 1000
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Statuses an appointment may be in for a move to the key status
ALLOWED_SOURCES: Dict[str, Tuple[str, ...]] = {
    AppointmentStatus.CONFIRMED.value: (AppointmentStatus.PENDING.value,),
    AppointmentStatus.COMPLETED.value: OPEN_STATUSES,
    AppointmentStatus.CANCELLED.value: OPEN_STATUSES,
}


def _field_error(field: str, message: str) -> ValidationError:
    return ValidationError(message, errors=[{"field": field, "message": message}])


@dataclass
class AppointmentsService:
    """Appointment lifecycle: status transitions, who may invoke them, and role-shaped listings.

    Status writes go through ``update_if_status`` so a transition only lands
    while the appointment is still in a status the transition starts from.
    """

    repo: AppointmentsRepository
    pet_repo: PetRepository
    user_repo: UserRepository
    audit: Optional[AuditLogger] = None
    clock: Callable[[], datetime] = utcnow

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def create(self, user: CurrentUser, pet_id: str, doctor_id: str, date: datetime, reason: str, notes: Optional[str] = None) -> AppointmentDto:
        if not user.is_pet_owner:
            raise ForbiddenError("Only pet owners can book appointments")

        date = self._future_date(date, "Appointment date must be in the future")
        reason = self._valid_reason(reason)
        notes = self._valid_notes(notes)

        pet = self.pet_repo.get_by_id(pet_id)
        if not pet:
            raise NotFoundError("Pet not found")
        if pet.owner_id != user.id:
            raise ForbiddenError("You can only book appointments for your own pets")

        doctor = self.user_repo.get_by_id(doctor_id)
        if not isinstance(doctor, DoctorDto):
            raise NotFoundError("Doctor not found")

        appt = self.repo.create(pet_id, doctor_id, user.id, date, reason, notes)
        logger.info(f"Appointment {appt.id} booked by {user.id} for pet {pet_id} with doctor {doctor_id}")
        self._audit("create", user, appt.id, {"to": appt.status, "date": appt.date.isoformat()})
        return appt

    def confirm(self, user: CurrentUser, appointment_id: str) -> AppointmentDto:
        appt = self._load(appointment_id)
        target = AppointmentStatus.CONFIRMED.value
        self._check_transition(user, appt, target)
        return self._write(user, appt, "confirm", ALLOWED_SOURCES[target], {"status": target})

    def complete(self, user: CurrentUser, appointment_id: str, notes: Optional[str] = None) -> AppointmentDto:
        notes = self._valid_notes(notes)
        appt = self._load(appointment_id)
        target = AppointmentStatus.COMPLETED.value
        self._check_transition(user, appt, target)
        values: Dict[str, Any] = {"status": target}
        if notes:
            values["notes"] = notes
        return self._write(user, appt, "complete", ALLOWED_SOURCES[target], values)

    def cancel(self, user: CurrentUser, appointment_id: str) -> AppointmentDto:
        appt = self._load(appointment_id)
        target = AppointmentStatus.CANCELLED.value
        self._check_transition(user, appt, target)
        return self._write(user, appt, "cancel", ALLOWED_SOURCES[target], {"status": target})

    def reschedule(self, user: CurrentUser, appointment_id: str, date: datetime) -> AppointmentDto:
        date = self._future_date(date, "New date must be in the future")
        appt = self._load(appointment_id)
        self._require_participant(user, appt, "Not authorized to reschedule this appointment")
        if appt.status in TERMINAL_STATUSES:
            raise BadRequestError(f"Cannot reschedule a {appt.status} appointment")
        return self._write(user, appt, "reschedule", OPEN_STATUSES, {"date": date})

    def update(
        self,
        user: CurrentUser,
        appointment_id: str,
        date: Optional[datetime] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        status: Optional[str] = None,
    ) -> AppointmentDto:
        """Partial update by the assigned doctor or the creator.

        A status change follows the same rules as the dedicated transition.
        """
        values: Dict[str, Any] = {}
        if date is not None:
            values["date"] = self._future_date(date, "Appointment date must be in the future")
        if reason is not None:
            values["reason"] = self._valid_reason(reason)
        if notes is not None:
            values["notes"] = self._valid_notes(notes)
        target = self._valid_status(status) if status is not None else None

        appt = self._load(appointment_id)
        self._require_participant(user, appt, "Not authorized to update this appointment")

        allowed: Sequence[str] = OPEN_STATUSES
        if target is not None:
            if target == appt.status:
                raise BadRequestError(f"Appointment is already {target}")
            self._check_transition(user, appt, target)
            allowed = ALLOWED_SOURCES[target]
            values["status"] = target
        elif appt.status in TERMINAL_STATUSES:
            raise BadRequestError(f"Cannot modify a {appt.status} appointment")

        if not values:
            return appt
        return self._write(user, appt, "update", allowed, values)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get(self, user: CurrentUser, appointment_id: str) -> AppointmentDto:
        appt = self._load(appointment_id)
        authorized = (
            user.is_admin
            or (user.is_doctor and appt.doctor_id == user.id)
            or (user.is_pet_owner and appt.created_by == user.id)
        )
        if not authorized:
            raise ForbiddenError("Not authorized to access this appointment")
        return appt

    def list_appointments(
        self,
        user: CurrentUser,
        pet_ids: Optional[List[str]] = None,
        doctor_id: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> AppointmentPage:
        self._check_paging(page, limit)
        criteria = AppointmentFilter()

        if user.is_pet_owner:
            owned = self.pet_repo.ids_for_owner(user.id)
            if pet_ids:
                # a requested pet never widens the owner's scope
                criteria.pet_ids = [p for p in pet_ids if p in owned]
            else:
                criteria.pet_ids = list(owned)
        else:
            if pet_ids:
                criteria.pet_ids = list(pet_ids)

        if user.is_doctor:
            if doctor_id and doctor_id != user.id:
                return AppointmentPage(items=[], total=0, page=page, limit=limit)
            criteria.doctor_id = user.id
        elif doctor_id:
            criteria.doctor_id = doctor_id

        if status:
            criteria.statuses = [self._valid_status(status)]
        if start_date:
            criteria.date_gte = to_utc(start_date)
        if end_date:
            criteria.date_lte = to_utc(end_date)

        return self._page(criteria, page, limit)

    def list_for_doctor(self, user: CurrentUser, status: Optional[str] = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> AppointmentPage:
        self._require_doctor(user)
        self._check_paging(page, limit)
        criteria = AppointmentFilter(doctor_id=user.id)
        if status:
            criteria.statuses = [self._valid_status(status)]
        return self._page(criteria, page, limit)

    def upcoming(self, user: CurrentUser, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> AppointmentPage:
        self._require_doctor(user)
        self._check_paging(page, limit)
        criteria = AppointmentFilter(
            doctor_id=user.id,
            statuses=list(OPEN_STATUSES),
            date_gte=self.clock(),
        )
        return self._page(criteria, page, limit)

    def past(self, user: CurrentUser, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> AppointmentPage:
        self._require_doctor(user)
        self._check_paging(page, limit)
        criteria = AppointmentFilter(
            doctor_id=user.id,
            statuses=list(TERMINAL_STATUSES),
            date_lt=self.clock(),
        )
        return self._page(criteria, page, limit, descending=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _load(self, appointment_id: str) -> AppointmentDto:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found")
        return appt

    def _check_transition(self, user: CurrentUser, appt: AppointmentDto, target: str) -> None:
        if target == AppointmentStatus.CONFIRMED.value:
            self._require_assigned_doctor(user, appt, "Only the assigned doctor can confirm this appointment")
            if appt.status != AppointmentStatus.PENDING.value:
                raise ConflictError("Only pending appointments can be confirmed")
        elif target == AppointmentStatus.COMPLETED.value:
            self._require_assigned_doctor(user, appt, "Only the assigned doctor can complete this appointment")
            if appt.status == AppointmentStatus.COMPLETED.value:
                raise BadRequestError("Appointment is already completed")
            if appt.status == AppointmentStatus.CANCELLED.value:
                raise BadRequestError("Cannot complete a cancelled appointment")
        elif target == AppointmentStatus.CANCELLED.value:
            self._require_participant(user, appt, "Not authorized to cancel this appointment")
            if appt.status == AppointmentStatus.CANCELLED.value:
                raise BadRequestError("Appointment is already cancelled")
            if appt.status == AppointmentStatus.COMPLETED.value:
                raise BadRequestError("Cannot cancel a completed appointment")
        else:
            raise BadRequestError(f"Cannot move an appointment to {target}")

    def _write(self, user: CurrentUser, appt: AppointmentDto, action: str, allowed: Sequence[str], values: Dict[str, Any]) -> AppointmentDto:
        updated = self.repo.update_if_status(appt.id, allowed, values)
        if updated is None:
            logger.warning(f"Appointment {appt.id}: {action} by {user.id} lost a race (expected status in {list(allowed)})")
            raise ConflictError("Appointment was modified by another request, reload and try again")
        logger.info(f"Appointment {appt.id}: {action} by {user.id} ({appt.status} -> {updated.status})")
        details: Dict[str, Any] = {"from": appt.status, "to": updated.status}
        if "date" in values:
            details["date"] = updated.date.isoformat()
        self._audit(action, user, appt.id, details)
        return updated

    def _audit(self, action: str, user: CurrentUser, appointment_id: str, details: Dict[str, Any]) -> None:
        if self.audit is None:
            return
        self.audit.log(
            action=f"appointment.{action}",
            actor_id=user.id,
            role=user.role.value,
            appointment_id=appointment_id,
            details=details,
        )

    def _page(self, criteria: AppointmentFilter, page: int, limit: int, descending: bool = False) -> AppointmentPage:
        if criteria.pet_ids is not None and not criteria.pet_ids:
            return AppointmentPage(items=[], total=0, page=page, limit=limit)
        items, total = self.repo.search(criteria, offset=(page - 1) * limit, limit=limit, descending=descending)
        return AppointmentPage(items=items, total=total, page=page, limit=limit)

    @staticmethod
    def _require_assigned_doctor(user: CurrentUser, appt: AppointmentDto, message: str) -> None:
        if not (user.is_doctor and appt.doctor_id == user.id):
            raise ForbiddenError(message)

    @staticmethod
    def _require_participant(user: CurrentUser, appt: AppointmentDto, message: str) -> None:
        if user.id not in (appt.doctor_id, appt.created_by):
            raise ForbiddenError(message)

    @staticmethod
    def _require_doctor(user: CurrentUser) -> None:
        if not user.is_doctor:
            raise ForbiddenError("Only doctors can access this resource")

    @staticmethod
    def _check_paging(page: int, limit: int) -> None:
        if page < 1:
            raise _field_error("page", "Page must be at least 1")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise _field_error("limit", f"Limit must be between 1 and {MAX_PAGE_SIZE}")

    def _future_date(self, value: datetime, message: str) -> datetime:
        value = to_utc(value)
        if value <= self.clock():
            raise _field_error("date", message)
        return value

    @staticmethod
    def _valid_reason(reason: str) -> str:
        reason = (reason or "").strip()
        if len(reason) < REASON_MIN_LENGTH:
            raise _field_error("reason", f"Reason must be at least {REASON_MIN_LENGTH} characters")
        if len(reason) > REASON_MAX_LENGTH:
            raise _field_error("reason", f"Reason cannot exceed {REASON_MAX_LENGTH} characters")
        return reason

    @staticmethod
    def _valid_notes(notes: Optional[str]) -> Optional[str]:
        if notes is None:
            return None
        notes = notes.strip()
        if len(notes) > NOTES_MAX_LENGTH:
            raise _field_error("notes", f"Notes cannot exceed {NOTES_MAX_LENGTH} characters")
        return notes

    @staticmethod
    def _valid_status(status: str) -> str:
        try:
            return AppointmentStatus(status).value
        except ValueError:
            raise _field_error("status", f"Invalid status. Must be one of: {[s.value for s in AppointmentStatus]}")
