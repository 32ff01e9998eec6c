import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..ports.audit_logger import AuditLogger
from ..ports.medical_records_repo import MedicalRecordDto, MedicalRecordsRepository
from ..ports.user_repo import CurrentUser
from .pet_care_access import DEFAULT_PAGE_SIZE, PetCareAccess, check_paging, clean_list
from ...exceptions import BadRequestError, ForbiddenError, NotFoundError, ValidationError
from ...utils import to_utc, utcnow

logger = logging.getLogger(__name__)

NOTES_MAX_LENGTH = 1000


@dataclass
class MedicalRecordsService:
    """Diagnoses written by a treating doctor, readable by the pet's owner."""

    repo: MedicalRecordsRepository
    access: PetCareAccess
    audit: Optional[AuditLogger] = None
    clock: Callable[[], datetime] = utcnow

    def create(
        self,
        user: CurrentUser,
        pet_id: str,
        symptoms: List[str],
        diagnosis: str,
        treatment: List[str],
        prescribed_medications: Optional[List[str]] = None,
        notes: Optional[str] = None,
        follow_up_date: Optional[datetime] = None,
        appointment_id: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> MedicalRecordDto:
        self.access.writable_pet(user, pet_id)

        symptoms = clean_list(symptoms, "symptoms")
        treatment = clean_list(treatment, "treatment")
        medications = clean_list(prescribed_medications or [], "prescribedMedications", required=False)
        diagnosis = self._valid_diagnosis(diagnosis)
        notes = self._valid_notes(notes)
        if follow_up_date is not None:
            follow_up_date = to_utc(follow_up_date)
            # today counts; anything before midnight UTC does not
            start_of_today = datetime.combine(self.clock().date(), time.min, tzinfo=follow_up_date.tzinfo)
            if follow_up_date < start_of_today:
                raise self._field_error("followUpDate", "Follow-up date must be today or in the future")

        if appointment_id is not None:
            appt = self.access.appointments.get_by_id(appointment_id)
            if not appt:
                raise NotFoundError("Appointment not found")
            if appt.pet_id != pet_id:
                raise BadRequestError("Appointment does not belong to this pet")
            if appt.doctor_id != user.id:
                raise ForbiddenError("Only the assigned doctor can attach records to this appointment")

        record = self.repo.create(
            pet_id=pet_id,
            doctor_id=user.id,
            appointment_id=appointment_id,
            date=to_utc(date) if date else self.clock(),
            symptoms=symptoms,
            diagnosis=diagnosis,
            treatment=treatment,
            prescribed_medications=medications,
            notes=notes,
            follow_up_date=follow_up_date,
        )
        logger.info(f"Medical record {record.id} written by {user.id} for pet {pet_id}")
        self._audit("create", user, record)
        return record

    def list_for_pet(self, user: CurrentUser, pet_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Tuple[List[MedicalRecordDto], int]:
        offset, limit = check_paging(page, limit)
        self.access.readable_pet(user, pet_id)
        return self.repo.list_for_pet(pet_id, offset, limit)

    def get(self, user: CurrentUser, record_id: str) -> MedicalRecordDto:
        record = self.repo.get_by_id(record_id)
        if not record:
            raise NotFoundError("Medical record not found")
        self.access.readable_pet(user, record.pet_id, not_found="Medical record not found")
        return record

    def list_for_appointment(self, user: CurrentUser, appointment_id: str) -> List[MedicalRecordDto]:
        appt = self.access.appointments.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found")
        self.access.readable_pet(user, appt.pet_id, not_found="Appointment not found")
        return self.repo.list_for_appointment(appointment_id)

    def update(self, user: CurrentUser, record_id: str, fields: Dict[str, Any]) -> MedicalRecordDto:
        """Partial update, allowed to the doctor who wrote the record."""
        if not user.is_doctor:
            raise ForbiddenError("Only doctors can update medical records")
        record = self.repo.get_by_id(record_id)
        if not record:
            raise NotFoundError("Medical record not found")
        if record.doctor_id != user.id:
            raise ForbiddenError("Only the doctor who wrote this record can update it")

        values: Dict[str, Any] = {}
        if fields.get("symptoms") is not None:
            values["symptoms"] = clean_list(fields["symptoms"], "symptoms")
        if fields.get("treatment") is not None:
            values["treatment"] = clean_list(fields["treatment"], "treatment")
        if fields.get("prescribed_medications") is not None:
            values["prescribed_medications"] = clean_list(fields["prescribed_medications"], "prescribedMedications", required=False)
        if fields.get("diagnosis") is not None:
            values["diagnosis"] = self._valid_diagnosis(fields["diagnosis"])
        if fields.get("notes") is not None:
            values["notes"] = self._valid_notes(fields["notes"])
        if "follow_up_date" in fields:
            # explicit null clears the follow-up
            follow_up = fields["follow_up_date"]
            if follow_up is not None:
                follow_up = to_utc(follow_up)
                if follow_up <= self.clock():
                    raise self._field_error("followUpDate", "Follow-up date must be in the future")
            values["follow_up_date"] = follow_up

        if not values:
            return record
        updated = self.repo.update(record_id, values)
        if not updated:
            raise NotFoundError("Medical record not found")
        logger.info(f"Medical record {record_id} updated by {user.id}: {sorted(values)}")
        self._audit("update", user, updated, sorted(values))
        return updated

    def _audit(self, action: str, user: CurrentUser, record: MedicalRecordDto, changed: Optional[List[str]] = None) -> None:
        if self.audit is None:
            return
        details: Dict[str, Any] = {"recordId": record.id, "petId": record.pet_id}
        if changed:
            details["fields"] = changed
        self.audit.log(
            action=f"medical_record.{action}",
            actor_id=user.id,
            role=user.role.value,
            appointment_id=record.appointment_id,
            details=details,
        )

    @staticmethod
    def _field_error(field: str, message: str) -> ValidationError:
        return ValidationError(message, errors=[{"field": field, "message": message}])

    def _valid_diagnosis(self, diagnosis: str) -> str:
        diagnosis = (diagnosis or "").strip()
        if not diagnosis:
            raise self._field_error("diagnosis", "Diagnosis is required")
        return diagnosis

    def _valid_notes(self, notes: Optional[str]) -> Optional[str]:
        if notes is None:
            return None
        notes = notes.strip()
        if len(notes) > NOTES_MAX_LENGTH:
            raise self._field_error("notes", f"Notes cannot exceed {NOTES_MAX_LENGTH} characters")
        return notes
