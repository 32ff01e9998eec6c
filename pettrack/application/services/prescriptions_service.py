import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..ports.audit_logger import AuditLogger
from ..ports.prescriptions_repo import MedicationDto, PrescriptionDto, PrescriptionsRepository
from ..ports.user_repo import CurrentUser
from .pet_care_access import DEFAULT_PAGE_SIZE, PetCareAccess, check_paging
from ...exceptions import NotFoundError, ValidationError
from ...utils import utcnow

logger = logging.getLogger(__name__)

INSTRUCTIONS_MAX_LENGTH = 1000


def _field_error(field: str, message: str) -> ValidationError:
    return ValidationError(message, errors=[{"field": field, "message": message}])


def render_prescription(prescription: PrescriptionDto) -> str:
    """Printable plain-text form of a prescription."""
    lines = [
        "PRESCRIPTION",
        f"Date: {prescription.date.date().isoformat()}",
        f"Pet: {prescription.pet_name or prescription.pet_id}",
        f"Doctor: {prescription.doctor_name or prescription.doctor_id}",
        "",
        "Medications:",
    ]
    for med in prescription.medications:
        lines.append(f"  - {med.name}: {med.dosage}, {med.frequency} for {med.duration}")
    lines.append("")
    lines.append(f"Instructions: {prescription.instructions or 'None'}")
    return "\n".join(lines) + "\n"


@dataclass
class PrescriptionsService:
    repo: PrescriptionsRepository
    access: PetCareAccess
    audit: Optional[AuditLogger] = None
    clock: Callable[[], datetime] = utcnow

    def create(self, user: CurrentUser, pet_id: str, medications: List[MedicationDto], instructions: Optional[str] = None) -> PrescriptionDto:
        self.access.writable_pet(user, pet_id)
        if not medications:
            raise _field_error("medications", "At least one medication is required")
        for i, med in enumerate(medications):
            for name in ("name", "dosage", "frequency", "duration"):
                if not (getattr(med, name) or "").strip():
                    raise _field_error(f"medications.{i}.{name}", f"Medication {name} is required")
        if instructions is not None:
            instructions = instructions.strip()
            if len(instructions) > INSTRUCTIONS_MAX_LENGTH:
                raise _field_error("instructions", f"Instructions cannot exceed {INSTRUCTIONS_MAX_LENGTH} characters")

        prescription = self.repo.create(pet_id, user.id, self.clock(), medications, instructions)
        logger.info(f"Prescription {prescription.id} issued by {user.id} for pet {pet_id}")
        if self.audit is not None:
            self.audit.log(
                action="prescription.create",
                actor_id=user.id,
                role=user.role.value,
                details={"prescriptionId": prescription.id, "petId": pet_id, "medications": len(medications)},
            )
        return prescription

    def list_for_pet(self, user: CurrentUser, pet_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Tuple[List[PrescriptionDto], int]:
        offset, limit = check_paging(page, limit)
        self.access.readable_pet(user, pet_id)
        return self.repo.list_for_pet(pet_id, offset, limit)

    def get(self, user: CurrentUser, prescription_id: str) -> PrescriptionDto:
        prescription = self.repo.get_by_id(prescription_id)
        if not prescription:
            raise NotFoundError("Prescription not found")
        self.access.readable_pet(user, prescription.pet_id, not_found="Prescription not found")
        return prescription

    def render(self, user: CurrentUser, prescription_id: str) -> str:
        return render_prescription(self.get(user, prescription_id))
