# Models package (re-export feature modules for stable imports)
from .users.user import User
from .pets.pet import Pet
from .health.hospital import Hospital
from .health.appointment import Appointment
from .health.medical_record import MedicalRecord
from .health.prescription import Prescription
from .health.vaccination import Vaccination

__all__ = [
    "User",
    "Pet",
    "Hospital",
    "Appointment",
    "MedicalRecord",
    "Prescription",
    "Vaccination",
]
