from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..ports.hospital_repo import HospitalDto, HospitalRepository
from ..ports.user_repo import DoctorDto, UserRepository
from ...exceptions import BadRequestError, NotFoundError


@dataclass
class HospitalService:
    repo: HospitalRepository
    user_repo: UserRepository

    def create(self, name: str, address: Dict[str, str], contact_number: str, email: str, services: List[str]) -> HospitalDto:
        if self.repo.exists_with(name, email):
            raise BadRequestError("A hospital with this name or email already exists")
        return self.repo.create(name, address, contact_number, email, services)

    def list_page(self, page: int, limit: int) -> Tuple[List[HospitalDto], int]:
        return self.repo.list_page((page - 1) * limit, limit)

    def list_for_registration(self) -> List[HospitalDto]:
        return self.repo.list_all()

    def get(self, hospital_id: str) -> HospitalDto:
        hospital = self.repo.get_by_id(hospital_id)
        if not hospital:
            raise NotFoundError("Hospital not found")
        return hospital

    def list_doctors(self, hospital_id: str) -> List[DoctorDto]:
        self.get(hospital_id)
        return self.user_repo.list_doctors_for_hospital(hospital_id)
