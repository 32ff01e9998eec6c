from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Tuple


@dataclass
class HospitalDto:
    id: str
    name: str
    address: Dict[str, str]
    contact_number: str
    email: str
    services: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None


class HospitalRepository(Protocol):
    def get_by_id(self, hospital_id: str) -> Optional[HospitalDto]:
        ...

    def exists_with(self, name: str, email: str) -> bool:
        ...

    def create(self, name: str, address: Dict[str, str], contact_number: str, email: str, services: List[str]) -> HospitalDto:
        ...

    def list_page(self, offset: int, limit: int) -> Tuple[List[HospitalDto], int]:
        ...

    def list_all(self) -> List[HospitalDto]:
        ...
