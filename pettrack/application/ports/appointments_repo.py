import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


OPEN_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)
TERMINAL_STATUSES = (AppointmentStatus.COMPLETED.value, AppointmentStatus.CANCELLED.value)


@dataclass
class AppointmentDto:
    id: str
    pet_id: str
    doctor_id: str
    created_by: str
    date: datetime
    status: str
    reason: str
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    pet_name: Optional[str] = None
    doctor_name: Optional[str] = None


@dataclass
class AppointmentFilter:
    """Conjunction of constraints; ``None`` means unconstrained.

    An empty ``pet_ids`` list matches nothing.
    """
    pet_ids: Optional[List[str]] = None
    doctor_id: Optional[str] = None
    statuses: Optional[List[str]] = None
    date_gte: Optional[datetime] = None
    date_lte: Optional[datetime] = None
    date_lt: Optional[datetime] = None


@dataclass
class AppointmentPage:
    items: List[AppointmentDto]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> Dict[str, int]:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


class AppointmentsRepository(Protocol):
    def create(self, pet_id: str, doctor_id: str, created_by: str, date: datetime, reason: str, notes: Optional[str]) -> AppointmentDto:
        ...

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def search(self, criteria: AppointmentFilter, offset: int, limit: int, descending: bool = False) -> Tuple[List[AppointmentDto], int]:
        ...

    def update_if_status(self, appointment_id: str, allowed_statuses: Iterable[str], values: Dict[str, Any]) -> Optional[AppointmentDto]:
        """Apply ``values`` only while the stored status is one of ``allowed_statuses``.

        Returns the updated appointment, or ``None`` when no row matched.
        """
        ...
