from typing import Any, Dict, Iterable, List, Optional, Tuple
from datetime import datetime
from sqlalchemy import func, update
from sqlmodel import Session, select

from .....db.models import Appointment, Pet, User
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    AppointmentFilter,
)
from .....utils import generate_id, to_utc, utcnow


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        pet = self.session.get(Pet, a.pet_id)
        doctor = self.session.get(User, a.doctor_id)
        return AppointmentDto(
            id=a.id,
            pet_id=a.pet_id,
            doctor_id=a.doctor_id,
            created_by=a.created_by,
            date=to_utc(a.date),
            status=a.status,
            reason=a.reason,
            notes=a.notes,
            created_at=to_utc(a.created_at),
            updated_at=to_utc(a.updated_at),
            pet_name=pet.name if pet else None,
            doctor_name=doctor.name if doctor else None,
        )

    def _apply_filter(self, stmt, criteria: AppointmentFilter):
        if criteria.pet_ids is not None:
            stmt = stmt.where(Appointment.pet_id.in_(criteria.pet_ids))
        if criteria.doctor_id is not None:
            stmt = stmt.where(Appointment.doctor_id == criteria.doctor_id)
        if criteria.statuses is not None:
            stmt = stmt.where(Appointment.status.in_(criteria.statuses))
        if criteria.date_gte is not None:
            stmt = stmt.where(Appointment.date >= criteria.date_gte)
        if criteria.date_lte is not None:
            stmt = stmt.where(Appointment.date <= criteria.date_lte)
        if criteria.date_lt is not None:
            stmt = stmt.where(Appointment.date < criteria.date_lt)
        return stmt

    def create(self, pet_id: str, doctor_id: str, created_by: str, date: datetime, reason: str, notes: Optional[str]) -> AppointmentDto:
        appt = Appointment(
            id=generate_id(),
            pet_id=pet_id,
            doctor_id=doctor_id,
            created_by=created_by,
            date=date,
            reason=reason,
            notes=notes,
            status="pending",
        )
        self.session.add(appt)
        self.session.commit()
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        return self._appt_to_dto(a) if a else None

    def search(self, criteria: AppointmentFilter, offset: int, limit: int, descending: bool = False) -> Tuple[List[AppointmentDto], int]:
        count_stmt = self._apply_filter(select(func.count()).select_from(Appointment), criteria)
        total = self.session.exec(count_stmt).one()

        order = Appointment.date.desc() if descending else Appointment.date.asc()
        rows = self.session.exec(
            self._apply_filter(select(Appointment), criteria)
            .order_by(order, Appointment.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._appt_to_dto(r) for r in rows], int(total)

    def update_if_status(self, appointment_id: str, allowed_statuses: Iterable[str], values: Dict[str, Any]) -> Optional[AppointmentDto]:
        # Single conditional UPDATE so concurrent transitions cannot both succeed
        stmt = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .where(Appointment.status.in_(list(allowed_statuses)))
            .values(**values, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(stmt)
        if result.rowcount != 1:
            self.session.rollback()
            return None
        self.session.commit()
        a = self.session.get(Appointment, appointment_id)
        if a is None:
            return None
        self.session.refresh(a)
        return self._appt_to_dto(a)
