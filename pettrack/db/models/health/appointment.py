# pettrack/db/models/health/appointment.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ...columns import utc_datetime
from ....utils import utcnow

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    pet_id: str = Field(foreign_key="pets.id", index=True)
    doctor_id: str = Field(foreign_key="users.id", index=True)
    created_by: str = Field(foreign_key="users.id", index=True)
    date: datetime = Field(sa_column=utc_datetime(index=True))
    status: str = Field(default="pending", index=True)
    reason: str = Field(max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
