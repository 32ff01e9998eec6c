# pettrack/db/models/health/medical_record.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ...columns import utc_datetime
from ....utils import utcnow

class MedicalRecord(SQLModel, table=True):
    __tablename__ = "medical_records"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    pet_id: str = Field(foreign_key="pets.id", index=True)
    doctor_id: str = Field(foreign_key="users.id", index=True)
    appointment_id: Optional[str] = Field(default=None, foreign_key="appointments.id", index=True)
    date: datetime = Field(default_factory=utcnow, sa_column=utc_datetime(index=True))
    symptoms: str = Field(default="[]")  # JSON encoded
    diagnosis: str
    treatment: str = Field(default="[]")  # JSON encoded
    prescribed_medications: str = Field(default="[]")  # JSON encoded
    notes: Optional[str] = Field(default=None, max_length=1000)
    follow_up_date: Optional[datetime] = Field(default=None, sa_column=utc_datetime(nullable=True))
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
