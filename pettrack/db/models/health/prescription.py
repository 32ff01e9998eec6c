# pettrack/db/models/health/prescription.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ...columns import utc_datetime
from ....utils import utcnow

class Prescription(SQLModel, table=True):
    __tablename__ = "prescriptions"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    pet_id: str = Field(foreign_key="pets.id", index=True)
    doctor_id: str = Field(foreign_key="users.id", index=True)
    date: datetime = Field(default_factory=utcnow, sa_column=utc_datetime(index=True))
    medications: str = Field(default="[]")  # JSON list of {name, dosage, frequency, duration}
    instructions: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
