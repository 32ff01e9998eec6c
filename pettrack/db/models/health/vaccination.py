# pettrack/db/models/health/vaccination.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ...columns import utc_datetime
from ....utils import utcnow

class Vaccination(SQLModel, table=True):
    __tablename__ = "vaccinations"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    pet_id: str = Field(foreign_key="pets.id", index=True)
    administered_by: str = Field(foreign_key="users.id", index=True)
    name: str = Field(max_length=100)
    date: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
    next_due_date: datetime = Field(sa_column=utc_datetime(index=True))
    notes: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
