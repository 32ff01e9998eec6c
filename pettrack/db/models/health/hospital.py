# pettrack/db/models/health/hospital.py
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ...columns import utc_datetime
from ....utils import utcnow

class Hospital(SQLModel, table=True):
    __tablename__ = "hospitals"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(unique=True, index=True)
    address: str = Field(default="{}")  # JSON encoded
    contact_number: str
    email: str = Field(unique=True)
    services: str = Field(default="[]")  # JSON encoded
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
