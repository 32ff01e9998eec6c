# pettrack/db/models/users/user.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ...columns import utc_datetime
from ....utils import utcnow

class User(SQLModel, table=True):
    """Single table for every role; ``role`` decides which columns are populated."""
    __tablename__ = "users"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: str
    role: str = Field(index=True)  # petOwner | doctor | admin

    # Pet owner columns
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=15)
    address: Optional[str] = Field(default=None)  # JSON encoded

    # Doctor columns
    name: Optional[str] = Field(default=None, max_length=100)
    specialization: Optional[str] = Field(default=None, max_length=100)
    hospital_id: Optional[str] = Field(default=None, foreign_key="hospitals.id", index=True)
    contact_number: Optional[str] = Field(default=None, max_length=15)

    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_datetime())
