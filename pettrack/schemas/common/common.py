# pettrack/schemas/common/common.py
import re
import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PHONE_PATTERN = re.compile(r"^[0-9]{10,15}$")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


def page_info(page: int, limit: int, total: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit)


class Address(RequestModel):
    street: str = Field(min_length=2)
    city: str = Field(min_length=2)
    state: str = Field(min_length=2)
    zip_code: str = Field(min_length=5)
    country: str = Field(min_length=2)


def lower_email(value: str) -> str:
    return value.lower()


def check_phone(value: str) -> str:
    if not PHONE_PATTERN.match(value):
        raise ValueError("Phone number must be 10 to 15 digits")
    return value


def check_uuid(value: str) -> str:
    try:
        return str(uuid.UUID(value))
    except (ValueError, TypeError, AttributeError):
        raise ValueError("Invalid ID format")
