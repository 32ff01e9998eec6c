import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from .core.config import settings
from .exceptions import ValidationError

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def utcnow() -> datetime:
    """Timezone-aware UTC now; every stored timestamp is aware UTC."""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to aware UTC. Naive values are taken to be UTC already.

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
    columns, so repositories pass what they load through here too.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_id() -> str:
    return str(uuid.uuid4())


def parse_id(value: str, label: str = "ID") -> str:
    """Validate an opaque id coming from a path or body."""
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(
            f"Invalid {label} format",
            errors=[{"field": label, "message": "Must be a UUID string"}],
        )


# =========================
# Password Handling
# =========================
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, stored: str) -> bool:
    if not stored:
        return False
    try:
        return pwd_context.verify(password, stored)
    except ValueError:
        # unrecognized or malformed hash
        return False


# =========================
# JWT Token Handling
# =========================
def create_jwt_token(user_id: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """Create JWT access token carrying the user id and role"""
    expire = utcnow() + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": user_id, "role": role, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
