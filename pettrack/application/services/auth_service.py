import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..ports.hospital_repo import HospitalRepository
from ..ports.user_repo import AdminDto, UserDto, UserRepository
from ...exceptions import BadRequestError, NotFoundError, UnauthorizedError, ValidationError
from ...utils import create_jwt_token, hash_password, verify_password

logger = logging.getLogger(__name__)

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")
PASSWORD_RULES = (
    "Password must contain at least 8 characters, one uppercase, one lowercase, "
    "one number and one special character"
)


def check_password_strength(password: str) -> None:
    if not PASSWORD_PATTERN.match(password or ""):
        raise ValidationError(PASSWORD_RULES, errors=[{"field": "password", "message": PASSWORD_RULES}])


@dataclass
class AuthService:
    user_repo: UserRepository
    hospital_repo: HospitalRepository

    def register_pet_owner(self, email: str, password: str, first_name: str, last_name: str, phone: str, address: Dict[str, str]) -> Tuple[UserDto, str]:
        check_password_strength(password)
        if self.user_repo.email_exists(email):
            raise BadRequestError("Email already exists")
        user = self.user_repo.create_pet_owner(email, hash_password(password), first_name, last_name, phone, address)
        logger.info(f"Registered pet owner {user.id}")
        return user, create_jwt_token(user.id, user.role.value)

    def register_doctor(self, email: str, password: str, name: str, specialization: str, hospital_id: str, contact_number: str) -> Tuple[UserDto, str]:
        check_password_strength(password)
        if self.user_repo.email_exists(email):
            raise BadRequestError("Email already exists")
        if not self.hospital_repo.get_by_id(hospital_id):
            raise NotFoundError("Hospital not found")
        user = self.user_repo.create_doctor(email, hash_password(password), name, specialization, hospital_id, contact_number)
        logger.info(f"Registered doctor {user.id} at hospital {hospital_id}")
        return user, create_jwt_token(user.id, user.role.value)

    def login(self, email: str, password: str) -> Tuple[UserDto, str]:
        found = self.user_repo.get_credentials(email)
        if not found or not verify_password(password, found[1]):
            logger.warning("Login failed: invalid credentials")
            raise UnauthorizedError("Invalid credentials")
        user = found[0]
        return user, create_jwt_token(user.id, user.role.value)

    def get_profile(self, user_id: str) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def ensure_admin(self, email: str, password: str) -> Optional[AdminDto]:
        """Create the bootstrap admin once; returns it only when newly created."""
        if self.user_repo.email_exists(email):
            return None
        admin = self.user_repo.create_admin(email, hash_password(password))
        logger.info(f"Created bootstrap admin {admin.id}")
        return admin
