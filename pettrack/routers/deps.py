import logging
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from ..application.ports.user_repo import CurrentUser, UserRole
from ..application.services.appointments_service import AppointmentsService
from ..application.services.auth_service import AuthService
from ..application.services.hospital_service import HospitalService
from ..application.services.medical_records_service import MedicalRecordsService
from ..application.services.pet_care_access import PetCareAccess
from ..application.services.pet_service import PetService
from ..application.services.prescriptions_service import PrescriptionsService
from ..application.services.vaccinations_service import VaccinationsService
from ..database import get_session
from ..exceptions import ForbiddenError, UnauthorizedError
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.hospital_repository_sql import SqlHospitalRepository
from ..infrastructure.persistence.sqlalchemy.repositories.medical_records_repository_sql import SqlMedicalRecordsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.pet_repository_sql import SqlPetRepository
from ..infrastructure.persistence.sqlalchemy.repositories.prescriptions_repository_sql import SqlPrescriptionsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..infrastructure.persistence.sqlalchemy.repositories.vaccinations_repository_sql import SqlVaccinationsRepository
from ..utils import decode_jwt_token

logger = logging.getLogger(__name__)

oauth2_scheme = HTTPBearer(auto_error=False)

_audit_logger = StdAuditLogger()


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme)) -> CurrentUser:
    if not credentials or not credentials.credentials:
        raise UnauthorizedError("Authentication required")
    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        logger.warning("JWT token decode failed - invalid or expired token")
        raise UnauthorizedError("Invalid or expired token")
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token: missing user ID")
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        raise UnauthorizedError("Invalid token: unknown role")
    return CurrentUser(id=str(user_id), role=role)


def require_roles(*roles: UserRole) -> Callable[..., CurrentUser]:
    """Dependency rejecting callers whose role is not in ``roles``."""
    allowed = set(roles)

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise ForbiddenError("You do not have permission to perform this action")
        return user

    return dependency


def get_appointments_service(session: Session = Depends(get_session)) -> AppointmentsService:
    return AppointmentsService(
        repo=SqlAppointmentsRepository(session),
        pet_repo=SqlPetRepository(session),
        user_repo=SqlUserRepository(session),
        audit=_audit_logger,
    )


def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(user_repo=SqlUserRepository(session), hospital_repo=SqlHospitalRepository(session))


def get_pet_service(session: Session = Depends(get_session)) -> PetService:
    return PetService(repo=SqlPetRepository(session))


def get_hospital_service(session: Session = Depends(get_session)) -> HospitalService:
    return HospitalService(repo=SqlHospitalRepository(session), user_repo=SqlUserRepository(session))


def _pet_care_access(session: Session) -> PetCareAccess:
    return PetCareAccess(pet_repo=SqlPetRepository(session), appointments=SqlAppointmentsRepository(session))


def get_medical_records_service(session: Session = Depends(get_session)) -> MedicalRecordsService:
    return MedicalRecordsService(repo=SqlMedicalRecordsRepository(session), access=_pet_care_access(session), audit=_audit_logger)


def get_prescriptions_service(session: Session = Depends(get_session)) -> PrescriptionsService:
    return PrescriptionsService(repo=SqlPrescriptionsRepository(session), access=_pet_care_access(session), audit=_audit_logger)


def get_vaccinations_service(session: Session = Depends(get_session)) -> VaccinationsService:
    return VaccinationsService(repo=SqlVaccinationsRepository(session), access=_pet_care_access(session), audit=_audit_logger)
