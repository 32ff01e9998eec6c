# Routers package
from . import auth_router
from . import appointments_router
from . import hospitals_router
from . import medical_router
from . import pets_router
from . import prescriptions_router
from . import vaccinations_router

__all__ = [
    "auth_router",
    "appointments_router",
    "hospitals_router",
    "medical_router",
    "pets_router",
    "prescriptions_router",
    "vaccinations_router",
]
