import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv

# Load environment variables as early as possible
load_dotenv()

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from .application.services.auth_service import AuthService
from .core.config import Settings, settings as default_settings
from .database import build_engine, check_connection, create_db_and_tables
from .exceptions import http_exception_handler, validation_exception_handler
from .infrastructure.persistence.sqlalchemy.repositories.hospital_repository_sql import SqlHospitalRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, RateLimitMiddleware, SecurityMiddleware
from .routers import (
    appointments_router,
    auth_router,
    hospitals_router,
    medical_router,
    pets_router,
    prescriptions_router,
    vaccinations_router,
)
from .utils import utcnow

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format=default_settings.LOG_FORMAT,
)
logger = logging.getLogger(__name__)


def _build_rate_limiter(settings: Settings):
    if settings.REDIS_URL:
        from .infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter
        logger.info("Using Redis rate limiter")
        return RedisRateLimiter(settings.REDIS_URL)
    from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
    return InMemoryRateLimiter()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Starting {settings.APP_NAME}...")
        owns_engine = getattr(app.state, "engine", None) is None
        if owns_engine:
            app.state.engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        create_db_and_tables(app.state.engine)

        if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
            with Session(app.state.engine) as session:
                auth = AuthService(user_repo=SqlUserRepository(session), hospital_repo=SqlHospitalRepository(session))
                auth.ensure_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)

        yield

        # Shutdown
        logger.info(f"Shutting down {settings.APP_NAME}...")
        if owns_engine:
            app.state.engine.dispose()
            app.state.engine = None

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None),
    )
    app.state.engine = None

    # Add custom exception handlers
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Add middleware
    app.add_middleware(ErrorHandlingMiddleware, settings=settings)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    if settings.RATE_LIMIT_ENABLED:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=_build_rate_limiter(settings),
            max_requests=settings.RATE_LIMIT_PER_WINDOW,
            window_seconds=settings.RATE_LIMIT_WINDOW_SEC,
            path_prefix=settings.API_PREFIX,
        )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router, prefix=settings.API_PREFIX)
    app.include_router(pets_router.router, prefix=settings.API_PREFIX)
    app.include_router(hospitals_router.router, prefix=settings.API_PREFIX)
    app.include_router(appointments_router.router, prefix=settings.API_PREFIX)
    app.include_router(appointments_router.doctor_router, prefix=settings.API_PREFIX)
    app.include_router(medical_router.router, prefix=settings.API_PREFIX)
    app.include_router(prescriptions_router.router, prefix=settings.API_PREFIX)
    app.include_router(vaccinations_router.router, prefix=settings.API_PREFIX)

    @app.get("/health")
    def health_check():
        engine = app.state.engine
        db_ok = engine is not None and check_connection(engine)
        return {
            "status": "healthy" if db_ok else "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "database": "connected" if db_ok else "unavailable",
            "timestamp": utcnow().isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pettrack.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
