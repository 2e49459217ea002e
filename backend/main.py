"""
Bonus Pool Service - Main Application Entry Point

Two-tier bonus calculation, monthly pool administration and salary history.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import get_settings
from backend.db.session import engine
from backend.routers.v1 import bonuses, pools, salaries
from backend.services.accessors import AccessorFailure

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Sentry for error monitoring
if settings.sentry_dsn:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"bonuspool@{settings.app_version}",
        traces_sample_rate=0.1 if settings.environment == "production" else 1.0,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    # Database connection pool is lazy-initialized by SQLAlchemy
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description=(
        "Computes commission-style bonuses from signed-contract revenue through a "
        "group-then-role percentage cascade, and administers monthly bonus pools."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    openapi_url="/api/openapi.json" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AccessorFailure)
async def accessor_failure_handler(request: Request, exc: AccessorFailure) -> JSONResponse:
    """Storage outages surface as 503 instead of empty results."""
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": f"Data source unavailable: {exc.operation}"},
    )


# Health check endpoints
@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "bonuspool-api"}


@app.get("/health/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check with service metadata."""
    return {
        "status": "ready",
        "service": "bonuspool-api",
        "version": settings.app_version,
        "environment": settings.environment,
    }


# API v1 routes
app.include_router(
    bonuses.router,
    prefix=f"{settings.api_v1_prefix}/bonuses",
    tags=["Bonuses"],
)
app.include_router(
    pools.router,
    prefix=f"{settings.api_v1_prefix}/bonus-pools",
    tags=["Bonus Pools"],
)
app.include_router(
    salaries.router,
    prefix=f"{settings.api_v1_prefix}/salaries",
    tags=["Salaries"],
)
