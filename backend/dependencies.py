"""
Service Dependencies

FastAPI providers wiring request-scoped sessions into the services.
Tests override these with in-memory fakes.
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import get_settings
from backend.db.session import get_db
from backend.services.accessors import SqlEmployeeDirectory, SqlLeadAccessor, SqlPoolAccessor
from backend.services.bonus_service import BonusService
from backend.services.cache import MonthlyPoolCache, get_redis
from backend.services.pool_admin import PoolAdministrationService
from backend.services.salary_history import SalaryHistoryService


def get_pool_cache() -> MonthlyPoolCache:
    return MonthlyPoolCache(get_redis(), ttl=get_settings().pool_cache_ttl_seconds)


def get_bonus_service(
    db: AsyncSession = Depends(get_db),
    pool_cache: MonthlyPoolCache = Depends(get_pool_cache),
) -> BonusService:
    return BonusService(
        leads=SqlLeadAccessor(db),
        pools=SqlPoolAccessor(db),
        directory=SqlEmployeeDirectory(db),
        pool_cache=pool_cache,
    )


def get_pool_admin_service(
    db: AsyncSession = Depends(get_db),
    pool_cache: MonthlyPoolCache = Depends(get_pool_cache),
) -> PoolAdministrationService:
    return PoolAdministrationService(
        pools=SqlPoolAccessor(db),
        leads=SqlLeadAccessor(db),
        pool_cache=pool_cache,
    )


def get_salary_service(db: AsyncSession = Depends(get_db)) -> SalaryHistoryService:
    return SalaryHistoryService(db)


def get_acting_admin(x_admin_user: str | None = Header(default=None)) -> str | None:
    """Administrator name recorded on pool and salary changes."""
    return x_admin_user[:100] if x_admin_user else None
