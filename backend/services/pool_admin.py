"""
Pool Administration

Create, read, list and delete monthly bonus pools. Revenue left out of an
upsert is aggregated from that month's signed contracts.
"""

import calendar
import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from backend.services.accessors import LeadAccessor, PoolAccessor
from backend.services.cache import MonthlyPoolCache
from engines.schemas.bonus_engine import MonthlyPool
from engines.services.bonus_calculator import build_monthly_pool
from engines.services.currency import parse_amount

logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    _validate_period(year, month)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _validate_period(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    if not 1900 <= year <= 9999:
        raise ValueError(f"Year out of range: {year}")


class PoolAdministrationService:
    """Monthly bonus pool management; the cache is invalidated after each committed write."""

    def __init__(
        self,
        pools: PoolAccessor,
        leads: LeadAccessor,
        pool_cache: MonthlyPoolCache | None = None,
    ):
        self.pools = pools
        self.leads = leads
        self.pool_cache = pool_cache

    async def get_monthly_pool(self, year: int, month: int) -> MonthlyPool | None:
        """The configured pool for a period, or None when there is none."""
        _validate_period(year, month)
        return await self.pools.fetch_pool(year, month)

    async def list_monthly_pools(self, year: int | None = None) -> list[MonthlyPool]:
        """Historical pools, newest period first."""
        return await self.pools.list_pools(year)

    async def fetch_monthly_revenue(self, year: int, month: int) -> Decimal:
        """Total base-currency value of contracts signed during the month."""
        first_day, last_day = month_bounds(year, month)
        contracts = await self.leads.fetch_signed_contracts(first_day, last_day)
        return sum((c.base_amount for c in contracts), Decimal("0"))

    async def upsert_monthly_pool(
        self,
        year: int,
        month: int,
        total_bonus_pool_amount: object,
        total_revenue: object | None = None,
        updated_by: str | None = None,
    ) -> MonthlyPool:
        """
        Create or replace the pool for (year, month).

        Args:
            year: Calendar year
            month: Calendar month, 1-12
            total_bonus_pool_amount: Bonus budget, >= 0
            total_revenue: Month revenue; aggregated from signed contracts when omitted
            updated_by: Administrator recorded on the pool row

        Returns:
            The persisted pool with its derived pool_percentage
        """
        _validate_period(year, month)
        amount = parse_amount(total_bonus_pool_amount)
        if amount < 0:
            raise ValueError("Bonus pool amount cannot be negative")

        if total_revenue is None:
            revenue = await self.fetch_monthly_revenue(year, month)
        else:
            revenue = parse_amount(total_revenue)
            if revenue < 0:
                raise ValueError("Total revenue cannot be negative")

        pool = await self.pools.persist_pool(build_monthly_pool(year, month, amount, revenue), updated_by)
        await self._invalidate(year, month)
        logger.info(
            f"Bonus pool {year}-{month:02d} set to {pool.total_bonus_pool_amount} "
            f"on revenue {pool.total_revenue} ({pool.pool_percentage:.2f}%)"
        )
        return pool

    async def refresh_revenue(self, year: int, month: int) -> MonthlyPool | None:
        """Recompute an existing pool's revenue from signed contracts."""
        existing = await self.get_monthly_pool(year, month)
        if existing is None:
            return None
        return await self.upsert_monthly_pool(year, month, existing.total_bonus_pool_amount)

    async def delete_monthly_pool(self, pool_id: UUID) -> MonthlyPool | None:
        """Delete a pool by id. Returns the deleted pool, or None when absent."""
        deleted = await self.pools.delete_pool(pool_id)
        if deleted is not None:
            await self._invalidate(deleted.year, deleted.month)
        return deleted

    async def _invalidate(self, year: int, month: int) -> None:
        if self.pool_cache is not None:
            await self.pool_cache.invalidate(year, month)
