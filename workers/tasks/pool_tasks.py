"""
Pool Tasks

Background tasks keeping monthly pool revenue current and computing
bonus batches outside the request cycle.
"""

import asyncio
import logging
from datetime import date

from workers.celery_app import app

logger = logging.getLogger(__name__)

# One loop per worker process; pooled DB and Redis connections are bound to it
_loop: asyncio.AbstractEventLoop | None = None


def run_async(coro):
    """Run a coroutine to completion on this worker's event loop."""
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_loop)
    return _loop.run_until_complete(coro)


@app.task(bind=True, max_retries=2, default_retry_delay=120)
def refresh_pool_revenue(self, year: int, month: int):
    """
    Recompute a configured pool's revenue from signed contracts.

    Contracts signed or re-dated after the pool was saved change the
    month's revenue and therefore its pool_percentage.
    """
    logger.info(f"Refreshing bonus pool revenue for {year}-{month:02d}")
    try:
        return run_async(_async_refresh_pool(year, month))
    except Exception as exc:
        logger.error(f"Pool revenue refresh failed for {year}-{month:02d}: {exc}")
        raise self.retry(exc=exc)


@app.task
def refresh_current_month_pool():
    """Nightly refresh of the current month's pool revenue."""
    today = date.today()
    refresh_pool_revenue.delay(today.year, today.month)


@app.task(bind=True, max_retries=1, default_retry_delay=60)
def compute_bonus_batch(
    self,
    employees: list[list[str]],
    date_from: str,
    date_to: str,
    manual_pool_amount: str | None = None,
):
    """
    Compute bonuses for [employee_id, role_code] pairs.

    Returns JSON-safe results in the order employees were given.
    """
    logger.info(f"Computing bonus batch of {len(employees)} employees for {date_from}..{date_to}")
    try:
        return run_async(
            _async_compute_batch(
                [(employee_id, role) for employee_id, role in employees],
                date.fromisoformat(date_from),
                date.fromisoformat(date_to),
                manual_pool_amount,
            )
        )
    except ValueError:
        raise
    except Exception as exc:
        logger.error(f"Bonus batch failed: {exc}")
        raise self.retry(exc=exc)


async def _async_refresh_pool(year: int, month: int) -> dict:
    """Refresh pool revenue asynchronously."""
    from backend.db.session import get_async_session
    from backend.services.accessors import SqlLeadAccessor, SqlPoolAccessor
    from backend.services.cache import MonthlyPoolCache, get_redis
    from backend.services.pool_admin import PoolAdministrationService

    async with get_async_session() as db:
        service = PoolAdministrationService(
            pools=SqlPoolAccessor(db),
            leads=SqlLeadAccessor(db),
            pool_cache=MonthlyPoolCache(get_redis()),
        )
        pool = await service.refresh_revenue(year, month)

    if pool is None:
        logger.info(f"No bonus pool configured for {year}-{month:02d}; nothing to refresh")
        return {"year": year, "month": month, "status": "not_configured"}

    return {
        "year": year,
        "month": month,
        "status": "refreshed",
        "total_revenue": str(pool.total_revenue),
        "pool_percentage": str(pool.pool_percentage),
    }


async def _async_compute_batch(
    employees: list[tuple[str, str]],
    date_from: date,
    date_to: date,
    manual_pool_amount: str | None,
) -> list[dict]:
    """Compute a bonus batch asynchronously."""
    from backend.db.session import get_async_session
    from backend.services.accessors import SqlEmployeeDirectory, SqlLeadAccessor, SqlPoolAccessor
    from backend.services.bonus_service import BonusService
    from engines.services.currency import parse_amount

    async with get_async_session() as db:
        service = BonusService(
            leads=SqlLeadAccessor(db),
            pools=SqlPoolAccessor(db),
            directory=SqlEmployeeDirectory(db),
        )
        results = await service.compute_bonuses(
            employees,
            date_from,
            date_to,
            manual_pool_amount=parse_amount(manual_pool_amount) if manual_pool_amount is not None else None,
        )

    return [r.model_dump(mode="json") for r in results]
