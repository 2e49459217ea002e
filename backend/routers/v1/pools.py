"""
Bonus Pool API Routes

Endpoints for administering monthly bonus pools.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from backend.config import get_settings
from backend.dependencies import get_acting_admin, get_pool_admin_service
from backend.schemas.pool import (
    MonthlyPoolListResponse,
    MonthlyPoolResponse,
    MonthlyPoolUpsert,
    MonthlyRevenueResponse,
)
from backend.services.pool_admin import PoolAdministrationService
from engines.schemas.bonus_engine import MonthlyPool
from engines.services.currency import format_currency

router = APIRouter()


def _to_response(pool: MonthlyPool) -> MonthlyPoolResponse:
    symbol = get_settings().base_currency_symbol
    return MonthlyPoolResponse.from_pool(pool, format_currency(pool.total_bonus_pool_amount, symbol))


@router.get(
    "/",
    response_model=MonthlyPoolListResponse,
    summary="List bonus pools",
    description="Historical monthly pools, newest first.",
)
async def list_pools(
    year: int | None = Query(None, ge=1900, le=9999),
    service: PoolAdministrationService = Depends(get_pool_admin_service),
) -> MonthlyPoolListResponse:
    """List configured pools."""
    pools = await service.list_monthly_pools(year)
    return MonthlyPoolListResponse(
        items=[_to_response(p) for p in pools],
        total=len(pools),
    )


@router.put(
    "/",
    response_model=MonthlyPoolResponse,
    summary="Create or replace a monthly pool",
    description="Revenue is aggregated from that month's signed contracts when omitted.",
)
async def upsert_pool(
    request: MonthlyPoolUpsert,
    service: PoolAdministrationService = Depends(get_pool_admin_service),
    admin: str | None = Depends(get_acting_admin),
) -> MonthlyPoolResponse:
    """Set the bonus pool for a month."""
    try:
        pool = await service.upsert_monthly_pool(
            year=request.year,
            month=request.month,
            total_bonus_pool_amount=request.total_bonus_pool_amount,
            total_revenue=request.total_revenue,
            updated_by=admin,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return _to_response(pool)


@router.get(
    "/{year}/{month}",
    response_model=MonthlyPoolResponse,
    summary="Get monthly pool",
)
async def get_pool(
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12),
    service: PoolAdministrationService = Depends(get_pool_admin_service),
) -> MonthlyPoolResponse:
    """Get the pool configured for a month."""
    pool = await service.get_monthly_pool(year, month)
    if pool is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No bonus pool configured for {year}-{month:02d}",
        )
    return _to_response(pool)


@router.get(
    "/{year}/{month}/revenue",
    response_model=MonthlyRevenueResponse,
    summary="Get monthly revenue",
    description="Base-currency total of contracts signed during the month.",
)
async def get_revenue(
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12),
    service: PoolAdministrationService = Depends(get_pool_admin_service),
) -> MonthlyRevenueResponse:
    """Revenue the pool percentage would be derived from."""
    revenue = await service.fetch_monthly_revenue(year, month)
    return MonthlyRevenueResponse(
        year=year,
        month=month,
        total_revenue=revenue,
        formatted_revenue=format_currency(revenue, get_settings().base_currency_symbol),
    )


@router.delete(
    "/{pool_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete monthly pool",
)
async def delete_pool(
    pool_id: UUID,
    service: PoolAdministrationService = Depends(get_pool_admin_service),
) -> None:
    """Delete a pool by id."""
    deleted = await service.delete_monthly_pool(pool_id)
    if deleted is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Bonus pool {pool_id} not found",
        )
