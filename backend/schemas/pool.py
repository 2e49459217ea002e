"""
Bonus Pool Pydantic Schemas

API request/response models for monthly bonus pool administration.
"""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from engines.schemas.bonus_engine import MonthlyPool


class MonthlyPoolUpsert(BaseModel):
    """Schema for creating or replacing a month's bonus pool."""

    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=1, le=12)
    total_bonus_pool_amount: Decimal = Field(..., ge=0)
    total_revenue: Decimal | None = Field(
        default=None,
        ge=0,
        description="Month revenue; aggregated from signed contracts when omitted",
    )


class MonthlyPoolResponse(BaseModel):
    """Schema for a monthly bonus pool."""

    id: UUID | None
    year: int
    month: int
    total_bonus_pool_amount: Decimal
    total_revenue: Decimal
    pool_percentage: Decimal
    formatted_pool: str

    @classmethod
    def from_pool(cls, pool: MonthlyPool, formatted_pool: str) -> "MonthlyPoolResponse":
        return cls(**pool.model_dump(), formatted_pool=formatted_pool)


class MonthlyPoolListResponse(BaseModel):
    """Historical pools, newest first."""

    items: list[MonthlyPoolResponse]
    total: int


class MonthlyRevenueResponse(BaseModel):
    """Signed-contract revenue for a month in base currency."""

    year: int
    month: int
    total_revenue: Decimal
    formatted_revenue: str
