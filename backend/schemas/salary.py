"""
Salary Pydantic Schemas

API request/response models for monthly salary history.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SalaryUpsert(BaseModel):
    """Schema for saving an employee's salary for a month."""

    employee_id: UUID
    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=1, le=12)
    salary_amount: Decimal = Field(..., ge=0)
    currency_id: int | None = Field(default=None, ge=1)


class SalaryResponse(BaseModel):
    """Schema for a salary record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    employee_id: UUID
    year: int
    month: int
    salary_amount: Decimal
    currency_id: int | None
    updated_by: str | None = None
    updated_at: datetime | None = None


class SalaryListResponse(BaseModel):
    """Salary records for one period."""

    year: int
    month: int
    items: list[SalaryResponse]
    total_amount: Decimal
