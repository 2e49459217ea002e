"""
Bonus Pydantic Schemas

API request/response models for bonus calculation endpoints.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from engines.schemas.bonus_engine import ContractRoleBonus, EmployeeBonusResult


class _DateRange(BaseModel):
    date_from: date = Field(..., description="Start of the calculation range (inclusive)")
    date_to: date = Field(..., description="End of the calculation range (inclusive)")
    manual_pool_amount: Decimal | None = Field(
        default=None,
        ge=0,
        description="Pool amount for pool-based roles; defaults to the configured monthly pool",
    )

    @model_validator(mode="after")
    def check_range(self):
        if self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self


class BonusCalculationRequest(_DateRange):
    """Schema for a single employee bonus calculation."""

    employee_id: str = Field(..., min_length=1)
    employee_role: str = Field(..., description="Bonus role code, e.g. s, z, c, lawyer, e, h, ma, col, p")


class EmployeeRoleRef(BaseModel):
    """One employee in a batch request."""

    employee_id: str = Field(..., min_length=1)
    employee_role: str


class BatchBonusRequest(_DateRange):
    """Schema for computing bonuses for several employees at once."""

    employees: list[EmployeeRoleRef] = Field(..., min_length=1, max_length=500)


class BonusResponse(EmployeeBonusResult):
    """Employee bonus with its display-formatted total."""

    formatted_total: str


class BatchBonusResponse(BaseModel):
    """Batch results in request order."""

    results: list[BonusResponse]
    total_bonus: Decimal
    formatted_total: str
    is_estimated: bool


class ContractPreviewResponse(BaseModel):
    """Per-slot bonus preview for one contract."""

    contract_id: str
    bonuses: list[ContractRoleBonus]
    total_bonus: Decimal
    formatted_total: str
