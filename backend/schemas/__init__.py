"""Pydantic API Schemas for the bonus pool service."""

from backend.schemas.bonus import (
    BatchBonusRequest,
    BatchBonusResponse,
    BonusCalculationRequest,
    BonusResponse,
    ContractPreviewResponse,
    EmployeeRoleRef,
)
from backend.schemas.pool import (
    MonthlyPoolListResponse,
    MonthlyPoolResponse,
    MonthlyPoolUpsert,
    MonthlyRevenueResponse,
)
from backend.schemas.salary import (
    SalaryListResponse,
    SalaryResponse,
    SalaryUpsert,
)

__all__ = [
    "BonusCalculationRequest",
    "BatchBonusRequest",
    "BatchBonusResponse",
    "BonusResponse",
    "ContractPreviewResponse",
    "EmployeeRoleRef",
    "MonthlyPoolUpsert",
    "MonthlyPoolResponse",
    "MonthlyPoolListResponse",
    "MonthlyRevenueResponse",
    "SalaryUpsert",
    "SalaryResponse",
    "SalaryListResponse",
]
