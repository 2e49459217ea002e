"""
Bonus API Routes

Endpoints for computing employee bonuses and previewing a contract's
bonus split.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status

from backend.config import get_settings
from backend.dependencies import get_bonus_service
from backend.schemas.bonus import (
    BatchBonusRequest,
    BatchBonusResponse,
    BonusCalculationRequest,
    BonusResponse,
    ContractPreviewResponse,
)
from backend.services.bonus_service import BonusService
from engines.schemas.bonus_engine import EmployeeBonusResult, GroupDefinition
from engines.services.currency import format_currency
from engines.services.role_taxonomy import BONUS_GROUPS, GROUP_LOOKUP_ORDER

router = APIRouter()


def _formatted(amount: Decimal) -> str:
    return format_currency(amount, get_settings().base_currency_symbol)


def _to_response(result: EmployeeBonusResult) -> BonusResponse:
    return BonusResponse(
        **result.model_dump(),
        formatted_total=_formatted(result.total_bonus),
    )


@router.post(
    "/calculate",
    response_model=BonusResponse,
    summary="Calculate employee bonus",
    description="Compute one employee's bonus for a date range using the pool of the starting month.",
)
async def calculate_bonus(
    request: BonusCalculationRequest,
    service: BonusService = Depends(get_bonus_service),
) -> BonusResponse:
    """Calculate a single employee's bonus."""
    try:
        result = await service.compute_employee_bonus(
            employee_id=request.employee_id,
            employee_role=request.employee_role,
            date_from=request.date_from,
            date_to=request.date_to,
            manual_pool_amount=request.manual_pool_amount,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return _to_response(result)


@router.post(
    "/batch",
    response_model=BatchBonusResponse,
    summary="Calculate bonuses for several employees",
    description="Results are returned in the order employees were listed.",
)
async def calculate_bonuses(
    request: BatchBonusRequest,
    service: BonusService = Depends(get_bonus_service),
) -> BatchBonusResponse:
    """Calculate bonuses for a batch of employees."""
    try:
        results = await service.compute_bonuses(
            [(e.employee_id, e.employee_role) for e in request.employees],
            date_from=request.date_from,
            date_to=request.date_to,
            manual_pool_amount=request.manual_pool_amount,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    total = sum((r.total_bonus for r in results), Decimal("0"))
    return BatchBonusResponse(
        results=[_to_response(r) for r in results],
        total_bonus=total,
        formatted_total=_formatted(total),
        is_estimated=any(r.is_estimated for r in results),
    )


@router.get(
    "/contracts/{contract_id}/preview",
    response_model=ContractPreviewResponse,
    summary="Preview contract bonuses",
    description="Bonus each assigned employee earns from one signed contract.",
)
async def preview_contract(
    contract_id: str,
    service: BonusService = Depends(get_bonus_service),
) -> ContractPreviewResponse:
    """Per-slot bonus preview for a signed contract."""
    bonuses = await service.preview_contract(contract_id)
    if bonuses is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Signed contract {contract_id} not found",
        )

    total = sum((b.bonus_amount for b in bonuses), Decimal("0"))
    return ContractPreviewResponse(
        contract_id=contract_id,
        bonuses=bonuses,
        total_bonus=total,
        formatted_total=_formatted(total),
    )


@router.get(
    "/groups",
    response_model=list[GroupDefinition],
    summary="List bonus groups",
)
async def list_bonus_groups() -> list[GroupDefinition]:
    """Bonus groups with their pool shares and role percentages."""
    return [BONUS_GROUPS[group_id] for group_id in GROUP_LOOKUP_ORDER]
