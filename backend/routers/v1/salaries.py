"""
Salary API Routes

Endpoints for monthly salary history.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.dependencies import get_acting_admin, get_salary_service
from backend.schemas.salary import SalaryListResponse, SalaryResponse, SalaryUpsert
from backend.services.salary_history import EmployeeNotFoundError, SalaryHistoryService
from engines.services.currency import parse_amount

router = APIRouter()


@router.get(
    "/",
    response_model=SalaryListResponse,
    summary="List salaries for a month",
)
async def list_salaries(
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    service: SalaryHistoryService = Depends(get_salary_service),
) -> SalaryListResponse:
    """Salary records saved for a period."""
    records = await service.list_salaries(year, month)
    return SalaryListResponse(
        year=year,
        month=month,
        items=[SalaryResponse.model_validate(r) for r in records],
        total_amount=sum(parse_amount(r.salary_amount) for r in records),
    )


@router.put(
    "/",
    response_model=SalaryResponse,
    summary="Save salary",
    description="Creates the record or replaces the amount for an existing (employee, year, month).",
)
async def upsert_salary(
    request: SalaryUpsert,
    service: SalaryHistoryService = Depends(get_salary_service),
    admin: str | None = Depends(get_acting_admin),
) -> SalaryResponse:
    """Save an employee's salary for a month."""
    try:
        record = await service.upsert_salary(
            employee_id=request.employee_id,
            year=request.year,
            month=request.month,
            salary_amount=request.salary_amount,
            currency_id=request.currency_id,
            updated_by=admin,
        )
    except EmployeeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return SalaryResponse.model_validate(record)


@router.get(
    "/employees/{employee_id}",
    response_model=list[SalaryResponse],
    summary="Employee salary history",
    description="An employee's salary records, newest first.",
)
async def employee_history(
    employee_id: UUID,
    service: SalaryHistoryService = Depends(get_salary_service),
) -> list[SalaryResponse]:
    records = await service.employee_history(employee_id)
    return [SalaryResponse.model_validate(r) for r in records]


@router.delete(
    "/employees/{employee_id}/{year}/{month}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete salary",
)
async def delete_salary(
    employee_id: UUID,
    year: int,
    month: int,
    service: SalaryHistoryService = Depends(get_salary_service),
) -> None:
    """Delete one salary record."""
    if not await service.delete_salary(employee_id, year, month):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No salary recorded for employee {employee_id} in {year}-{month:02d}",
        )
