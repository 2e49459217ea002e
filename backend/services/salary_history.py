"""
Salary History Service

Monthly salary records per employee. One record per (employee, year,
month); saving again for the same period replaces the amount.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.employee import Employee
from backend.models.employee_salary import EmployeeSalary
from engines.services.currency import parse_amount

logger = logging.getLogger(__name__)


class EmployeeNotFoundError(LookupError):
    """Salary saved for an employee id that does not exist."""


class SalaryHistoryService:
    """Read and write monthly salary records."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def list_salaries(self, year: int, month: int) -> list[EmployeeSalary]:
        """All salary records for a period."""
        _validate_month(month)
        result = await self.db.execute(
            select(EmployeeSalary)
            .where(EmployeeSalary.year == year, EmployeeSalary.month == month)
            .order_by(EmployeeSalary.employee_id)
        )
        return list(result.scalars().all())

    async def employee_history(self, employee_id: UUID) -> list[EmployeeSalary]:
        """An employee's salary records, newest period first."""
        result = await self.db.execute(
            select(EmployeeSalary)
            .where(EmployeeSalary.employee_id == employee_id)
            .order_by(EmployeeSalary.year.desc(), EmployeeSalary.month.desc())
        )
        return list(result.scalars().all())

    async def upsert_salary(
        self,
        employee_id: UUID,
        year: int,
        month: int,
        salary_amount: object,
        currency_id: int | None = None,
        updated_by: str | None = None,
    ) -> EmployeeSalary:
        """Create or replace the salary for (employee_id, year, month)."""
        _validate_month(month)
        amount = parse_amount(salary_amount)
        if amount < 0:
            raise ValueError("Salary amount cannot be negative")

        if await self.db.get(Employee, employee_id) is None:
            raise EmployeeNotFoundError(f"Employee {employee_id} not found")

        record = await self._find(employee_id, year, month)
        if record is None:
            record = EmployeeSalary(
                employee_id=employee_id,
                year=year,
                month=month,
                created_by=updated_by,
            )
            self.db.add(record)
        record.salary_amount = amount
        record.currency_id = currency_id
        record.updated_by = updated_by

        await self.db.flush()
        await self.db.refresh(record)
        logger.info(f"Saved salary for employee {employee_id} {year}-{month:02d}: {amount}")
        return record

    async def delete_salary(self, employee_id: UUID, year: int, month: int) -> bool:
        """Delete a salary record. Returns False when there was none."""
        record = await self._find(employee_id, year, month)
        if record is None:
            return False
        await self.db.delete(record)
        await self.db.flush()
        logger.info(f"Deleted salary for employee {employee_id} {year}-{month:02d}")
        return True

    async def _find(self, employee_id: UUID, year: int, month: int) -> EmployeeSalary | None:
        result = await self.db.execute(
            select(EmployeeSalary).where(
                EmployeeSalary.employee_id == employee_id,
                EmployeeSalary.year == year,
                EmployeeSalary.month == month,
            )
        )
        return result.scalar_one_or_none()


def _validate_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
