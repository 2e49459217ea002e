"""
Data Accessors

Read/write adapters between the bonus engine and storage:
- LeadAccessor: signed contracts from the lead pipeline
- PoolAccessor: monthly bonus pools
- EmployeeDirectory: active head-count per role code

Every storage call is bounded by settings.accessor_timeout_seconds. Timeouts
and driver errors surface as AccessorFailure, never as an empty result.
Pool writes are committed before the call returns.
"""

import asyncio
import logging
from collections.abc import Awaitable
from datetime import date
from decimal import Decimal
from typing import Protocol, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import get_settings
from backend.models.employee import Employee
from backend.models.lead import Lead, LeadStage
from backend.models.monthly_bonus_pool import MonthlyBonusPool
from engines.schemas.bonus_engine import MonthlyPool, SignedContract
from engines.services.bonus_calculator import compute_pool_percentage
from engines.services.currency import parse_amount
from engines.services.role_taxonomy import (
    CLOSER,
    EXPERT,
    HANDLER,
    HELPER_CLOSER,
    MANAGER,
    ROLE_ALIASES,
    SCHEDULER,
    normalize_role_code,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AccessorFailure(Exception):
    """Storage was unreachable, timed out or returned an error."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class LeadAccessor(Protocol):
    async def fetch_signed_contracts(self, date_from: date, date_to: date) -> list[SignedContract]:
        ...

    async def fetch_contract(self, contract_id: str) -> SignedContract | None:
        ...


class PoolAccessor(Protocol):
    async def fetch_pool(self, year: int, month: int) -> MonthlyPool | None:
        ...

    async def persist_pool(self, pool: MonthlyPool, updated_by: str | None = None) -> MonthlyPool:
        ...

    async def delete_pool(self, pool_id: UUID) -> MonthlyPool | None:
        ...

    async def list_pools(self, year: int | None = None) -> list[MonthlyPool]:
        ...


class EmployeeDirectory(Protocol):
    async def count_active_with_role(self, role_code: str) -> int:
        ...


# Lead column holding the employee attributed to each role slot
LEAD_ROLE_COLUMNS: dict[str, str] = {
    SCHEDULER: "meeting_scheduler_id",
    MANAGER: "meeting_manager_id",
    HELPER_CLOSER: "meeting_lawyer_id",
    CLOSER: "closer_id",
    EXPERT: "expert_id",
    HANDLER: "case_handler_id",
}


def lead_to_contract(lead: Lead, signed_date: date) -> SignedContract:
    """Build the engine's read-only contract view of a lead."""
    assignments: dict[str, str | None] = {}
    for slot, column in LEAD_ROLE_COLUMNS.items():
        employee_id = getattr(lead, column)
        assignments[slot] = str(employee_id) if employee_id is not None else None

    return SignedContract(
        id=str(lead.id),
        total_amount=parse_amount(lead.total),
        currency_id=lead.currency_id,
        signed_date=signed_date,
        role_assignments=assignments,
    )


def pool_from_row(row: MonthlyBonusPool) -> MonthlyPool:
    return MonthlyPool(
        id=row.id,
        year=row.year,
        month=row.month,
        total_bonus_pool_amount=parse_amount(row.total_bonus_pool),
        total_revenue=parse_amount(row.total_revenue),
        pool_percentage=parse_amount(row.pool_percentage),
    )


def role_code_variants(role_code: str) -> list[str]:
    """Canonical code plus every alias stored values may use for it."""
    code = normalize_role_code(role_code)
    variants = {code}
    variants.update(alias for alias, target in ROLE_ALIASES.items() if target == code)
    return sorted(variants)


class _TimeoutGuard:
    """Shared timeout and error translation for SQL-backed accessors."""

    def __init__(self, db_session: AsyncSession, timeout: float | None = None):
        self.db = db_session
        self.timeout = timeout if timeout is not None else get_settings().accessor_timeout_seconds

    async def _guarded(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"{operation} timed out after {self.timeout}s")
            raise AccessorFailure(operation, f"timed out after {self.timeout}s") from e
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed: {e}")
            raise AccessorFailure(operation, str(e)) from e


class SqlLeadAccessor(_TimeoutGuard):
    """Signed contracts read from the leads and lead_stages tables."""

    def __init__(self, db_session: AsyncSession, signed_stage_code: int | None = None, timeout: float | None = None):
        super().__init__(db_session, timeout)
        self.signed_stage_code = (
            signed_stage_code if signed_stage_code is not None else get_settings().signed_stage_code
        )

    async def fetch_signed_contracts(self, date_from: date, date_to: date) -> list[SignedContract]:
        """
        Contracts with a signed stage record dated within [date_from, date_to].

        A lead signed more than once in the range is returned once, dated by
        its earliest signed stage in the range.
        """
        return await self._guarded("fetch_signed_contracts", self._signed_contracts(date_from, date_to))

    async def _signed_contracts(self, date_from: date, date_to: date) -> list[SignedContract]:
        signed_on = func.min(LeadStage.stage_date).label("signed_on")
        result = await self.db.execute(
            select(Lead, signed_on)
            .join(LeadStage, LeadStage.lead_id == Lead.id)
            .where(
                LeadStage.stage == self.signed_stage_code,
                LeadStage.stage_date >= date_from,
                LeadStage.stage_date <= date_to,
            )
            .group_by(Lead.id)
            .order_by(signed_on, Lead.id)
        )
        contracts = [lead_to_contract(lead, signed) for lead, signed in result.all()]
        logger.info(f"Fetched {len(contracts)} signed contracts for {date_from}..{date_to}")
        return contracts

    async def fetch_contract(self, contract_id: str) -> SignedContract | None:
        """A single signed contract, or None when the lead is missing or unsigned."""
        try:
            lead_id = UUID(str(contract_id))
        except ValueError:
            return None
        return await self._guarded("fetch_contract", self._contract(lead_id))

    async def _contract(self, lead_id: UUID) -> SignedContract | None:
        lead = await self.db.get(Lead, lead_id)
        if lead is None:
            return None
        result = await self.db.execute(
            select(func.min(LeadStage.stage_date)).where(
                LeadStage.lead_id == lead_id,
                LeadStage.stage == self.signed_stage_code,
            )
        )
        signed = result.scalar_one_or_none()
        if signed is None:
            return None
        return lead_to_contract(lead, signed)


class SqlPoolAccessor(_TimeoutGuard):
    """Monthly bonus pools stored in monthly_bonus_pools."""

    async def fetch_pool(self, year: int, month: int) -> MonthlyPool | None:
        return await self._guarded("fetch_pool", self._fetch(year, month))

    async def _row(self, year: int, month: int) -> MonthlyBonusPool | None:
        result = await self.db.execute(
            select(MonthlyBonusPool).where(
                MonthlyBonusPool.year == year,
                MonthlyBonusPool.month == month,
            )
        )
        return result.scalar_one_or_none()

    async def _fetch(self, year: int, month: int) -> MonthlyPool | None:
        row = await self._row(year, month)
        return pool_from_row(row) if row is not None else None

    async def persist_pool(self, pool: MonthlyPool, updated_by: str | None = None) -> MonthlyPool:
        """Insert or update the pool for (year, month); derives pool_percentage."""
        return await self._guarded("persist_pool", self._persist(pool, updated_by))

    async def _persist(self, pool: MonthlyPool, updated_by: str | None) -> MonthlyPool:
        percentage = compute_pool_percentage(pool.total_bonus_pool_amount, pool.total_revenue)
        try:
            row = await self._write(pool, percentage, updated_by)
        except IntegrityError:
            # Another writer inserted the period first; apply ours as an update
            logger.warning(f"Bonus pool {pool.year}-{pool.month:02d} inserted concurrently, retrying as update")
            await self.db.rollback()
            row = await self._write(pool, percentage, updated_by)
        logger.info(f"Persisted bonus pool {pool.year}-{pool.month:02d}: {pool.total_bonus_pool_amount}")
        return pool_from_row(row)

    async def _write(self, pool: MonthlyPool, percentage: Decimal, updated_by: str | None) -> MonthlyBonusPool:
        row = await self._row(pool.year, pool.month)
        if row is None:
            row = MonthlyBonusPool(year=pool.year, month=pool.month, created_by=updated_by)
            self.db.add(row)
        row.total_bonus_pool = pool.total_bonus_pool_amount
        row.total_revenue = pool.total_revenue
        row.pool_percentage = percentage
        row.updated_by = updated_by
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def delete_pool(self, pool_id: UUID) -> MonthlyPool | None:
        """Delete a pool by id, returning what was deleted (None when absent)."""
        return await self._guarded("delete_pool", self._delete(pool_id))

    async def _delete(self, pool_id: UUID) -> MonthlyPool | None:
        row = await self.db.get(MonthlyBonusPool, pool_id)
        if row is None:
            return None
        deleted = pool_from_row(row)
        await self.db.delete(row)
        await self.db.commit()
        logger.info(f"Deleted bonus pool {deleted.year}-{deleted.month:02d}")
        return deleted

    async def list_pools(self, year: int | None = None) -> list[MonthlyPool]:
        """Historical pools, newest period first."""
        return await self._guarded("list_pools", self._list(year))

    async def _list(self, year: int | None) -> list[MonthlyPool]:
        query = select(MonthlyBonusPool)
        if year is not None:
            query = query.where(MonthlyBonusPool.year == year)
        query = query.order_by(MonthlyBonusPool.year.desc(), MonthlyBonusPool.month.desc())
        result = await self.db.execute(query)
        return [pool_from_row(row) for row in result.scalars().all()]


class SqlEmployeeDirectory(_TimeoutGuard):
    """Active head-count per bonus role from the employees table."""

    async def count_active_with_role(self, role_code: str) -> int:
        return await self._guarded("count_active_with_role", self._count(role_code))

    async def _count(self, role_code: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Employee).where(
                Employee.is_active.is_(True),
                Employee.bonuses_role.in_(role_code_variants(role_code)),
            )
        )
        return result.scalar() or 0
