"""
Bonus Service

Orchestrates bonus calculations: fetches the monthly pool, signed
contracts and head-counts through the accessors, then hands the data to
the pure calculator in engines.services.bonus_calculator.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from backend.config import get_settings
from backend.services.accessors import EmployeeDirectory, LeadAccessor, PoolAccessor
from backend.services.cache import MISS, MonthlyPoolCache
from engines.schemas.bonus_engine import (
    ContractRoleBonus,
    EmployeeBonusResult,
    MonthlyPool,
    RoleKind,
    SignedContract,
)
from engines.services.bonus_calculator import (
    PATH_SLOTS,
    calculate_employee_bonus,
    period_for,
    preview_contract_bonuses,
)
from engines.services.role_taxonomy import classify_role, normalize_role_code

logger = logging.getLogger(__name__)


class BonusService:
    """
    Computes employee bonuses for a date range.

    The pool for the calendar month of date_from applies to the whole
    range. Only contract-path roles trigger a contract fetch and only
    pool-based roles trigger a head-count lookup.
    """

    def __init__(
        self,
        leads: LeadAccessor,
        pools: PoolAccessor,
        directory: EmployeeDirectory,
        pool_cache: MonthlyPoolCache | None = None,
        max_concurrency: int | None = None,
    ):
        self.leads = leads
        self.pools = pools
        self.directory = directory
        self.pool_cache = pool_cache
        self.max_concurrency = max_concurrency or get_settings().bonus_batch_concurrency

    async def compute_employee_bonus(
        self,
        employee_id: str,
        employee_role: str,
        date_from: date,
        date_to: date,
        manual_pool_amount: Decimal | None = None,
    ) -> EmployeeBonusResult:
        """
        Compute one employee's bonus.

        Raises:
            ValueError: date_from is after date_to
            AccessorFailure: storage was unavailable
        """
        _check_range(date_from, date_to)
        year, month = period_for(date_from)
        pool = await self.pools.fetch_pool(year, month)
        kind = classify_role(employee_role)

        contracts: list[SignedContract] = []
        headcount = 0
        if kind in PATH_SLOTS:
            contracts = await self.leads.fetch_signed_contracts(date_from, date_to)
        elif kind is RoleKind.POOL:
            headcount = await self.directory.count_active_with_role(employee_role)

        result = calculate_employee_bonus(
            employee_id,
            employee_role,
            date_from,
            contracts,
            pool,
            manual_pool_amount=manual_pool_amount,
            active_headcount=headcount,
        )
        logger.info(
            f"Bonus for employee {employee_id} ({employee_role}) "
            f"{year}-{month:02d}: {result.total_bonus}"
            f"{' (estimated)' if result.is_estimated else ''}"
        )
        return result

    async def compute_bonuses(
        self,
        employees: Sequence[tuple[str, str]],
        date_from: date,
        date_to: date,
        manual_pool_amount: Decimal | None = None,
    ) -> list[EmployeeBonusResult]:
        """
        Compute bonuses for many (employee_id, role_code) pairs.

        Pool, contracts and head-counts are fetched once for the batch.
        Per-employee computations run concurrently, bounded by
        max_concurrency. Results follow the order of `employees`.
        """
        _check_range(date_from, date_to)
        if not employees:
            return []

        year, month = period_for(date_from)
        pool = await self.pools.fetch_pool(year, month)

        kinds = [classify_role(role) for _, role in employees]
        contracts: list[SignedContract] = []
        if any(kind in PATH_SLOTS for kind in kinds):
            contracts = await self.leads.fetch_signed_contracts(date_from, date_to)

        # Accessors share one session, so lookups stay sequential
        headcounts: dict[str, int] = {}
        for (_, role), kind in zip(employees, kinds):
            code = normalize_role_code(role)
            if kind is RoleKind.POOL and code not in headcounts:
                headcounts[code] = await self.directory.count_active_with_role(code)

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def compute(employee_id: str, role: str) -> EmployeeBonusResult:
            async with semaphore:
                return await asyncio.to_thread(
                    calculate_employee_bonus,
                    employee_id,
                    role,
                    date_from,
                    contracts,
                    pool,
                    manual_pool_amount,
                    headcounts.get(normalize_role_code(role), 0),
                )

        results = await asyncio.gather(
            *(compute(employee_id, role) for employee_id, role in employees)
        )
        logger.info(
            f"Computed {len(results)} bonuses for {year}-{month:02d} "
            f"from {len(contracts)} contracts"
        )
        return list(results)

    async def preview_contract(self, contract_id: str) -> list[ContractRoleBonus] | None:
        """
        Bonus each assigned employee earns from one signed contract.

        Uses the pool of the contract's signing month. Returns None when
        the contract does not exist or was never signed.
        """
        contract = await self.leads.fetch_contract(contract_id)
        if contract is None:
            return None
        year, month = period_for(contract.signed_date)
        pool = await self.load_pool(year, month)
        return preview_contract_bonuses(contract, pool)

    async def load_pool(self, year: int, month: int) -> MonthlyPool | None:
        """Monthly pool through the cache when one is configured."""
        if self.pool_cache is None:
            return await self.pools.fetch_pool(year, month)

        cached = await self.pool_cache.get(year, month)
        if cached is not MISS:
            return cached

        pool = await self.pools.fetch_pool(year, month)
        await self.pool_cache.set(year, month, pool)
        return pool


def _check_range(date_from: date, date_to: date) -> None:
    if date_from > date_to:
        raise ValueError(f"date_from {date_from} is after date_to {date_to}")
