"""
Bonus Calculator

Pure calculation logic for the two-tier bonus cascade:
1. A group receives its share of the monthly pool
2. A role receives its share of the group allocation
3. An employee receives that role allocation in proportion to the
   revenue they were attributed within the period

No I/O happens here; callers pass already-fetched contracts and pools.
"""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from engines.schemas.bonus_engine import (
    ContractRoleBonus,
    EmployeeBonusResult,
    GroupDefinition,
    MonthlyPool,
    RoleBonusResult,
    RoleDefinition,
    RoleKind,
    SignedContract,
)
from engines.services.currency import parse_amount
from engines.services.role_taxonomy import (
    CLOSER,
    EXPERT,
    HANDLER,
    HANDLERS_GROUP,
    HELPER_CLOSER,
    MANAGER,
    SALES_GROUP,
    SCHEDULER,
    classify_role,
    get_group_for_role,
    get_role_definition_in_group,
    normalize_role_code,
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")

# With no pool configured the employee's revenue is taken as a tenth of an
# imagined pool. Placeholder figures are flagged is_estimated.
FALLBACK_POOL_MULTIPLIER = Decimal("10")

# Role slots inspected per calculation path, in reporting order
SALES_PATH_SLOTS: tuple[str, ...] = (SCHEDULER, MANAGER, HELPER_CLOSER, CLOSER, EXPERT, HANDLER)
HANDLER_PATH_SLOTS: tuple[str, ...] = (HANDLER, EXPERT)

PATH_GROUPS: dict[RoleKind, str] = {
    RoleKind.SALES: SALES_GROUP,
    RoleKind.HANDLER: HANDLERS_GROUP,
}

PATH_SLOTS: dict[RoleKind, tuple[str, ...]] = {
    RoleKind.SALES: SALES_PATH_SLOTS,
    RoleKind.HANDLER: HANDLER_PATH_SLOTS,
}

# Group used when previewing a single contract; expert is read as a sales slot
CONTRACT_SLOT_GROUPS: dict[str, str] = {
    SCHEDULER: SALES_GROUP,
    MANAGER: SALES_GROUP,
    HELPER_CLOSER: SALES_GROUP,
    CLOSER: SALES_GROUP,
    EXPERT: SALES_GROUP,
    HANDLER: HANDLERS_GROUP,
}


# ── Pool helpers ──────────────────────────────────────


def period_for(date_from: date) -> tuple[int, int]:
    """Calendar (year, month) of the range start used for pool lookup."""
    return date_from.year, date_from.month


def compute_pool_percentage(total_bonus_pool_amount: Decimal, total_revenue: Decimal) -> Decimal:
    """Pool as a percentage of revenue; 0 when there is no revenue."""
    if total_revenue <= 0:
        return Decimal("0")
    return total_bonus_pool_amount / total_revenue * HUNDRED


def build_monthly_pool(
    year: int,
    month: int,
    total_bonus_pool_amount: object,
    total_revenue: object,
    pool_id=None,
) -> MonthlyPool:
    """Create a MonthlyPool with its derived pool percentage."""
    amount = parse_amount(total_bonus_pool_amount)
    revenue = parse_amount(total_revenue)
    return MonthlyPool(
        id=pool_id,
        year=year,
        month=month,
        total_bonus_pool_amount=amount,
        total_revenue=revenue,
        pool_percentage=compute_pool_percentage(amount, revenue),
    )


def has_usable_pool(pool: MonthlyPool | None) -> bool:
    """
    A pool is usable only with a positive percentage and positive revenue.

    Pools with zero revenue behave exactly like an unconfigured period.
    """
    return pool is not None and pool.pool_percentage > 0 and pool.total_revenue > 0


def estimate_fallback_pool(base_amount: Decimal) -> Decimal:
    """Imagined pool used for display before a real pool is configured."""
    return base_amount * FALLBACK_POOL_MULTIPLIER


# ── Per-role cascade ──────────────────────────────────


def calculate_final_percentage(
    group: GroupDefinition, role: RoleDefinition, pool: MonthlyPool | None
) -> Decimal:
    """
    Effective percentage reported for a role.

    With a usable pool: group share x in-group share / 100.
    Without one the group tier is skipped and the in-group share is returned.
    """
    if has_usable_pool(pool):
        return group.pool_share_percentage * role.in_group_percentage / HUNDRED
    return role.in_group_percentage


def calculate_role_bonus_amount(
    group: GroupDefinition,
    role: RoleDefinition,
    base_amount: Decimal,
    pool: MonthlyPool | None,
) -> Decimal:
    """
    Bonus for revenue attributed to one role.

    With a usable pool the employee's proportion is their revenue over the
    period's total revenue, not over the role's revenue.
    """
    if has_usable_pool(pool):
        group_allocation = pool.total_bonus_pool_amount * group.pool_share_percentage / HUNDRED
        employee_proportion = base_amount / pool.total_revenue
        return group_allocation * role.in_group_percentage * employee_proportion / HUNDRED

    return base_amount * group.pool_share_percentage * role.in_group_percentage / HUNDRED


def group_contracts_by_slot(
    employee_id: str,
    contracts: Iterable[SignedContract],
    slots: tuple[str, ...],
) -> dict[str, list[SignedContract]]:
    """
    Group an employee's contracts by the role slot they hold on each.

    An employee holding several slots on one contract is counted once per
    slot. A contract appearing twice in the input is counted once.
    """
    employee_key = str(employee_id)
    grouped: dict[str, list[SignedContract]] = {}
    seen: dict[str, set[str]] = {}

    for contract in contracts:
        for slot in slots:
            assignee = contract.role_assignments.get(slot)
            if assignee is None or str(assignee) != employee_key:
                continue
            slot_seen = seen.setdefault(slot, set())
            if contract.id in slot_seen:
                continue
            slot_seen.add(contract.id)
            grouped.setdefault(slot, []).append(contract)

    return {slot: grouped[slot] for slot in slots if slot in grouped}


def calculate_role_bonus(
    role_code: str,
    group_id: str,
    contracts: list[SignedContract],
    pool: MonthlyPool | None,
) -> RoleBonusResult | None:
    """Compute the bonus for one role from the contracts attributed to it."""
    resolved = get_role_definition_in_group(role_code, group_id)
    if resolved is None:
        logger.info(f"No bonus configuration found for role: {role_code}")
        return None
    group, role = resolved

    base_amount = sum((c.base_amount for c in contracts), Decimal("0"))
    estimated = not has_usable_pool(pool)
    return RoleBonusResult(
        role_code=role.role_code,
        group_id=group.group_id,
        final_percentage=calculate_final_percentage(group, role, pool),
        base_amount=base_amount,
        bonus_amount=calculate_role_bonus_amount(group, role, base_amount, pool),
        contract_count=len(contracts),
        is_pool_based=role.is_pool_based,
        is_estimated=estimated,
        estimated_pool_amount=estimate_fallback_pool(base_amount) if estimated else None,
    )


def calculate_pool_role_bonus(
    role_code: str,
    pool_amount: Decimal,
    active_headcount: int,
) -> RoleBonusResult | None:
    """
    Even split of a pool-based group's allocation across its employees.

    per-employee = pool x group share x in-group share / 10000 / headcount
    """
    group = get_group_for_role(role_code)
    if group is None or active_headcount <= 0:
        return None
    role = group.role(normalize_role_code(role_code))

    per_employee = (
        pool_amount * group.pool_share_percentage * role.in_group_percentage
        / (HUNDRED * HUNDRED)
        / active_headcount
    )
    return RoleBonusResult(
        role_code=role.role_code,
        group_id=group.group_id,
        final_percentage=group.pool_share_percentage * role.in_group_percentage / HUNDRED,
        base_amount=pool_amount,
        bonus_amount=per_employee,
        contract_count=0,
        is_pool_based=True,
        is_estimated=False,
    )


# ── Employee bonus ────────────────────────────────────


def calculate_employee_bonus(
    employee_id: str,
    employee_role: str,
    date_from: date,
    contracts: Iterable[SignedContract],
    pool: MonthlyPool | None,
    manual_pool_amount: Decimal | None = None,
    active_headcount: int = 0,
) -> EmployeeBonusResult:
    """
    Compute an employee's bonus for the period starting at date_from.

    Algorithm:
    1. Resolve the calculation path from the employee's role code
    2. Contract paths: group the employee's contracts by matched slot and
       apply the group/role cascade per slot, attributing each slot to the
       path's group
    3. Pool path: split the pool amount evenly across active employees
    4. Unknown roles yield an empty result
    5. Sum role bonuses into the total
    """
    year, month = period_for(date_from)
    kind = classify_role(employee_role)
    role_bonuses: list[RoleBonusResult] = []

    if kind in PATH_SLOTS:
        group_id = PATH_GROUPS[kind]
        by_slot = group_contracts_by_slot(employee_id, contracts, PATH_SLOTS[kind])
        for slot, slot_contracts in by_slot.items():
            role_bonus = calculate_role_bonus(slot, group_id, slot_contracts, pool)
            if role_bonus is not None:
                role_bonuses.append(role_bonus)

    elif kind is RoleKind.POOL:
        if manual_pool_amount is not None:
            pool_amount = parse_amount(manual_pool_amount)
        elif pool is not None:
            pool_amount = pool.total_bonus_pool_amount
        else:
            pool_amount = Decimal("0")
        role_bonus = calculate_pool_role_bonus(employee_role, pool_amount, active_headcount)
        if role_bonus is not None:
            role_bonuses.append(role_bonus)

    else:
        logger.info(f"Role {employee_role} does not match any bonus role category")

    total_bonus = sum((b.bonus_amount for b in role_bonuses), Decimal("0"))
    pool_based_bonus = next(
        (b.bonus_amount for b in role_bonuses if b.is_pool_based), None
    )

    return EmployeeBonusResult(
        employee_id=str(employee_id),
        employee_role=employee_role,
        year=year,
        month=month,
        total_bonus=total_bonus,
        role_bonuses=role_bonuses,
        pool_based_bonus=pool_based_bonus,
        is_estimated=any(b.is_estimated for b in role_bonuses),
    )


def preview_contract_bonuses(
    contract: SignedContract, pool: MonthlyPool | None
) -> list[ContractRoleBonus]:
    """Bonus each assigned employee earns from a single contract."""
    previews: list[ContractRoleBonus] = []

    for slot, group_id in CONTRACT_SLOT_GROUPS.items():
        assignee = contract.role_assignments.get(slot)
        if assignee is None:
            continue
        role_bonus = calculate_role_bonus(slot, group_id, [contract], pool)
        if role_bonus is None:
            continue
        previews.append(
            ContractRoleBonus(
                contract_id=contract.id,
                employee_id=str(assignee),
                role_code=role_bonus.role_code,
                group_id=role_bonus.group_id,
                final_percentage=role_bonus.final_percentage,
                base_amount=role_bonus.base_amount,
                bonus_amount=role_bonus.bonus_amount,
                is_estimated=role_bonus.is_estimated,
            )
        )

    return previews
