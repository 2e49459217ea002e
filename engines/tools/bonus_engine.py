"""
Bonus Engine MCP Tool

Two-tier bonus calculation exposed as MCP tools.
"""

from decimal import Decimal

from fastmcp import FastMCP

from engines.services.bonus_calculator import (
    build_monthly_pool,
    calculate_pool_role_bonus,
    calculate_role_bonus_amount,
    calculate_final_percentage,
    has_usable_pool,
)
from engines.services.currency import format_currency, parse_amount
from engines.services.role_taxonomy import (
    BONUS_GROUPS,
    get_role_definition_in_group,
)

# Initialize MCP server (will be started from server.py)
mcp = FastMCP("Bonus Pool Engine")


@mcp.tool()
async def calculate_role_bonus(
    role_code: str,
    group_id: str,
    base_amount: float,
    total_bonus_pool: float = 0.0,
    total_revenue: float = 0.0,
    year: int = 2025,
    month: int = 1,
) -> dict:
    """
    Calculate the bonus earned on revenue attributed to one role.

    The role's group receives its share of the monthly pool, the role
    receives its share of the group allocation, and the employee receives
    that allocation in proportion to base_amount / total_revenue.

    With no pool (or zero revenue) a placeholder figure is returned:
    base_amount x group share x role share / 100, flagged is_estimated.

    Args:
        role_code: Role slot code (s, z, lawyer, c, e, h)
        group_id: Group of the path that matched the role (sales or handlers)
        base_amount: Revenue attributed to the employee in base currency
        total_bonus_pool: Monthly bonus pool amount (0 when not configured)
        total_revenue: Total signed revenue of the month
        year: Pool year
        month: Pool month (1-12)

    Returns:
        Dictionary with final percentage, bonus amount and estimate flag

    Example:
        Closer with 50,000 of a 1,000,000 month and a 100,000 pool:
        - Sales allocation: 100,000 x 40% = 40,000
        - Proportion: 50,000 / 1,000,000 = 5%
        - Bonus: 40,000 x 40% x 5% = 800
    """
    resolved = get_role_definition_in_group(role_code, group_id)
    if resolved is None:
        return {"role_code": role_code, "error": f"Unknown role code {role_code}"}
    group, role = resolved

    if not 1 <= month <= 12:
        return {"role_code": role_code, "error": f"Month must be between 1 and 12, got {month}"}
    if not 1900 <= year <= 9999:
        return {"role_code": role_code, "error": f"Year out of range: {year}"}
    if total_bonus_pool < 0 or total_revenue < 0:
        return {"role_code": role_code, "error": "Pool amount and revenue cannot be negative"}

    pool = None
    if total_bonus_pool > 0:
        pool = build_monthly_pool(year, month, Decimal(str(total_bonus_pool)), Decimal(str(total_revenue)))

    base = parse_amount(Decimal(str(base_amount)))
    bonus = calculate_role_bonus_amount(group, role, base, pool)

    return {
        "role_code": role.role_code,
        "group_id": group.group_id,
        "final_percentage": float(calculate_final_percentage(group, role, pool)),
        "base_amount": float(base),
        "bonus_amount": float(bonus),
        "display_amount": format_currency(bonus),
        "is_estimated": not has_usable_pool(pool),
    }


@mcp.tool()
async def calculate_pool_role_share(
    role_code: str,
    pool_amount: float,
    active_headcount: int,
) -> dict:
    """
    Calculate the per-employee share for a pool-based role.

    Marketing, collection and partners split their group's allocation
    evenly across the active employees holding the role.

    Args:
        role_code: Pool-based role code (ma, col, p)
        pool_amount: Monthly pool amount to split
        active_headcount: Number of active employees with the role

    Returns:
        Dictionary with the per-employee bonus
    """
    if pool_amount < 0:
        return {"role_code": role_code, "error": "Pool amount cannot be negative"}

    result = calculate_pool_role_bonus(role_code, Decimal(str(pool_amount)), active_headcount)
    if result is None:
        return {"role_code": role_code, "bonus_amount": 0.0, "active_headcount": active_headcount}

    return {
        "role_code": result.role_code,
        "group_id": result.group_id,
        "final_percentage": float(result.final_percentage),
        "bonus_amount": float(result.bonus_amount),
        "display_amount": format_currency(result.bonus_amount),
        "active_headcount": active_headcount,
    }


@mcp.tool()
async def describe_bonus_groups() -> dict:
    """
    Describe the configured bonus groups and roles.

    Returns:
        Mapping of group id to its pool share and role percentages
    """
    return {
        group_id: {
            "pool_share_percentage": float(group.pool_share_percentage),
            "roles": {
                r.role_code: {
                    "display_name": r.display_name,
                    "in_group_percentage": float(r.in_group_percentage),
                    "is_pool_based": r.is_pool_based,
                }
                for r in group.roles
            },
        }
        for group_id, group in BONUS_GROUPS.items()
    }
