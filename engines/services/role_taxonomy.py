"""
Role Taxonomy

Static bonus-group configuration: each group's share of the monthly pool
and each role's share of its group allocation.

Group shares and in-group percentages are validated once at import time.
"""

import logging
from decimal import Decimal

from engines.schemas.bonus_engine import GroupDefinition, RoleDefinition, RoleKind

logger = logging.getLogger(__name__)


class TaxonomyConfigError(ValueError):
    """Raised when the bonus group configuration is inconsistent."""


# Canonical role codes
SCHEDULER = "s"
MANAGER = "z"
CLOSER = "c"
HELPER_CLOSER = "lawyer"
EXPERT = "e"
HANDLER = "h"
MARKETING = "ma"
COLLECTION = "col"
PARTNERS = "p"

SALES_GROUP = "sales"
HANDLERS_GROUP = "handlers"
MARKETING_GROUP = "marketing"
COLLECTION_GROUP = "collection"
PARTNERS_GROUP = "partners"


def _role(code: str, group_id: str, percentage: str, name: str, pool_based: bool = False) -> RoleDefinition:
    return RoleDefinition(
        role_code=code,
        group_id=group_id,
        in_group_percentage=Decimal(percentage),
        is_pool_based=pool_based,
        display_name=name,
    )


BONUS_GROUPS: dict[str, GroupDefinition] = {
    SALES_GROUP: GroupDefinition(
        group_id=SALES_GROUP,
        pool_share_percentage=Decimal("40"),
        roles=(
            _role(SCHEDULER, SALES_GROUP, "30", "Scheduler"),
            _role(MANAGER, SALES_GROUP, "20", "Manager"),
            _role(CLOSER, SALES_GROUP, "40", "Closer"),
            _role(HELPER_CLOSER, SALES_GROUP, "25", "Helper Closer"),
            _role(EXPERT, SALES_GROUP, "10", "Expert"),
        ),
    ),
    HANDLERS_GROUP: GroupDefinition(
        group_id=HANDLERS_GROUP,
        pool_share_percentage=Decimal("30"),
        roles=(
            _role(HANDLER, HANDLERS_GROUP, "70", "Handler"),
            _role(EXPERT, HANDLERS_GROUP, "10", "Expert"),
        ),
    ),
    MARKETING_GROUP: GroupDefinition(
        group_id=MARKETING_GROUP,
        pool_share_percentage=Decimal("5"),
        roles=(_role(MARKETING, MARKETING_GROUP, "100", "Marketing", pool_based=True),),
    ),
    COLLECTION_GROUP: GroupDefinition(
        group_id=COLLECTION_GROUP,
        pool_share_percentage=Decimal("5"),
        roles=(_role(COLLECTION, COLLECTION_GROUP, "100", "Collection", pool_based=True),),
    ),
    PARTNERS_GROUP: GroupDefinition(
        group_id=PARTNERS_GROUP,
        pool_share_percentage=Decimal("20"),
        roles=(_role(PARTNERS, PARTNERS_GROUP, "100", "Partner", pool_based=True),),
    ),
}

# Lookup order for codes that belong to more than one group (expert)
GROUP_LOOKUP_ORDER: tuple[str, ...] = (
    SALES_GROUP,
    HANDLERS_GROUP,
    MARKETING_GROUP,
    COLLECTION_GROUP,
    PARTNERS_GROUP,
)

ROLE_ALIASES: dict[str, str] = {
    "Z": MANAGER,
    "scheduler": SCHEDULER,
    "manager": MANAGER,
    "closer": CLOSER,
    "helper-closer": HELPER_CLOSER,
    "helper_closer": HELPER_CLOSER,
    "expert": EXPERT,
    "handler": HANDLER,
    "marketing": MARKETING,
    "collection": COLLECTION,
    "partners": PARTNERS,
    "partner": PARTNERS,
}

ROLE_KINDS: dict[str, RoleKind] = {
    SCHEDULER: RoleKind.SALES,
    MANAGER: RoleKind.SALES,
    CLOSER: RoleKind.SALES,
    HELPER_CLOSER: RoleKind.SALES,
    EXPERT: RoleKind.SALES,
    HANDLER: RoleKind.HANDLER,
    MARKETING: RoleKind.POOL,
    COLLECTION: RoleKind.POOL,
    PARTNERS: RoleKind.POOL,
}


def normalize_role_code(role_code: str | None) -> str:
    """Map aliases (Z, long role names) to the canonical role code."""
    if not role_code:
        return ""
    code = role_code.strip()
    return ROLE_ALIASES.get(code, code)


def classify_role(role_code: str | None) -> RoleKind:
    """Resolve the calculation path for an employee's role code."""
    return ROLE_KINDS.get(normalize_role_code(role_code), RoleKind.UNKNOWN)


def get_group_for_role(role_code: str | None) -> GroupDefinition | None:
    """
    Get the bonus group a role belongs to.

    Codes present in several groups resolve to the first group in
    GROUP_LOOKUP_ORDER. Calculation paths use get_role_definition_in_group
    instead, so this ordering only affects standalone lookups.
    """
    code = normalize_role_code(role_code)
    for group_id in GROUP_LOOKUP_ORDER:
        group = BONUS_GROUPS[group_id]
        if group.role(code) is not None:
            return group
    return None


def get_role_definition(role_code: str | None) -> RoleDefinition | None:
    """Get a role's definition using the standalone group lookup."""
    group = get_group_for_role(role_code)
    if group is None:
        return None
    return group.role(normalize_role_code(role_code))


def get_role_definition_in_group(
    role_code: str | None, group_id: str
) -> tuple[GroupDefinition, RoleDefinition] | None:
    """
    Resolve a role inside the group of the path that matched it.

    When the role is not a member of that group (a handler slot matched
    on the sales path), the role's own group is used.
    """
    code = normalize_role_code(role_code)
    group = BONUS_GROUPS.get(group_id)
    if group is not None:
        definition = group.role(code)
        if definition is not None:
            return group, definition

    group = get_group_for_role(code)
    if group is None:
        return None
    return group, group.role(code)


def get_role_display_name(role_code: str | None) -> str:
    definition = get_role_definition(role_code)
    if definition is None:
        return role_code or ""
    return definition.display_name


def validate_taxonomy(groups: dict[str, GroupDefinition]) -> None:
    """
    Check the group configuration invariants.

    Raises TaxonomyConfigError when pool shares exceed 100%, a role code
    repeats inside a group, or a role is filed under the wrong group.
    """
    total_share = sum((g.pool_share_percentage for g in groups.values()), Decimal("0"))
    if total_share > 100:
        raise TaxonomyConfigError(
            f"Group pool shares sum to {total_share}%, exceeding 100%"
        )
    if total_share < 100:
        logger.warning(f"Group pool shares sum to {total_share}%; {100 - total_share}% of each pool is unallocated")

    for group_id, group in groups.items():
        if group.group_id != group_id:
            raise TaxonomyConfigError(f"Group key {group_id} does not match {group.group_id}")
        codes = [r.role_code for r in group.roles]
        if len(codes) != len(set(codes)):
            raise TaxonomyConfigError(f"Duplicate role code in group {group_id}: {codes}")
        for definition in group.roles:
            if definition.group_id != group_id:
                raise TaxonomyConfigError(
                    f"Role {definition.role_code} declares group {definition.group_id} "
                    f"but is listed under {group_id}"
                )


validate_taxonomy(BONUS_GROUPS)
