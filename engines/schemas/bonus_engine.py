"""
Bonus Engine Schemas

Input/output models for the two-tier bonus calculation.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from engines.services.currency import to_base_currency


class RoleKind(str, Enum):
    """Calculation path a role code is dispatched to."""

    SALES = "sales"
    HANDLER = "handler"
    POOL = "pool"
    UNKNOWN = "unknown"


class RoleDefinition(BaseModel):
    """A role inside a bonus group and its share of the group allocation."""

    model_config = ConfigDict(frozen=True)

    role_code: str
    group_id: str
    in_group_percentage: Decimal = Field(..., ge=0, le=100)
    is_pool_based: bool = False
    display_name: str


class GroupDefinition(BaseModel):
    """A bonus group and its share of the monthly pool."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    pool_share_percentage: Decimal = Field(..., ge=0, le=100)
    roles: tuple[RoleDefinition, ...] = ()

    def role(self, role_code: str) -> RoleDefinition | None:
        for definition in self.roles:
            if definition.role_code == role_code:
                return definition
        return None


class SignedContract(BaseModel):
    """
    A lead that reached the "agreement signed" pipeline stage.

    role_assignments maps a role slot code (s, z, lawyer, c, e, h) to the
    employee attributed to it, or None when the slot is empty.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    total_amount: Decimal = Decimal("0")
    currency_id: int | str | None = None
    signed_date: date
    role_assignments: dict[str, str | None] = Field(default_factory=dict)

    @computed_field
    @property
    def base_amount(self) -> Decimal:
        """Contract total in base currency."""
        return to_base_currency(self.total_amount, self.currency_id)


class MonthlyPool(BaseModel):
    """Administrator-configured bonus budget for one calendar month."""

    id: UUID | None = None
    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=1, le=12)
    total_bonus_pool_amount: Decimal = Field(..., ge=0)
    total_revenue: Decimal = Field(default=Decimal("0"), ge=0)
    pool_percentage: Decimal = Decimal("0")


class RoleBonusResult(BaseModel):
    """Bonus earned through one role during the queried period."""

    role_code: str
    group_id: str
    final_percentage: Decimal
    base_amount: Decimal
    bonus_amount: Decimal
    contract_count: int = 0
    is_pool_based: bool = False
    is_estimated: bool = Field(
        default=False,
        description="True when no usable monthly pool existed and a placeholder figure was computed",
    )
    estimated_pool_amount: Decimal | None = Field(
        default=None,
        description="Imagined pool behind a placeholder figure (10x the attributed revenue)",
    )


class EmployeeBonusResult(BaseModel):
    """Total bonus for one employee with the per-role breakdown."""

    employee_id: str
    employee_role: str
    year: int
    month: int
    total_bonus: Decimal = Decimal("0")
    role_bonuses: list[RoleBonusResult] = Field(default_factory=list)
    pool_based_bonus: Decimal | None = None
    is_estimated: bool = False


class ContractRoleBonus(BaseModel):
    """Bonus preview for one assigned slot on a single contract."""

    contract_id: str
    employee_id: str
    role_code: str
    group_id: str
    final_percentage: Decimal
    base_amount: Decimal
    bonus_amount: Decimal
    is_estimated: bool = False
