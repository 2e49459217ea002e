"""
Bonus Calculator Unit Tests

Tests for the group/role cascade, proportional attribution, the no-pool
placeholder and pool-based splits.
"""

from datetime import date
from decimal import Decimal

import pytest

from engines.services.bonus_calculator import (
    FALLBACK_POOL_MULTIPLIER,
    build_monthly_pool,
    calculate_employee_bonus,
    calculate_pool_role_bonus,
    compute_pool_percentage,
    group_contracts_by_slot,
    has_usable_pool,
    period_for,
    preview_contract_bonuses,
)
from engines.services.role_taxonomy import BONUS_GROUPS
from tests.factories import make_contract, make_pool

MARCH = date(2025, 3, 1)


class TestPoolHelpers:
    """Test pool percentage derivation and usability."""

    def test_pool_percentage(self):
        assert compute_pool_percentage(Decimal("100000"), Decimal("1000000")) == Decimal("10")

    def test_pool_percentage_zero_revenue(self):
        assert compute_pool_percentage(Decimal("100000"), Decimal("0")) == Decimal("0")

    def test_build_monthly_pool_parses_strings(self):
        pool = build_monthly_pool(2025, 3, "1,000", "20,000")
        assert pool.total_bonus_pool_amount == Decimal("1000")
        assert pool.total_revenue == Decimal("20000")
        assert pool.pool_percentage == Decimal("5")

    def test_usable_pool(self):
        assert has_usable_pool(make_pool()) is True

    def test_missing_pool_not_usable(self):
        assert has_usable_pool(None) is False

    def test_zero_revenue_pool_not_usable(self):
        assert has_usable_pool(make_pool(total_revenue="0")) is False

    def test_zero_amount_pool_not_usable(self):
        assert has_usable_pool(make_pool(total_bonus_pool_amount="0")) is False

    def test_period_uses_start_month(self):
        """Multi-month ranges use the month of date_from."""
        assert period_for(date(2025, 1, 31)) == (2025, 1)


class TestSlotGrouping:
    """Test contract-to-slot matching."""

    def test_employee_in_two_slots_counted_per_slot(self):
        contract = make_contract(s="emp-1", c="emp-1")
        grouped = group_contracts_by_slot("emp-1", [contract], ("s", "z", "c"))
        assert list(grouped) == ["s", "c"]
        assert grouped["s"] == [contract]
        assert grouped["c"] == [contract]

    def test_duplicate_contract_counted_once(self):
        contract = make_contract(contract_id="lead-1", c="emp-1")
        grouped = group_contracts_by_slot("emp-1", [contract, contract], ("c",))
        assert len(grouped["c"]) == 1

    def test_other_employees_ignored(self):
        grouped = group_contracts_by_slot("emp-1", [make_contract(c="emp-2")], ("c",))
        assert grouped == {}


class TestScenarios:
    """End-to-end scenarios for the employee calculation."""

    def test_closer_with_pool(self):
        """Closer with one 50,000 contract against a 100,000 / 1,000,000 pool."""
        contract = make_contract("50000", c="emp-e")
        result = calculate_employee_bonus("emp-e", "c", MARCH, [contract], make_pool())

        assert len(result.role_bonuses) == 1
        bonus = result.role_bonuses[0]
        assert bonus.role_code == "c"
        assert bonus.group_id == "sales"
        assert bonus.final_percentage == Decimal("16")
        assert bonus.base_amount == Decimal("50000")
        assert bonus.bonus_amount == Decimal("800")
        assert result.total_bonus == Decimal("800")
        assert result.is_estimated is False
        assert bonus.estimated_pool_amount is None

    def test_closer_without_pool(self):
        """Same contract with no pool configured: placeholder flagged as estimated."""
        contract = make_contract("50000", c="emp-e")
        result = calculate_employee_bonus("emp-e", "c", MARCH, [contract], None)

        bonus = result.role_bonuses[0]
        assert bonus.bonus_amount == Decimal("800000")
        assert bonus.final_percentage == Decimal("40")
        assert bonus.is_estimated is True
        assert bonus.estimated_pool_amount == Decimal("50000") * FALLBACK_POOL_MULTIPLIER
        assert result.is_estimated is True

    def test_marketing_manual_pool(self):
        """Manual pool of 5,000 split across two marketing employees."""
        result = calculate_employee_bonus(
            "emp-f", "ma", MARCH, [], None,
            manual_pool_amount=Decimal("5000"),
            active_headcount=2,
        )

        assert result.total_bonus == Decimal("125")
        assert result.pool_based_bonus == Decimal("125")
        assert result.role_bonuses[0].is_pool_based is True
        assert result.is_estimated is False

    def test_unknown_role(self):
        result = calculate_employee_bonus(
            "emp-x", "unknown-role", MARCH, [make_contract(c="emp-x")], make_pool()
        )
        assert result.total_bonus == Decimal("0")
        assert result.role_bonuses == []
        assert result.is_estimated is False


class TestCascadeProperties:
    """Invariants of the group/role cascade."""

    def test_no_double_counting(self):
        """Base amount is the sum of distinct contracts held in the slot."""
        contracts = [
            make_contract("10000", contract_id="a", c="emp-1", s="emp-1"),
            make_contract("20000", contract_id="b", c="emp-1"),
            make_contract("40000", contract_id="c", c="emp-2"),
            make_contract("10000", contract_id="a", c="emp-1", s="emp-1"),
        ]
        result = calculate_employee_bonus("emp-1", "c", MARCH, contracts, make_pool())
        by_role = {b.role_code: b for b in result.role_bonuses}

        assert by_role["c"].base_amount == Decimal("30000")
        assert by_role["c"].contract_count == 2
        assert by_role["s"].base_amount == Decimal("10000")

    @pytest.mark.parametrize("group_id", ["sales", "handlers"])
    def test_final_percentage_is_product_of_shares(self, group_id):
        group = BONUS_GROUPS[group_id]
        employee_role = "c" if group_id == "sales" else "h"
        contracts = [make_contract(**{role.role_code: "emp-1"}) for role in group.roles]
        result = calculate_employee_bonus("emp-1", employee_role, MARCH, contracts, make_pool())

        for bonus in result.role_bonuses:
            if bonus.group_id != group_id:
                continue
            role = group.role(bonus.role_code)
            assert bonus.final_percentage == group.pool_share_percentage * role.in_group_percentage / 100

    def test_proportional_split_conserves_role_allocation(self):
        """Closers sharing the period's revenue receive the whole closer allocation."""
        contracts = [
            make_contract("300000", c="emp-1"),
            make_contract("200000", c="emp-2"),
            make_contract("500000", c="emp-3"),
        ]
        pool = make_pool(total_bonus_pool_amount="100000", total_revenue="1000000")

        total = sum(
            calculate_employee_bonus(emp, "c", MARCH, contracts, pool).total_bonus
            for emp in ("emp-1", "emp-2", "emp-3")
        )
        group_allocation = Decimal("100000") * 40 / 100
        assert total == group_allocation * 40 / 100

    @pytest.mark.parametrize("amount", ["1", "50000", "123456.78"])
    def test_fallback_is_function_of_base(self, amount):
        result = calculate_employee_bonus(
            "emp-1", "lawyer", MARCH, [make_contract(amount, lawyer="emp-1")], None
        )
        assert result.total_bonus == Decimal(amount) * 40 * 25 / 100

    def test_no_contracts(self):
        result = calculate_employee_bonus("emp-1", "s", MARCH, [], make_pool())
        assert result.total_bonus == Decimal("0")
        assert result.role_bonuses == []

    def test_zero_revenue_pool_matches_no_pool(self):
        contract = make_contract("50000", c="emp-1")
        degenerate = calculate_employee_bonus(
            "emp-1", "c", MARCH, [contract], make_pool(total_revenue="0")
        )
        missing = calculate_employee_bonus("emp-1", "c", MARCH, [contract], None)

        assert degenerate.total_bonus == missing.total_bonus
        assert degenerate.total_bonus.is_finite()
        assert degenerate.is_estimated is True


class TestPathAttribution:
    """Group attribution follows the path that matched the slot."""

    def test_expert_on_sales_path_uses_sales_group(self):
        result = calculate_employee_bonus(
            "emp-1", "e", MARCH, [make_contract("50000", e="emp-1")], make_pool()
        )
        bonus = result.role_bonuses[0]
        assert bonus.group_id == "sales"
        assert bonus.final_percentage == Decimal("4")

    def test_expert_on_handler_path_uses_handlers_group(self):
        result = calculate_employee_bonus(
            "emp-1", "h", MARCH, [make_contract("50000", e="emp-1")], make_pool()
        )
        bonus = result.role_bonuses[0]
        assert bonus.group_id == "handlers"
        assert bonus.final_percentage == Decimal("3")

    def test_handler_slot_on_sales_path_uses_handlers_group(self):
        result = calculate_employee_bonus(
            "emp-1", "s", MARCH, [make_contract("50000", h="emp-1")], make_pool()
        )
        bonus = result.role_bonuses[0]
        assert bonus.role_code == "h"
        assert bonus.group_id == "handlers"
        assert bonus.final_percentage == Decimal("21")

    def test_handler_path_ignores_sales_slots(self):
        result = calculate_employee_bonus(
            "emp-1", "h", MARCH, [make_contract("50000", c="emp-1", s="emp-1")], make_pool()
        )
        assert result.role_bonuses == []

    def test_role_bonuses_in_slot_order(self):
        contract = make_contract("50000", h="emp-1", c="emp-1", s="emp-1", z="emp-1")
        result = calculate_employee_bonus("emp-1", "Z", MARCH, [contract], make_pool())
        assert [b.role_code for b in result.role_bonuses] == ["s", "z", "c", "h"]

    def test_currency_converted_before_attribution(self):
        contract = make_contract("1000", currency_id=3, c="emp-1")
        result = calculate_employee_bonus("emp-1", "c", MARCH, [contract], None)
        assert result.role_bonuses[0].base_amount == Decimal("3700")


class TestPoolRoles:
    """Even split for pool-based groups."""

    def test_configured_pool_used_without_manual_amount(self):
        pool = make_pool(total_bonus_pool_amount="100000")
        result = calculate_employee_bonus("emp-1", "p", MARCH, [], pool, active_headcount=4)
        # 100000 * 20 * 100 / 10000 / 4
        assert result.total_bonus == Decimal("5000")

    def test_manual_amount_overrides_pool(self):
        pool = make_pool(total_bonus_pool_amount="100000")
        result = calculate_employee_bonus(
            "emp-1", "col", MARCH, [], pool, manual_pool_amount=Decimal("2000"), active_headcount=1
        )
        assert result.total_bonus == Decimal("100")

    def test_zero_headcount_is_empty(self):
        result = calculate_employee_bonus(
            "emp-1", "ma", MARCH, [], None, manual_pool_amount=Decimal("5000"), active_headcount=0
        )
        assert result.role_bonuses == []
        assert result.pool_based_bonus is None

    def test_no_pool_and_no_manual_amount(self):
        result = calculate_employee_bonus("emp-1", "ma", MARCH, [], None, active_headcount=3)
        assert result.total_bonus == Decimal("0")

    def test_pool_role_bonus_fields(self):
        bonus = calculate_pool_role_bonus("marketing", Decimal("5000"), 2)
        assert bonus.role_code == "ma"
        assert bonus.group_id == "marketing"
        assert bonus.final_percentage == Decimal("5")
        assert bonus.base_amount == Decimal("5000")
        assert bonus.contract_count == 0

    def test_pool_role_bonus_unknown_role(self):
        assert calculate_pool_role_bonus("nobody", Decimal("5000"), 2) is None


class TestContractPreview:
    """Per-contract bonus preview."""

    def test_preview_lists_assigned_slots(self):
        contract = make_contract("50000", s="emp-s", c="emp-c", e="emp-e", h="emp-h")
        previews = preview_contract_bonuses(contract, make_pool())
        by_slot = {p.role_code: p for p in previews}

        assert set(by_slot) == {"s", "c", "e", "h"}
        assert by_slot["c"].employee_id == "emp-c"
        assert by_slot["c"].bonus_amount == Decimal("800")
        assert by_slot["e"].group_id == "sales"
        assert by_slot["h"].group_id == "handlers"
        assert all(p.contract_id == contract.id for p in previews)

    def test_preview_without_pool_is_estimated(self):
        previews = preview_contract_bonuses(make_contract("1000", z="emp-z"), None)
        assert len(previews) == 1
        assert previews[0].is_estimated is True
        assert previews[0].bonus_amount == Decimal("1000") * 40 * 20 / 100

    def test_preview_empty_contract(self):
        assert preview_contract_bonuses(make_contract("1000"), make_pool()) == []
