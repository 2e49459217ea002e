"""
SQL Accessor Unit Tests

Runs the SQLAlchemy accessors against an in-memory SQLite database and
checks timeout and driver-error translation.
"""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from backend.services.accessors import (
    AccessorFailure,
    SqlEmployeeDirectory,
    SqlLeadAccessor,
    SqlPoolAccessor,
    role_code_variants,
)
from engines.services.bonus_calculator import build_monthly_pool
from tests.factories import SIGNED_STAGE, make_employee, make_lead, make_pool_row


class _SlowSession:
    """Session whose queries never finish in time."""

    async def execute(self, *args, **kwargs):
        await asyncio.sleep(1)

    async def get(self, *args, **kwargs):
        await asyncio.sleep(1)


class _BrokenSession:
    """Session whose queries fail in the driver."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection reset"))


# ---------------------------------------------------------------------------
# Leads
# ---------------------------------------------------------------------------


class TestSqlLeadAccessor:
    """Tests for SqlLeadAccessor."""

    @pytest.mark.asyncio
    async def test_signed_contracts_in_range(self, db_session):
        closer = make_employee(bonuses_role="c")
        db_session.add(closer)
        inside = make_lead(signed_on=date(2025, 3, 31), closer_id=closer.id, total=Decimal("1000"), currency_id=3)
        before = make_lead(signed_on=date(2025, 2, 28))
        unsigned = make_lead(signed_on=date(2025, 3, 10), stage=10)
        db_session.add_all([inside, before, unsigned])
        await db_session.flush()

        contracts = await SqlLeadAccessor(db_session, signed_stage_code=SIGNED_STAGE).fetch_signed_contracts(
            date(2025, 3, 1), date(2025, 3, 31)
        )

        assert [c.id for c in contracts] == [str(inside.id)]
        contract = contracts[0]
        assert contract.signed_date == date(2025, 3, 31)
        assert contract.role_assignments["c"] == str(closer.id)
        assert contract.role_assignments["s"] is None
        assert contract.base_amount == Decimal("3700")

    @pytest.mark.asyncio
    async def test_contract_signed_twice_returned_once(self, db_session):
        from backend.models.lead import LeadStage

        lead = make_lead(signed_on=date(2025, 3, 20))
        lead.stages.append(LeadStage(id=uuid4(), stage=SIGNED_STAGE, stage_date=date(2025, 3, 5)))
        db_session.add(lead)
        await db_session.flush()

        contracts = await SqlLeadAccessor(db_session, signed_stage_code=SIGNED_STAGE).fetch_signed_contracts(
            date(2025, 3, 1), date(2025, 3, 31)
        )

        assert len(contracts) == 1
        assert contracts[0].signed_date == date(2025, 3, 5)

    @pytest.mark.asyncio
    async def test_empty_total_parses_to_zero(self, db_session):
        db_session.add(make_lead(signed_on=date(2025, 3, 2), total=None))
        await db_session.flush()

        contracts = await SqlLeadAccessor(db_session, signed_stage_code=SIGNED_STAGE).fetch_signed_contracts(
            date(2025, 3, 1), date(2025, 3, 31)
        )

        assert contracts[0].total_amount == Decimal("0")
        assert contracts[0].base_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_fetch_contract(self, db_session):
        signed = make_lead(signed_on=date(2025, 3, 2))
        unsigned = make_lead(signed_on=date(2025, 3, 2), stage=10)
        db_session.add_all([signed, unsigned])
        await db_session.flush()
        accessor = SqlLeadAccessor(db_session, signed_stage_code=SIGNED_STAGE)

        contract = await accessor.fetch_contract(str(signed.id))

        assert contract.id == str(signed.id)
        assert await accessor.fetch_contract(str(unsigned.id)) is None
        assert await accessor.fetch_contract(str(uuid4())) is None
        assert await accessor.fetch_contract("not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_timeout_raises_accessor_failure(self):
        accessor = SqlLeadAccessor(_SlowSession(), signed_stage_code=SIGNED_STAGE, timeout=0.01)

        with pytest.raises(AccessorFailure) as exc_info:
            await accessor.fetch_signed_contracts(date(2025, 3, 1), date(2025, 3, 31))
        assert exc_info.value.operation == "fetch_signed_contracts"

    @pytest.mark.asyncio
    async def test_driver_error_raises_accessor_failure(self):
        accessor = SqlLeadAccessor(_BrokenSession(), signed_stage_code=SIGNED_STAGE)

        with pytest.raises(AccessorFailure):
            await accessor.fetch_signed_contracts(date(2025, 3, 1), date(2025, 3, 31))


# ---------------------------------------------------------------------------
# Pools
# ---------------------------------------------------------------------------


class TestSqlPoolAccessor:
    """Tests for SqlPoolAccessor."""

    @pytest.mark.asyncio
    async def test_fetch_pool(self, db_session):
        db_session.add(make_pool_row())
        await db_session.flush()

        pool = await SqlPoolAccessor(db_session).fetch_pool(2025, 3)

        assert pool.total_bonus_pool_amount == Decimal("100000")
        assert pool.pool_percentage == Decimal("10")
        assert await SqlPoolAccessor(db_session).fetch_pool(2025, 4) is None

    @pytest.mark.asyncio
    async def test_persist_inserts_then_updates(self, db_session):
        accessor = SqlPoolAccessor(db_session)

        created = await accessor.persist_pool(build_monthly_pool(2025, 3, "1000", "20000"), "dana")
        updated = await accessor.persist_pool(build_monthly_pool(2025, 3, "3000", "20000"), "noa")

        assert created.id == updated.id
        assert updated.total_bonus_pool_amount == Decimal("3000")
        assert updated.pool_percentage == Decimal("15")
        assert len(await accessor.list_pools()) == 1

    @pytest.mark.asyncio
    async def test_persist_commits(self, db_session):
        accessor = SqlPoolAccessor(db_session)

        await accessor.persist_pool(build_monthly_pool(2025, 3, "1000", "20000"), "dana")
        await db_session.rollback()

        assert (await accessor.fetch_pool(2025, 3)).total_bonus_pool_amount == Decimal("1000")

    @pytest.mark.asyncio
    async def test_concurrent_insert_applied_as_update(self, db_session, monkeypatch):
        """A period inserted between our read and our insert is updated instead."""
        db_session.add(make_pool_row(total_bonus_pool=Decimal("1000"), total_revenue=Decimal("20000")))
        await db_session.commit()
        accessor = SqlPoolAccessor(db_session)
        read_row = accessor._row
        reads = []

        async def stale_first_read(year, month):
            reads.append((year, month))
            if len(reads) == 1:
                return None
            return await read_row(year, month)

        monkeypatch.setattr(accessor, "_row", stale_first_read)

        pool = await accessor.persist_pool(build_monthly_pool(2025, 3, "3000", "20000"), "noa")

        assert len(reads) == 2
        assert pool.total_bonus_pool_amount == Decimal("3000")
        assert pool.pool_percentage == Decimal("15")
        assert len(await accessor.list_pools()) == 1

    @pytest.mark.asyncio
    async def test_delete_pool(self, db_session):
        row = make_pool_row()
        db_session.add(row)
        await db_session.flush()
        accessor = SqlPoolAccessor(db_session)

        deleted = await accessor.delete_pool(row.id)

        assert (deleted.year, deleted.month) == (2025, 3)
        assert await accessor.fetch_pool(2025, 3) is None
        assert await accessor.delete_pool(row.id) is None

    @pytest.mark.asyncio
    async def test_list_pools_newest_first(self, db_session):
        db_session.add_all([
            make_pool_row(year=2024, month=11),
            make_pool_row(year=2025, month=1),
            make_pool_row(year=2024, month=12),
        ])
        await db_session.flush()
        accessor = SqlPoolAccessor(db_session)

        pools = await accessor.list_pools()
        assert [(p.year, p.month) for p in pools] == [(2025, 1), (2024, 12), (2024, 11)]
        assert len(await accessor.list_pools(2024)) == 2

    @pytest.mark.asyncio
    async def test_timeout(self):
        with pytest.raises(AccessorFailure):
            await SqlPoolAccessor(_SlowSession(), timeout=0.01).fetch_pool(2025, 3)


# ---------------------------------------------------------------------------
# Employee directory
# ---------------------------------------------------------------------------


class TestSqlEmployeeDirectory:
    """Tests for SqlEmployeeDirectory."""

    def test_role_code_variants(self):
        assert role_code_variants("Z") == ["Z", "manager", "z"]

    @pytest.mark.asyncio
    async def test_counts_active_employees_with_role(self, db_session):
        db_session.add_all([
            make_employee(bonuses_role="ma"),
            make_employee(bonuses_role="marketing"),
            make_employee(bonuses_role="ma", is_active=False),
            make_employee(bonuses_role="col"),
        ])
        await db_session.flush()
        directory = SqlEmployeeDirectory(db_session)

        assert await directory.count_active_with_role("ma") == 2
        assert await directory.count_active_with_role("p") == 0

    @pytest.mark.asyncio
    async def test_driver_error(self):
        with pytest.raises(AccessorFailure):
            await SqlEmployeeDirectory(_BrokenSession()).count_active_with_role("ma")
