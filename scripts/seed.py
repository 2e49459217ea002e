"""
Seed Script

Populates the database with demo data for development and testing.
Creates a small firm with employees in every bonus role, signed leads
across two months, one configured bonus pool and a month of salaries.

Usage:
    python -m scripts.seed
"""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import uuid4

from backend.config import get_settings
from backend.db.session import get_async_session
from backend.models.employee import Employee
from backend.models.employee_salary import EmployeeSalary
from backend.models.lead import Lead, LeadStage
from backend.services.accessors import SqlLeadAccessor, SqlPoolAccessor
from backend.services.pool_admin import PoolAdministrationService

settings = get_settings()


async def seed():
    """Create demo data."""
    async with get_async_session() as db:
        # ── Employees ─────────────────────────────────────
        employees_data = [
            {"display_name": "Noa Levi", "bonuses_role": "s", "department": "Sales"},
            {"display_name": "Avi Cohen", "bonuses_role": "z", "department": "Sales"},
            {"display_name": "Dana Mizrahi", "bonuses_role": "c", "department": "Sales"},
            {"display_name": "Yossi Peretz", "bonuses_role": "lawyer", "department": "Sales"},
            {"display_name": "Tamar Friedman", "bonuses_role": "e", "department": "Legal"},
            {"display_name": "Eitan Shapiro", "bonuses_role": "h", "department": "Case Handling"},
            {"display_name": "Maya Katz", "bonuses_role": "ma", "department": "Marketing"},
            {"display_name": "Omer Biton", "bonuses_role": "ma", "department": "Marketing"},
            {"display_name": "Shira Azulay", "bonuses_role": "col", "department": "Finance"},
            {"display_name": "Ronen Dahan", "bonuses_role": "p", "department": "Management"},
            {"display_name": "Lior Avraham", "bonuses_role": "ma", "department": "Marketing", "is_active": False},
        ]

        employees: dict[str, Employee] = {}
        for data in employees_data:
            emp = Employee(id=uuid4(), **data)
            db.add(emp)
            employees.setdefault(data["bonuses_role"], emp)
        await db.flush()

        # ── Leads ─────────────────────────────────────────
        leads_data = [
            ("Rosen family estate", Decimal("120000"), 1, date(2025, 5, 4)),
            ("Harel Holdings", Decimal("25000"), 3, date(2025, 5, 12)),
            ("Ben-David appeal", Decimal("40000"), 2, date(2025, 5, 20)),
            ("Golan partnership", Decimal("8000"), 4, date(2025, 6, 2)),
            ("Segal restructuring", Decimal("90000"), 1, None),
        ]

        for name, total, currency_id, signed_on in leads_data:
            lead = Lead(
                id=uuid4(),
                name=name,
                total=total,
                currency_id=currency_id,
                meeting_scheduler_id=employees["s"].id,
                meeting_manager_id=employees["z"].id,
                meeting_lawyer_id=employees["lawyer"].id,
                closer_id=employees["c"].id,
                expert_id=employees["e"].id,
                case_handler_id=employees["h"].id,
            )
            db.add(lead)
            db.add(LeadStage(id=uuid4(), lead=lead, stage=10, stage_date=date(2025, 4, 28)))
            if signed_on is not None:
                db.add(LeadStage(id=uuid4(), lead=lead, stage=settings.signed_stage_code, stage_date=signed_on))
        await db.flush()

        # ── Bonus pool (May only; June stays unconfigured) ─
        pool_admin = PoolAdministrationService(
            pools=SqlPoolAccessor(db),
            leads=SqlLeadAccessor(db),
        )
        pool = await pool_admin.upsert_monthly_pool(2025, 5, Decimal("25000"), updated_by="seed")

        # ── Salaries ──────────────────────────────────────
        for emp in employees.values():
            db.add(
                EmployeeSalary(
                    id=uuid4(),
                    employee_id=emp.id,
                    year=2025,
                    month=5,
                    salary_amount=Decimal("14000"),
                    currency_id=1,
                    created_by="seed",
                )
            )
        await db.flush()

        print(f"Employees: {len(employees_data)}")
        print(f"Leads: {len(leads_data)} ({sum(1 for *_, d in leads_data if d)} signed)")
        print(
            f"Bonus pool 2025-05: {pool.total_bonus_pool_amount} on revenue "
            f"{pool.total_revenue} ({pool.pool_percentage:.2f}%)"
        )
        print(f"Salaries: {len(employees)}")


if __name__ == "__main__":
    asyncio.run(seed())
