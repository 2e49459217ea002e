"""Initial schema: employees, leads, bonus pools and salaries

Revision ID: a001
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "a001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === employees ===
    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("bonuses_role", sa.String(20), nullable=True, comment="Bonus role code: s|z|c|lawyer|e|h|ma|col|p"),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_employees_bonuses_role_active", "employees", ["bonuses_role", "is_active"])

    # === leads ===
    op.create_table(
        "leads",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("total", sa.Numeric(14, 2), nullable=True, comment="Contract total in the lead's currency"),
        sa.Column("currency_id", sa.Integer(), nullable=True, comment="1=NIS, 2=EUR, 3=USD, 4=GBP"),
        sa.Column("meeting_scheduler_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        sa.Column("meeting_manager_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        sa.Column("meeting_lawyer_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, comment="Helper closer"),
        sa.Column("closer_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        sa.Column("expert_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        sa.Column("case_handler_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )

    # === lead_stages ===
    op.create_table(
        "lead_stages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("lead_id", sa.Uuid(), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("stage", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lead_stages_stage_date", "lead_stages", ["stage", "date"])
    op.create_index("ix_lead_stages_lead_id", "lead_stages", ["lead_id"])

    # === monthly_bonus_pools ===
    op.create_table(
        "monthly_bonus_pools",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("total_bonus_pool", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("total_revenue", sa.Numeric(16, 2), nullable=False, server_default="0"),
        sa.Column("pool_percentage", sa.Numeric(12, 6), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(100), nullable=True),
        sa.Column("updated_by", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("year", "month", name="uq_monthly_bonus_pools_year_month"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="valid_pool_month"),
        sa.CheckConstraint("total_bonus_pool >= 0", name="non_negative_pool"),
    )

    # === employee_salaries ===
    op.create_table(
        "employee_salaries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("salary_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.String(100), nullable=True),
        sa.Column("updated_by", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "year", "month", name="uq_employee_salaries_period"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="valid_salary_month"),
    )
    op.create_index("ix_employee_salaries_period", "employee_salaries", ["year", "month"])


def downgrade() -> None:
    op.drop_table("employee_salaries")
    op.drop_table("monthly_bonus_pools")
    op.drop_table("lead_stages")
    op.drop_table("leads")
    op.drop_table("employees")
