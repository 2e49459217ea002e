"""
Employee Salary Model

Monthly salary history, one record per employee per month.
"""

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import AuditMixin, Base, TimestampMixin


class EmployeeSalary(TimestampMixin, AuditMixin, Base):
    """Salary paid to an employee for a calendar month."""

    __tablename__ = "employee_salaries"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    month: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    salary_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    currency_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Defaults to base currency when empty",
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "year", "month", name="uq_employee_salaries_period"),
        CheckConstraint("month BETWEEN 1 AND 12", name="valid_salary_month"),
        Index("ix_employee_salaries_period", "year", "month"),
    )

    def __repr__(self) -> str:
        return f"<EmployeeSalary {self.employee_id} {self.year}-{self.month:02d}>"
