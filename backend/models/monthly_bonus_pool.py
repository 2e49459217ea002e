"""
Monthly Bonus Pool Model

Administrator-configured bonus budget per calendar month, paired with
that month's signed revenue.
"""

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import AuditMixin, Base, TimestampMixin


class MonthlyBonusPool(TimestampMixin, AuditMixin, Base):
    """
    Bonus pool for one (year, month).

    pool_percentage is derived on write from total_bonus_pool / total_revenue
    and is 0 when the month has no revenue.
    """

    __tablename__ = "monthly_bonus_pools"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    year: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    month: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    total_bonus_pool: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
    )
    total_revenue: Mapped[Decimal] = mapped_column(
        Numeric(16, 2),
        nullable=False,
        default=Decimal("0"),
    )
    pool_percentage: Mapped[Decimal] = mapped_column(
        Numeric(12, 6),
        nullable=False,
        default=Decimal("0"),
    )

    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_monthly_bonus_pools_year_month"),
        CheckConstraint("month BETWEEN 1 AND 12", name="valid_pool_month"),
        CheckConstraint("total_bonus_pool >= 0", name="non_negative_pool"),
    )

    def __repr__(self) -> str:
        return f"<MonthlyBonusPool {self.year}-{self.month:02d} pool={self.total_bonus_pool}>"
