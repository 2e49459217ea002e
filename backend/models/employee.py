"""
Employee Model

Directory entries the bonus engine needs: identity, bonus role and
whether the employee is active.
"""

from uuid import UUID, uuid4

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class Employee(TimestampMixin, Base):
    """Employee with the role code used for bonus dispatch."""

    __tablename__ = "employees"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    display_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    bonuses_role: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="Bonus role code: s|z|c|lawyer|e|h|ma|col|p",
    )
    department: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_employees_bonuses_role_active", "bonuses_role", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Employee {self.display_name} role={self.bonuses_role}>"
