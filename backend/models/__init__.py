"""SQLAlchemy ORM Models for the bonus pool service."""

from backend.models.base import AuditMixin, Base, TimestampMixin
from backend.models.employee import Employee
from backend.models.employee_salary import EmployeeSalary
from backend.models.lead import Lead, LeadStage
from backend.models.monthly_bonus_pool import MonthlyBonusPool

__all__ = [
    "Base",
    "TimestampMixin",
    "AuditMixin",
    "Employee",
    "EmployeeSalary",
    "Lead",
    "LeadStage",
    "MonthlyBonusPool",
]
