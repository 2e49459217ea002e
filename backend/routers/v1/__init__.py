"""API v1 Route modules."""

from backend.routers.v1 import bonuses, pools, salaries

__all__ = ["bonuses", "pools", "salaries"]
