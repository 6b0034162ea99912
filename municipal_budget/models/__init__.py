"""
Models package initialization.
"""

from municipal_budget.models.base import Base
from municipal_budget.models.budget import MunicipalBudget

__all__ = ["Base", "MunicipalBudget"]
