"""
Services package initialization.

This module imports all services to make them available from a single import point.
"""

from municipal_budget.services.budget import BudgetService
from municipal_budget.services.importer import CSVImporter
from municipal_budget.services.insight import InsightRequester

__all__ = ["BudgetService", "CSVImporter", "InsightRequester"]
