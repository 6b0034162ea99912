"""
Dependencies for FastAPI endpoints.

This module wires the budget store and the external service clients into
the routers. Tests override these to swap in fakes.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from municipal_budget.core.config import settings
from municipal_budget.db.session import get_db
from municipal_budget.db.store import BudgetStore, SQLAlchemyBudgetStore
from municipal_budget.services.budget import BudgetService
from municipal_budget.services.importer import CSVImporter
from municipal_budget.services.insight import InsightRequester


def get_budget_store(db: AsyncSession = Depends(get_db)) -> BudgetStore:
    """Budget store bound to the request's database session."""
    return SQLAlchemyBudgetStore(db)


def get_budget_service(store: BudgetStore = Depends(get_budget_store)) -> BudgetService:
    return BudgetService(store)


def get_csv_importer(store: BudgetStore = Depends(get_budget_store)) -> CSVImporter:
    return CSVImporter(store)


def get_insight_requester() -> InsightRequester:
    """Insight requester configured from the Gemini settings."""
    return InsightRequester(settings.gemini)


async def get_request_client(request: Request):
    """Extract client information from request."""
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent")
    }
