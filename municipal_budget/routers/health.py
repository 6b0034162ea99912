"""
Health check endpoints.
"""

from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from municipal_budget.core.config import settings
from municipal_budget.core.logging import logger
from municipal_budget.db.session import get_db
from municipal_budget.models.budget import MunicipalBudget

router = APIRouter()


@router.get("/", response_model=Dict[str, str])
async def health_check() -> Dict[str, str]:
    """Liveness probe, also reporting whether insights can be generated."""
    return {
        "status": "ok",
        "insights": "configured" if settings.gemini.api_key else "missing_api_key",
    }


@router.get("/db", response_model=Dict[str, str])
async def database_health_check(
    db: AsyncSession = Depends(get_db)
) -> Dict[str, str]:
    """
    Check the budget table is reachable.

    Returns:
        Database status and the number of stored budget rows
    """
    try:
        count = await db.scalar(select(func.count()).select_from(MunicipalBudget))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "error", "database": "unavailable"}
    return {"status": "ok", "database": "connected", "budget_rows": str(count)}
