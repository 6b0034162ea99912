"""
Budget API endpoints.
This module provides the department budget retrieval and zone listing endpoints.
"""
from fastapi import APIRouter, Depends

from municipal_budget.core.deps import get_budget_service
from municipal_budget.core.logging import logger
from municipal_budget.schemas.budget import BudgetQuery, BudgetResponse, ZoneList
from municipal_budget.services.budget import BudgetService

router = APIRouter()


@router.post("", response_model=BudgetResponse)
async def get_department_budget(
    query: BudgetQuery,
    service: BudgetService = Depends(get_budget_service),
) -> BudgetResponse:
    """
    Get the valid budget records of a department with their summary.

    Args:
        query: Department, and optional ward and year
        service: Budget service

    Returns:
        Records ordered by spend, summary and per-category breakdown
    """
    result = await service.get_department_budget(
        query.department,
        ward=query.ward,
        year=query.year,
    )
    logger.info(
        f"Returning {len(result.budget_data)} budget records for {query.department}"
    )
    return result


@router.get("/zones", response_model=ZoneList)
async def get_zones(
    service: BudgetService = Depends(get_budget_service),
) -> ZoneList:
    """
    List the zone accounts present in the budget store.

    Returns:
        Sorted distinct zone names
    """
    zones = await service.list_zones()
    logger.debug(f"Found {len(zones)} zones")
    return ZoneList(zones=zones)
