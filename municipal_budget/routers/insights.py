"""
AI insight endpoint.
"""
from fastapi import APIRouter, Depends

from municipal_budget.core.deps import get_insight_requester
from municipal_budget.schemas.budget import InsightRequest, InsightResponse
from municipal_budget.services.insight import InsightRequester

router = APIRouter()


@router.post("", response_model=InsightResponse)
async def get_ai_insights(
    body: InsightRequest,
    requester: InsightRequester = Depends(get_insight_requester),
) -> InsightResponse:
    """
    Generate a spending narrative for a department's budget data.

    Args:
        body: Budget items and department name
        requester: Insight requester

    Returns:
        Generated insights text
    """
    insights = await requester.generate(body.department, body.budget_data)
    return InsightResponse(insights=insights)
