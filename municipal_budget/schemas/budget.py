"""
Pydantic schemas for municipal budgets.

This module defines the validated record shape shared by the import,
retrieval and insight paths, plus the request and response bodies of the
budget endpoints.
"""

from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BudgetRecord(BaseModel):
    """A sanitized budget line item as returned to API callers."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: Optional[Union[UUID, int, str]] = None
    account: str
    glcode: Optional[str] = None
    category_label: Optional[str] = Field(default=None, alias="account_budget_a")
    used_amount: float = Field(default=0.0, alias="used_amt")
    remaining_amount: float = Field(default=0.0, alias="remaining_amt")
    allocated_amount: Optional[float] = Field(default=None, alias="budget_a")
    created_at: Optional[datetime] = None


class NormalizedRow(BaseModel):
    """A CSV row that passed normalization, ready for a bulk insert."""

    account: str
    glcode: str
    account_budget_a: str
    used_amt: float
    remaining_amt: float = 0.0


class LargestCategory(BaseModel):
    category: str
    amount: float


class BudgetSummary(BaseModel):
    """Derived totals for one retrieval. Never persisted."""

    model_config = ConfigDict(populate_by_name=True)

    total_used: float = Field(default=0.0, alias="totalBudget")
    largest_category: Optional[LargestCategory] = Field(default=None, alias="largestCategory")
    year_over_year_change: float = Field(default=0.0, alias="yearOverYearChange")


class CategoryShare(BaseModel):
    """One category's spend and its share of the total, e.g. ``"42.5"``."""

    category: str
    amount: float
    percentage: str


class BudgetQuery(BaseModel):
    """Retrieval request body."""

    department: Optional[str] = None
    ward: Optional[str] = None
    year: Optional[str] = None


class BudgetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    budget_data: List[BudgetRecord] = Field(default_factory=list, alias="budgetData")
    summary: BudgetSummary
    breakdown: List[CategoryShare] = Field(default_factory=list)


class ImportResult(BaseModel):
    imported: int
    message: str


class InsightRequest(BaseModel):
    """Insight request body. Items are loose dicts, validated by the service."""

    model_config = ConfigDict(populate_by_name=True)

    budget_data: Optional[List[Dict[str, Any]]] = Field(default=None, alias="budgetData")
    department: Optional[str] = None


class InsightResponse(BaseModel):
    insights: str


class ZoneList(BaseModel):
    zones: List[str]
