"""
Service layer for budget retrieval.

This module contains the read path: fetch a department's rows from the
budget store, sanitize their numeric fields, keep the valid record set and
derive its summary.
"""

from typing import List, Optional

from municipal_budget.core.exceptions import MissingDepartment
from municipal_budget.core.logging import logger
from municipal_budget.db.store import BudgetStore, RawRow
from municipal_budget.schemas.budget import BudgetRecord, BudgetResponse
from municipal_budget.services.normalizer import coerce_number
from municipal_budget.services.summary import category_shares, summarize

ALL_WARDS = "all"
ZONE_MARKER = "ZONE"


def sanitize_row(raw: RawRow) -> BudgetRecord:
    """
    Coerce the numeric columns of a stored row.

    Non-numeric ``used_amt`` and ``remaining_amt`` become 0. ``budget_a``
    stays None when absent or non-numeric.
    """
    return BudgetRecord(
        id=raw.get("id"),
        account=raw.get("account") or "",
        glcode=raw.get("glcode"),
        category_label=raw.get("account_budget_a"),
        used_amount=coerce_number(raw.get("used_amt")),
        remaining_amount=coerce_number(raw.get("remaining_amt")),
        allocated_amount=coerce_number(raw.get("budget_a"), default=None),
        created_at=raw.get("created_at"),
    )


def is_valid_record(record: BudgetRecord) -> bool:
    return record.used_amount > 0 and bool(record.category_label and record.category_label.strip())


class BudgetService:
    """Service class for budget retrieval."""

    def __init__(self, store: BudgetStore):
        self.store = store

    async def get_valid_records(
        self,
        department: Optional[str],
        ward: Optional[str] = None,
        year: Optional[str] = None,
    ) -> List[BudgetRecord]:
        """
        Get the valid record set of a department.

        Args:
            department: Department (``account``) to fetch
            ward: Ward filter, accepted but not applied
            year: Year filter, accepted but not applied

        Returns:
            Sanitized records with positive spend and a category, in store
            order (``used_amt`` descending)

        Raises:
            MissingDepartment: department is absent or blank
            StoreQueryError: the store query failed
        """
        if not department or not department.strip():
            raise MissingDepartment()

        logger.info(f"Fetching municipal_budget data for department: {department}, ward: {ward}")

        # The table has no ward column
        if ward and ward != ALL_WARDS:
            logger.debug(f"Ward filtering not applied, no ward column. Received: {ward}")
        if year:
            logger.debug(f"Year filtering not applied. Received: {year}")

        rows = await self.store.fetch_by_account(department)
        records = [sanitize_row(row) for row in rows]
        valid = [record for record in records if is_valid_record(record)]

        logger.debug(f"{len(valid)} of {len(rows)} rows valid for department {department}")
        return valid

    async def get_department_budget(
        self,
        department: Optional[str],
        ward: Optional[str] = None,
        year: Optional[str] = None,
    ) -> BudgetResponse:
        """
        Get a department's valid records with their summary and breakdown.

        An unknown department is not an error: it yields an empty record
        set with a zero summary.
        """
        records = await self.get_valid_records(department, ward=ward, year=year)
        return BudgetResponse(
            budget_data=records,
            summary=summarize(records),
            breakdown=category_shares(records),
        )

    async def list_zones(self) -> List[str]:
        """Get the sorted, distinct accounts that name a zone."""
        accounts = await self.store.list_accounts()
        return sorted({account for account in accounts if ZONE_MARKER in account.upper()})
