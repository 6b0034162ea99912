"""
Budget store access.

Services talk to the ``municipal_budget`` table only through the narrow
``BudgetStore`` contract below: read every row of one account ordered by
spend, bulk-insert rows, and list the distinct accounts. Rows cross the
boundary as plain dicts keyed by column name, so the service layer
sanitizes exactly what the table holds.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from sqlalchemy import distinct, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from municipal_budget.core.exceptions import StoreQueryError, StoreWriteError
from municipal_budget.core.logging import logger
from municipal_budget.models.budget import MunicipalBudget

RawRow = Dict[str, Any]


class BudgetStore(ABC):
    """Read/write contract of the budget record store.

    Implementations raise ``StoreQueryError`` when a read fails and
    ``StoreWriteError`` when a write is rejected.
    """

    @abstractmethod
    async def fetch_by_account(self, account: str) -> List[RawRow]:
        """Return every row whose ``account`` equals *account*, ``used_amt`` descending."""

    @abstractmethod
    async def bulk_insert(self, rows: List[RawRow]) -> int:
        """Insert all *rows* in one write and return how many were written."""

    @abstractmethod
    async def list_accounts(self) -> List[str]:
        """Return the distinct, non-null ``account`` values."""


class SQLAlchemyBudgetStore(BudgetStore):
    """``BudgetStore`` backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_by_account(self, account: str) -> List[RawRow]:
        logger.debug(f"Querying municipal_budget for account: {account}")
        table = MunicipalBudget.__table__
        query = (
            select(table)
            .where(table.c.account == account)
            .order_by(table.c.used_amt.desc(), table.c.id)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Budget store query error: {e}")
            raise StoreQueryError(details=str(e)) from e
        return [dict(row) for row in result.mappings().all()]

    async def bulk_insert(self, rows: List[RawRow]) -> int:
        logger.debug(f"Bulk inserting {len(rows)} rows into municipal_budget")
        try:
            await self.db.execute(insert(MunicipalBudget), rows)
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Budget store insert error: {e}")
            await self.db.rollback()
            raise StoreWriteError(details=str(e)) from e
        return len(rows)

    async def list_accounts(self) -> List[str]:
        query = select(distinct(MunicipalBudget.account)).where(
            MunicipalBudget.account.isnot(None)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Budget store account listing error: {e}")
            raise StoreQueryError(details=str(e)) from e
        return list(result.scalars().all())
