"""
Municipal budget model.

This module defines the SQLAlchemy model for the ``municipal_budget`` table,
one ledger line per department (or zone) and spending category.
"""

import uuid

from sqlalchemy import Column, String, DateTime, Numeric, Uuid
from sqlalchemy.sql import func

from municipal_budget.models.base import Base


class MunicipalBudget(Base):
    """
    One budget line item for a department.

    Column names follow the published dataset the table was seeded from,
    so ``account_budget_a`` is the category label and ``budget_a`` the
    allocation.
    """

    __tablename__ = "municipal_budget"

    id = Column(Uuid(as_uuid=True), primary_key=True, nullable=False, default=uuid.uuid4)
    account = Column(String(255), nullable=False, index=True)
    glcode = Column(String(64), nullable=False)
    account_budget_a = Column(String(255), nullable=True)
    used_amt = Column(Numeric(15, 2), nullable=True)
    remaining_amt = Column(Numeric(15, 2), nullable=True)
    budget_a = Column(Numeric(15, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        """String representation of the MunicipalBudget model."""
        return (
            f"<MunicipalBudget(id={self.id}, "
            f"account='{self.account}', "
            f"account_budget_a='{self.account_budget_a}', "
            f"used_amt={self.used_amt})>"
        )
