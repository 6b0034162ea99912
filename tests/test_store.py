"""
Tests for the SQLAlchemy budget store against an in-memory database.
"""

import pytest
from sqlalchemy import text

from municipal_budget.core.exceptions import StoreQueryError, StoreWriteError
from municipal_budget.models.budget import MunicipalBudget
from municipal_budget.services.budget import BudgetService
from municipal_budget.services.importer import CSVImporter

CSV_CONTENT = "\n".join([
    "Ward,Year,Category,Amount",
    "ZONE 1,2024,Roads,200",
    'ZONE 1,2024,Lighting,"$1,500"',
    "ZONE 1,2024,Parks,700",
    "ZONE 2,2024,Drains,50",
    "ZONE 2,2024,Drains,bad",
])


@pytest.mark.asyncio
async def test_bulk_insert_assigns_ids(sql_store, db_session):
    """Test inserted rows get an id and a creation time from the store."""
    written = await sql_store.bulk_insert([
        {"account": "ZONE 1", "glcode": "2024", "account_budget_a": "Roads", "used_amt": 200.0, "remaining_amt": 0.0},
    ])

    assert written == 1
    budget = (await db_session.execute(MunicipalBudget.__table__.select())).mappings().one()
    assert budget["id"] is not None
    assert budget["created_at"] is not None


@pytest.mark.asyncio
async def test_fetch_by_account_orders_by_spend(sql_store):
    """Test rows of one account come back with the largest spend first."""
    await CSVImporter(sql_store).import_csv(CSV_CONTENT)

    rows = await sql_store.fetch_by_account("ZONE 1")

    assert [row["account_budget_a"] for row in rows] == ["Lighting", "Parks", "Roads"]
    assert [float(row["used_amt"]) for row in rows] == [1500.0, 700.0, 200.0]
    assert set(rows[0]) == {
        "id", "account", "glcode", "account_budget_a",
        "used_amt", "remaining_amt", "budget_a", "created_at",
    }


@pytest.mark.asyncio
async def test_import_then_retrieve(sql_store):
    """Test the write path feeds the read path end to end."""
    result = await CSVImporter(sql_store).import_csv(CSV_CONTENT)
    budget = await BudgetService(sql_store).get_department_budget("ZONE 1")

    assert result.imported == 4
    assert budget.summary.total_used == 2400.0
    assert budget.summary.largest_category.category == "Lighting"
    assert [share.percentage for share in budget.breakdown] == ["62.5", "29.2", "8.3"]
    assert all(record.remaining_amount == 0 for record in budget.budget_data)
    assert all(record.allocated_amount is None for record in budget.budget_data)


@pytest.mark.asyncio
async def test_list_accounts(sql_store):
    await CSVImporter(sql_store).import_csv(CSV_CONTENT)

    assert sorted(await sql_store.list_accounts()) == ["ZONE 1", "ZONE 2"]


@pytest.mark.asyncio
async def test_query_error(sql_store, db_session):
    """Test a failing query raises StoreQueryError."""
    await db_session.execute(text("DROP TABLE municipal_budget"))

    with pytest.raises(StoreQueryError):
        await sql_store.fetch_by_account("ZONE 1")


@pytest.mark.asyncio
async def test_write_error(sql_store):
    """Test a rejected insert raises StoreWriteError with the database's reason."""
    with pytest.raises(StoreWriteError) as exc_info:
        await sql_store.bulk_insert([
            {"account": None, "glcode": "2024", "account_budget_a": "Roads", "used_amt": 1.0, "remaining_amt": 0.0},
        ])

    assert "NOT NULL" in exc_info.value.details


@pytest.mark.asyncio
async def test_fetch_by_account_breaks_spend_ties_by_id(sql_store):
    """Test rows with equal spend come back in id order on every read."""
    await sql_store.bulk_insert([
        {"account": "ZONE 3", "glcode": "2024", "account_budget_a": category, "used_amt": 100.0, "remaining_amt": 0.0}
        for category in ["Roads", "Parks", "Drains", "Lighting", "Water"]
    ])

    rows = await sql_store.fetch_by_account("ZONE 3")
    ids = [row["id"] for row in rows]

    assert ids == sorted(ids, key=lambda budget_id: budget_id.hex)
    assert [row["id"] for row in await sql_store.fetch_by_account("ZONE 3")] == ids
