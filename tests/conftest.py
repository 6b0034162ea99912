"""
Configuration for pytest.

This module provides fixtures and configuration for running tests.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DB_CREATE_TABLES", "false")

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from municipal_budget.core.config import GeminiSettings
from municipal_budget.core.deps import get_budget_store, get_insight_requester
from municipal_budget.core.exceptions import StoreQueryError, StoreWriteError
from municipal_budget.db.store import BudgetStore, SQLAlchemyBudgetStore
from municipal_budget.main import app
from municipal_budget.models.base import Base
from municipal_budget.services.insight import InsightRequester

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_API_KEY = "test-gemini-key"


class FakeBudgetStore(BudgetStore):
    """
    In-memory budget store.

    Rows are returned in the order they were given, so tests hand them over
    already ordered by ``used_amt`` descending, as the real store returns them.
    """

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        fail_query: bool = False,
        fail_write: bool = False,
    ):
        self.rows = list(rows or [])
        self.fail_query = fail_query
        self.fail_write = fail_write
        self.queries: List[str] = []
        self.writes: List[List[Dict[str, Any]]] = []

    async def fetch_by_account(self, account: str) -> List[Dict[str, Any]]:
        self.queries.append(account)
        if self.fail_query:
            raise StoreQueryError(details="connection refused")
        return [dict(row) for row in self.rows if row.get("account") == account]

    async def bulk_insert(self, rows: List[Dict[str, Any]]) -> int:
        if self.fail_write:
            raise StoreWriteError(details='null value in column "account" violates not-null constraint')
        self.writes.append(rows)
        self.rows.extend(rows)
        return len(rows)

    async def list_accounts(self) -> List[str]:
        if self.fail_query:
            raise StoreQueryError(details="connection refused")
        return [row["account"] for row in self.rows if row.get("account") is not None]


def budget_row(category: str, used: Any, account: str = "FIRE DEPARTMENT (D)", **extra) -> Dict[str, Any]:
    """Stored row in table column names."""
    row = {
        "id": f"{account}-{category}",
        "account": account,
        "glcode": "2024",
        "account_budget_a": category,
        "used_amt": used,
        "remaining_amt": 0,
        "budget_a": None,
        "created_at": None,
    }
    row.update(extra)
    return row


def gemini_reply(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class RecordingTransport:
    """Mock transport that answers from a handler and records every request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


class FakeSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_requester(handler, api_key: Optional[str] = TEST_API_KEY, **settings):
    """Insight requester wired to a mock transport, a fake sleep and fixed jitter."""
    transport = RecordingTransport(handler)
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
    sleep = FakeSleep()
    requester = InsightRequester(
        GeminiSettings(api_key=api_key, **settings),
        client=client,
        sleep=sleep,
        jitter=lambda: 0.5,
    )
    return requester, transport, sleep


@pytest.fixture
def fake_store():
    """Fake store seeded with one department, ordered by spend."""
    return FakeBudgetStore([
        budget_row("Salaries", 500),
        budget_row("Equipment", 300),
        budget_row("Training", 200),
        budget_row("Uniforms", 0),
        budget_row("", 150),
        budget_row("Roads", 900, account="ZONE 2"),
        budget_row("Parks", 100, account="zone 1"),
    ])


@pytest.fixture
async def db_session():
    """Session on a fresh in-memory SQLite database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def sql_store(db_session):
    return SQLAlchemyBudgetStore(db_session)


@pytest.fixture
def gemini():
    """Mock Gemini service answering with a fixed narrative."""
    requester, transport, sleep = make_requester(
        lambda request: httpx.Response(200, json=gemini_reply("Salaries dominate spending."))
    )
    return requester, transport


@pytest.fixture
def client(fake_store, gemini):
    """Create a test client backed by the fake store and mock Gemini service."""
    requester, _ = gemini
    app.dependency_overrides[get_budget_store] = lambda: fake_store
    app.dependency_overrides[get_insight_requester] = lambda: requester

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
