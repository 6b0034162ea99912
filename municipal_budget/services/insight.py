"""
AI spending insights.

Builds a fixed prompt from a department's category breakdown and asks the
Gemini ``generateContent`` endpoint for a short narrative. Rate-limited
responses (HTTP 429) are retried with exponential backoff and jitter up to
the configured number of attempts; no other failure is retried.
"""

import asyncio
import json
import random
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence, Tuple, Union

import httpx

from municipal_budget.core.config import GeminiSettings
from municipal_budget.core.exceptions import (
    ConfigurationError,
    InvalidInput,
    NoValidData,
    UpstreamError,
)
from municipal_budget.core.logging import logger
from municipal_budget.schemas.budget import BudgetRecord, CategoryShare
from municipal_budget.services.normalizer import coerce_number
from municipal_budget.services.summary import compute_shares

RATE_LIMITED = 429
UNKNOWN_CATEGORY = "Unknown Category"
FALLBACK_INSIGHT = "Unable to generate insights"

PROMPT_TEMPLATE = """You are an AI analyzing municipal budget data for transparency.

Department: {department}
Budget Data (INR):
{budget_data}

Provide:
- A 3-line summary of the most important spending patterns for this department
- Identify any anomalies, unusually high spending, or potential inefficiencies
- Suggest 2-3 ways to optimize spending, focusing on transparency and efficiency

Respond in clear, concise English. Avoid code blocks or JSON formatting."""

BudgetItem = Union[BudgetRecord, Mapping[str, Any]]


def to_category_amount(item: BudgetItem) -> Tuple[str, float]:
    """
    Resolve the category and spend of a record or a loosely shaped dict.

    Dicts may use either the table column names (``account_budget_a``,
    ``used_amt``) or the short ones (``category``, ``amount``).
    """
    if isinstance(item, BudgetRecord):
        return item.category_label or UNKNOWN_CATEGORY, item.used_amount

    category = item.get("account_budget_a")
    if category is None:
        category = item.get("category")
    amount = item.get("used_amt")
    if amount is None:
        amount = item.get("amount")

    if not isinstance(category, str) or not category.strip():
        category = UNKNOWN_CATEGORY
    return category, coerce_number(amount)


def valid_shares(items: Sequence[BudgetItem]) -> List[CategoryShare]:
    """Percentage-annotated categories with positive spend and a known name."""
    pairs = [to_category_amount(item) for item in items]
    pairs = [
        (category, amount)
        for category, amount in pairs
        if amount > 0 and category != UNKNOWN_CATEGORY
    ]
    return compute_shares(pairs)


def build_prompt(department: str, shares: Sequence[CategoryShare]) -> str:
    # Department is collapsed onto one line so it cannot add instructions
    department = " ".join(department.split())
    budget_data = json.dumps([share.model_dump() for share in shares], indent=2)
    return PROMPT_TEMPLATE.format(department=department, budget_data=budget_data)


def extract_text(data: Any) -> str:
    """Text of the first candidate, or the fallback message."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return FALLBACK_INSIGHT
    if not isinstance(text, str) or not text:
        return FALLBACK_INSIGHT
    return text


class InsightRequester:
    """Client for narrative insights from the text-generation service."""

    def __init__(
        self,
        config: GeminiSettings,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        jitter: Callable[[], float] = random.random,
    ):
        self.config = config
        self.client = client
        self._sleep = sleep
        self._jitter = jitter

    def build_payload(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": self.config.generation_config,
        }

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after the 0-based *attempt* was rate limited."""
        return self.config.retry.backoff_base ** attempt + self._jitter()

    async def post_with_retry(self, client: httpx.AsyncClient, payload: dict) -> httpx.Response:
        """
        POST *payload*, retrying rate-limited responses.

        Returns:
            The first non-429 response, or the last 429 response once every
            attempt was rate limited
        """
        max_attempts = self.config.retry.max_attempts
        attempt = 0
        while True:
            response = await client.post(
                self.config.endpoint,
                params={"key": self.config.api_key_str},
                json=payload,
            )
            if response.status_code != RATE_LIMITED or attempt + 1 >= max_attempts:
                return response

            delay = self.backoff_delay(attempt)
            logger.warning(
                f"Generation service rate limited (attempt {attempt + 1}/{max_attempts}), "
                f"retrying in {delay:.2f}s"
            )
            await self._sleep(delay)
            attempt += 1

    async def _request(self, payload: dict) -> httpx.Response:
        if self.client is not None:
            return await self.post_with_retry(self.client, payload)
        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            return await self.post_with_retry(client, payload)

    async def generate(self, department: Optional[str], budget_data: Optional[Sequence[BudgetItem]]) -> str:
        """
        Generate a spending narrative for a department.

        Args:
            department: Department name
            budget_data: Valid records, or loosely shaped dicts from a client

        Returns:
            The generated narrative, or a fallback message when the response
            carries no candidate text

        Raises:
            InvalidInput: department or budget data missing
            NoValidData: no item has positive spend and a category
            ConfigurationError: no API key configured
            UpstreamError: the service answered with a non-success status
        """
        if budget_data is None or not department or not department.strip():
            raise InvalidInput("Budget data and department are required")

        shares = valid_shares(budget_data)
        if not shares:
            raise NoValidData()

        if not self.config.api_key_str:
            raise ConfigurationError("Gemini API key not configured")

        prompt = build_prompt(department, shares)
        logger.info(f"Requesting AI insights for {department} ({len(shares)} categories)")

        try:
            response = await self._request(self.build_payload(prompt))
        except httpx.HTTPError as e:
            logger.error(f"Generation service request failed: {e}")
            raise UpstreamError(None, str(e)) from e

        if not response.is_success:
            logger.error(f"Generation service error {response.status_code}: {response.text}")
            raise UpstreamError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            logger.warning("Generation service returned a non-JSON body")
            return FALLBACK_INSIGHT
        return extract_text(data)
