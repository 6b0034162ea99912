"""
Tests for CSV row normalization and number coercion.
"""

import math
from decimal import Decimal

import pytest

from municipal_budget.services.normalizer import coerce_number, normalize_row, parse_amount

HEADERS = ["Ward", "Year", "Category", "Amount"]


def test_normalize_row_maps_headers():
    """Test that each recognized header lands in its table column."""
    row = normalize_row(["ZONE 1", "2024", "Roads", "1200"], HEADERS)

    assert row is not None
    assert row.account == "ZONE 1"
    assert row.glcode == "2024"
    assert row.account_budget_a == "Roads"
    assert row.used_amt == 1200.0
    assert row.remaining_amt == 0.0


def test_normalize_row_headers_case_insensitive_and_trimmed():
    """Test header matching ignores case, surrounding spaces and unknown columns."""
    headers = [" AMOUNT", "notes", "category ", "WARD", "year"]
    row = normalize_row(["$3,400.50", "ignored", " Parks ", "ZONE 3", "2023"], headers)

    assert row is not None
    assert row.account == "ZONE 3"
    assert row.account_budget_a == "Parks"
    assert row.used_amt == 3400.5


def test_normalize_row_rejects_column_count_mismatch():
    """Test rows with more or fewer cells than headers are discarded."""
    assert normalize_row(["ZONE 1", "2024", "Roads"], HEADERS) is None
    assert normalize_row(["ZONE 1", "2024", "Roads", "$1", "200"], HEADERS) is None


@pytest.mark.parametrize("values", [
    ["", "2024", "Roads", "100"],
    ["ZONE 1", "", "Roads", "100"],
    ["ZONE 1", "2024", "  ", "100"],
])
def test_normalize_row_rejects_missing_fields(values):
    """Test rows lacking account, glcode or category are discarded."""
    assert normalize_row(values, HEADERS) is None


def test_normalize_row_rejects_missing_header():
    """Test a file without a category column yields no records."""
    assert normalize_row(["ZONE 1", "2024", "100"], ["Ward", "Year", "Amount"]) is None


@pytest.mark.parametrize("amount", ["bad", "", "$", "inf", "nan", "12abc"])
def test_normalize_row_rejects_unparseable_amount(amount):
    """Test non-numeric and non-finite amounts are rejected."""
    assert normalize_row(["ZONE 1", "2024", "Roads", amount], HEADERS) is None


def test_normalize_row_keeps_zero_and_negative_amounts():
    """Test the normalizer only checks that the amount is a number."""
    assert normalize_row(["ZONE 1", "2024", "Roads", "0"], HEADERS).used_amt == 0.0
    assert normalize_row(["ZONE 1", "2024", "Roads", "-50"], HEADERS).used_amt == -50.0


def test_parse_amount_strips_currency_decoration():
    """Test dollar signs and thousands separators are removed."""
    assert parse_amount("$1,200") == 1200.0
    assert parse_amount(" 1,234,567.89 ") == 1234567.89
    assert parse_amount(None) is None


def test_coerce_number():
    """Test coercion of stored values."""
    assert coerce_number(Decimal("12.50")) == 12.5
    assert coerce_number(7) == 7.0
    assert coerce_number(" 3.5 ") == 3.5
    assert coerce_number("n/a") == 0.0
    assert coerce_number(None) == 0.0
    assert coerce_number(True) == 0.0
    assert coerce_number(math.nan) == 0.0
    assert coerce_number(None, default=None) is None
    assert coerce_number("n/a", default=None) is None
