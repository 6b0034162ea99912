"""
Record normalization and numeric sanitization.

Turns raw CSV cells into rows fit for the ``municipal_budget`` table and
holds the number coercion rules shared by the import, retrieval and
insight paths. Everything here is pure: no I/O, no logging.
"""

import math
import re
from decimal import Decimal
from typing import Any, Optional, Sequence

from municipal_budget.schemas.budget import NormalizedRow

# CSV header (lower-cased) -> table column
HEADER_FIELDS = {
    "ward": "account",
    "year": "glcode",
    "category": "account_budget_a",
    "amount": "used_amt",
}

CURRENCY_DECORATION = re.compile(r"[$,]")


def parse_amount(value: Optional[str]) -> Optional[float]:
    """
    Parse a CSV amount cell such as ``"$1,200.50"``.

    Returns:
        The amount, or None when the cell is not a finite number
    """
    if value is None:
        return None
    try:
        amount = float(CURRENCY_DECORATION.sub("", value).strip())
    except ValueError:
        return None
    if not math.isfinite(amount):
        return None
    return amount


def coerce_number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Coerce a stored or submitted value to a float.

    None, booleans, unparseable strings and non-finite numbers all yield
    *default*.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default


def normalize_row(values: Sequence[str], headers: Sequence[str]) -> Optional[NormalizedRow]:
    """
    Map one CSV row onto the table columns.

    Args:
        values: Cell values of the row, in file order
        headers: Header names of the file, in file order

    Returns:
        The normalized row, or None when the row is rejected
    """
    if len(values) != len(headers):
        return None

    fields = {}
    for header, value in zip(headers, values):
        column = HEADER_FIELDS.get(header.strip().lower())
        if column is not None:
            fields[column] = value.strip()

    account = fields.get("account")
    glcode = fields.get("glcode")
    category = fields.get("account_budget_a")
    if not account or not glcode or not category:
        return None

    used_amt = parse_amount(fields.get("used_amt"))
    if used_amt is None:
        return None

    # No allocation column in the import format, so nothing is left over
    return NormalizedRow(
        account=account,
        glcode=glcode,
        account_budget_a=category,
        used_amt=used_amt,
        remaining_amt=0.0,
    )
