"""Display formatting for money and dates."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union


def format_currency(amount: Union[Decimal, int, float], symbol: str = "$") -> str:
    """
    Format an amount the way the dashboard shows it.

    Example: Decimal("-1234.5") -> "-$1,234.50"
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_date(value: Union[date, datetime]) -> str:
    """Example: date(2024, 1, 5) -> "Jan 5, 2024"."""
    return f"{value:%b} {value.day}, {value.year}"
