"""Date utilities for billbook.

Pure functions for financial year calculations and formatting. The Indian
financial year runs from 1 April to 31 March and is written "2025-26".
"""

import re
from datetime import date, datetime, timedelta

from billbook.domain.models import FinancialYear

FINANCIAL_YEAR_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

# Bill book order within a financial year
FINANCIAL_YEAR_MONTHS = [4, 5, 6, 7, 8, 9, 10, 11, 12, 1, 2, 3]


def financial_year(day: date) -> FinancialYear:
    """Get the financial year a date falls in.

    Args:
        day: Calendar date.

    Returns:
        Financial year such as "2025-26".
    """
    if day.month >= 4:
        start = day.year
    else:
        start = day.year - 1
    return FinancialYear(f"{start}-{(start + 1) % 100:02d}")


def parse_financial_year(value: str) -> int:
    """Validate a financial year and return its starting calendar year.

    Args:
        value: Financial year in YYYY-YY format.

    Returns:
        Calendar year in which the financial year starts.

    Raises:
        ValueError: If the format is wrong or the two halves don't follow on.
    """
    match = FINANCIAL_YEAR_PATTERN.match(value)
    if not match:
        raise ValueError(f"Financial year must look like 2025-26, got '{value}'")

    start = int(match.group(1))
    if (start + 1) % 100 != int(match.group(2)):
        raise ValueError(f"'{value}' is not a valid financial year")
    return start


def financial_year_range(year: FinancialYear) -> tuple[str, str]:
    """Calculate the date range covered by a financial year.

    Args:
        year: Financial year in YYYY-YY format.

    Returns:
        Tuple of (since_date, until_date) where until_date is exclusive.
    """
    start = parse_financial_year(year)
    return f"{start}-04-01", f"{start + 1}-04-01"


def month_range(year: FinancialYear, month: int) -> tuple[str, str, str]:
    """Calculate date range and label for a month of a financial year.

    Args:
        year: Financial year in YYYY-YY format.
        month: Calendar month number (1-12).

    Returns:
        Tuple of (since_date, until_date, label) where:
        - since_date: First day of month (YYYY-MM-DD)
        - until_date: First day of next month (YYYY-MM-DD)
        - label: Human-readable month (e.g., "January 2026")
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")

    start = parse_financial_year(year)
    calendar_year = start if month >= 4 else start + 1
    dt = datetime(calendar_year, month, 1)
    next_month = (dt.replace(day=28) + timedelta(days=4)).replace(day=1)
    return dt.strftime("%Y-%m-%d"), next_month.strftime("%Y-%m-%d"), dt.strftime("%B %Y")
