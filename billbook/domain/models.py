"""Domain type definitions for billbook.

These types provide semantic clarity and help with type checking:
- Money: Amount in paise (minor units)
- FinancialYear: Financial year period in YYYY-YY format
- BillNumber: Display-ready bill number (K007, P/2025-26/003)
- PartyName: Name of the party a bill is raised for
- BillCategory: Kacchi (cash) or pakki (GST credit) bill
"""

from enum import Enum
from typing import NewType

# Money amounts are stored as paise (minor units) to avoid floating point errors
Money = NewType("Money", int)

# Financial year runs April to March (e.g., "2025-26")
FinancialYear = NewType("FinancialYear", str)

# Bill number exactly as issued and stored
BillNumber = NewType("BillNumber", str)

# Party (customer) name
PartyName = NewType("PartyName", str)


class BillCategory(str, Enum):
    """Bill category, stored by its kacchi/pakki name."""

    CASH = "kacchi"
    CREDIT = "pakki"

    @property
    def prefix(self) -> str:
        """Bill number prefix letter."""
        return "K" if self is BillCategory.CASH else "P"

    @property
    def label(self) -> str:
        return "Kacchi" if self is BillCategory.CASH else "Pakki"

    @classmethod
    def parse(cls, value: str) -> "BillCategory":
        """Parse a category from its name, alias or prefix letter.

        Args:
            value: One of kacchi/pakki, cash/credit or K/P (case-insensitive).

        Returns:
            Matching BillCategory.

        Raises:
            ValueError: If value names no category.
        """
        aliases = {
            "kacchi": cls.CASH,
            "cash": cls.CASH,
            "k": cls.CASH,
            "pakki": cls.CREDIT,
            "credit": cls.CREDIT,
            "p": cls.CREDIT,
        }
        try:
            return aliases[value.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown bill category '{value}' (use kacchi or pakki)") from None
