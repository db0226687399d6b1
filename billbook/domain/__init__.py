"""Domain models and types for billbook.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from billbook.domain.models import BillCategory, BillNumber, FinancialYear, Money, PartyName

__all__ = ["BillCategory", "BillNumber", "FinancialYear", "Money", "PartyName"]
