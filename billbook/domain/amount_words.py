"""Pure functions for spelling rupee amounts in Indian English.

This module contains the functional core for amount formatting:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

Amounts are grouped the Indian way (thousand, lakh, crore) rather than in
millions and billions. Rounding to paise happens before the rupee/paise split
and uses ROUND_HALF_UP, so 2.675 is Two Rupees and Sixty Eight Paise.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from billbook.domain.errors import InvalidAmount
from billbook.domain.models import Money

ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
TEENS = [
    "Ten",
    "Eleven",
    "Twelve",
    "Thirteen",
    "Fourteen",
    "Fifteen",
    "Sixteen",
    "Seventeen",
    "Eighteen",
    "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000

PAISE_QUANTUM = Decimal("0.01")

Amount = int | float | Decimal


def spell_below_thousand(n: int) -> str:
    """Spell a number between 0 and 999.

    Args:
        n: Number to spell.

    Returns:
        Words for n, or an empty string for zero.

    Raises:
        ValueError: If n is outside 0-999.
    """
    if not 0 <= n <= 999:
        raise ValueError(f"{n} is outside 0-999")
    if n == 0:
        return ""
    if n < 10:
        return ONES[n]
    if n < 20:
        return TEENS[n - 10]
    if n < 100:
        tens, ones = divmod(n, 10)
        return TENS[tens] + (" " + ONES[ones] if ones else "")
    hundreds, rest = divmod(n, 100)
    return ONES[hundreds] + " Hundred" + (" " + spell_below_thousand(rest) if rest else "")


def spell_indian(n: int) -> str:
    """Spell a non-negative integer using crore, lakh and thousand groups.

    Zero groups are omitted. A crore count of 1000 or more is itself spelled
    with Indian grouping, e.g. "One Thousand Crore".

    Args:
        n: Non-negative integer.

    Returns:
        Words for n, or an empty string for zero.
    """
    crore, n = divmod(n, CRORE)
    lakh, n = divmod(n, LAKH)
    thousand, n = divmod(n, THOUSAND)

    parts = []
    if crore:
        parts.append(f"{spell_indian(crore)} Crore")
    if lakh:
        parts.append(f"{spell_below_thousand(lakh)} Lakh")
    if thousand:
        parts.append(f"{spell_below_thousand(thousand)} Thousand")
    if n:
        parts.append(spell_below_thousand(n))
    return " ".join(parts)


def to_decimal(amount: Amount) -> Decimal:
    """Convert an amount to a finite, non-negative Decimal.

    Floats go through their shortest repr so 0.1 stays 0.1.

    Raises:
        InvalidAmount: If the amount is negative, NaN, infinite or not a number.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise InvalidAmount(f"Amount must be a number, got {type(amount).__name__}")

    value = Decimal(repr(amount)) if isinstance(amount, float) else Decimal(amount)

    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {amount}")
    if value < 0:
        raise InvalidAmount(f"Amount must not be negative, got {amount}")
    return value


def split_rupees_paise(amount: Amount) -> tuple[int, int]:
    """Round an amount to paise, then split it.

    Args:
        amount: Amount in rupees.

    Returns:
        Tuple of (rupees, paise) where paise is always 0-99.

    Raises:
        InvalidAmount: If the amount is negative, NaN or infinite.
    """
    value = to_decimal(amount)
    try:
        cents = value.quantize(PAISE_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise InvalidAmount(f"Amount {amount} is too large") from e
    rupees, paise = divmod(int(cents * 100), 100)
    return rupees, paise


def to_words(amount: Amount) -> str:
    """Spell a rupee amount for printing on a bill.

    Args:
        amount: Non-negative amount in rupees (at most 2 meaningful decimals).

    Returns:
        Words such as "One Lakh Rupees and Fifty Paise Only", or "Zero" for
        exactly zero. The rupee clause stays plural for one rupee.

    Raises:
        InvalidAmount: If the amount is negative, NaN or infinite.
    """
    rupees, paise = split_rupees_paise(amount)

    if rupees == 0 and paise == 0:
        return "Zero"

    clauses = []
    if rupees:
        clauses.append(f"{spell_indian(rupees)} Rupees")
    if paise:
        clauses.append(f"{spell_below_thousand(paise)} Paise")

    return " and ".join(clauses) + " Only"


def paise_to_words(amount: Money) -> str:
    """Spell a stored amount given in paise."""
    if amount < 0:
        raise InvalidAmount(f"Amount must not be negative, got {amount} paise")
    return to_words(Decimal(amount) / 100)


def format_indian_number(n: int) -> str:
    """Group digits the Indian way (12,34,567).

    Args:
        n: Integer to format.

    Returns:
        Digit string with a sign if negative.
    """
    sign = "-" if n < 0 else ""
    digits = str(abs(n))
    if len(digits) <= 3:
        return sign + digits

    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join([*groups, tail])


def format_inr(amount: Money) -> str:
    """Format paise as rupees for display (e.g., ₹12,34,567.89)."""
    sign = "-" if amount < 0 else ""
    rupees, paise = divmod(abs(amount), 100)
    return f"{sign}₹{format_indian_number(rupees)}.{paise:02d}"
