"""Bill numbering: formatting, parsing and sequencing.

Two numbering modes are supported, chosen per bill category:
- GLOBAL: one running sequence per category (K001, K002, ...)
- FINANCIAL_YEAR: the sequence restarts every April (P/2025-26/001, ...)

The next number is always the highest issued number in scope plus one. That
read-then-write is not atomic, so the store must reject duplicate bill numbers
and callers retry through issue_bill_number().
"""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TypeVar

from billbook.dates import financial_year
from billbook.domain.errors import BillbookError, DuplicateBillNumber, LookupFailed, MalformedStoredNumber
from billbook.domain.models import BillCategory, BillNumber, FinancialYear

T = TypeVar("T")

SEQUENCE_WIDTH = 3

SIMPLE_NUMBER = re.compile(r"([KP])(\d+)", re.ASCII)
COMPOUND_NUMBER = re.compile(r"([KP])/(\d{4}-\d{2})/(\d+)", re.ASCII)


class NumberingMode(str, Enum):
    """How bill numbers of one category are sequenced."""

    GLOBAL = "global"
    FINANCIAL_YEAR = "financial-year"


DEFAULT_MODES: dict[BillCategory, NumberingMode] = {
    BillCategory.CASH: NumberingMode.GLOBAL,
    BillCategory.CREDIT: NumberingMode.FINANCIAL_YEAR,
}


@dataclass(frozen=True)
class BillNumberQuery:
    """Which issued bill numbers a lookup should return."""

    category: BillCategory
    period: FinancialYear | None = None

    @property
    def prefix(self) -> str:
        """Leading text shared by every bill number in scope."""
        if self.period is None:
            return self.category.prefix
        return f"{self.category.prefix}/{self.period}/"


@dataclass(frozen=True)
class SequenceResult:
    """Immutable result of computing the next bill number."""

    category: BillCategory
    sequence: int
    period: FinancialYear | None = None
    skipped: tuple[str, ...] = ()

    @property
    def bill_number(self) -> BillNumber:
        return format_bill_number(self.category, self.sequence, self.period)


def format_bill_number(category: BillCategory, n: int, period: FinancialYear | None = None) -> BillNumber:
    """Format a sequence number for a category.

    Args:
        category: Bill category (decides the prefix letter).
        n: Sequence number, zero-padded to 3 digits but never truncated.
        period: Financial year for FINANCIAL_YEAR numbering, None for GLOBAL.

    Returns:
        Bill number such as "K007", "K1042" or "P/2025-26/003".

    Raises:
        ValueError: If n is negative.
    """
    if n < 0:
        raise ValueError(f"Bill sequence must not be negative, got {n}")

    padded = str(n).zfill(SEQUENCE_WIDTH)
    if period is None:
        return BillNumber(f"{category.prefix}{padded}")
    return BillNumber(f"{category.prefix}/{period}/{padded}")


def display_bill_number(category: BillCategory, raw: int | str) -> BillNumber:
    """Format an already issued bill number for display.

    Accepts the shapes found in stored data: a bare sequence (7 or "7"), a
    prefixed number ("K7") or a compound number ("P/2025-26/3").

    Args:
        category: Category the bill belongs to.
        raw: Stored value.

    Returns:
        Padded bill number.

    Raises:
        MalformedStoredNumber: If raw has none of the known shapes, or its
            prefix letter belongs to the other category.
    """
    if isinstance(raw, bool):
        raise MalformedStoredNumber(raw, "not a bill number")
    if isinstance(raw, int):
        if raw < 0:
            raise MalformedStoredNumber(raw, "negative sequence")
        return format_bill_number(category, raw)

    text = raw.strip()
    if text.isascii() and text.isdigit():
        return format_bill_number(category, int(text))

    simple = SIMPLE_NUMBER.fullmatch(text)
    compound = COMPOUND_NUMBER.fullmatch(text)
    match = simple or compound
    if match is None:
        raise MalformedStoredNumber(raw, "unrecognised format")
    if match.group(1) != category.prefix:
        raise MalformedStoredNumber(raw, f"prefix does not match {category.label} bills")

    if simple:
        return format_bill_number(category, int(simple.group(2)))
    return format_bill_number(category, int(match.group(3)), FinancialYear(match.group(2)))


def parse_sequence(category: BillCategory, raw: str, period: FinancialYear | None = None) -> int:
    """Extract the sequence number from one issued bill number.

    Args:
        category: Expected category.
        raw: Stored bill number.
        period: Expected financial year for FINANCIAL_YEAR numbering, None for GLOBAL.

    Returns:
        Sequence number.

    Raises:
        MalformedStoredNumber: If raw does not match the expected format.
    """
    if period is None:
        match = SIMPLE_NUMBER.fullmatch(raw)
        if match is None or match.group(1) != category.prefix:
            raise MalformedStoredNumber(raw, f"expected {category.prefix} followed by digits")
        return int(match.group(2))

    segments = raw.split("/")
    if len(segments) != 3 or segments[0] != category.prefix or segments[1] != period:
        raise MalformedStoredNumber(raw, f"expected {category.prefix}/{period}/<number>")
    if not (segments[2].isascii() and segments[2].isdigit()):
        raise MalformedStoredNumber(raw, "sequence is not a number")
    return int(segments[2])


def next_sequence(
    category: BillCategory,
    issued: Iterable[str],
    period: FinancialYear | None = None,
) -> SequenceResult:
    """Calculate the next bill number from the numbers already issued.

    Numbers outside the category (or outside the financial year) are ignored.
    Malformed numbers inside the scope are skipped and reported in the result.

    Args:
        category: Bill category.
        issued: Previously issued bill numbers, in any order.
        period: Financial year for FINANCIAL_YEAR numbering, None for GLOBAL.

    Returns:
        SequenceResult with the next sequence (1 if none issued yet).
    """
    scope = BillNumberQuery(category, period).prefix
    highest = 0
    skipped: list[str] = []

    for raw in issued:
        if not raw.startswith(scope):
            continue
        try:
            highest = max(highest, parse_sequence(category, raw, period))
        except MalformedStoredNumber:
            skipped.append(raw)

    return SequenceResult(category=category, sequence=highest + 1, period=period, skipped=tuple(skipped))


class BillNumberSequencer:
    """Computes next bill numbers against an injected lookup of issued numbers.

    The lookup takes a BillNumberQuery and returns the issued bill numbers in
    scope (an empty list when none exist). Any exception it raises is treated
    as a failed lookup.
    """

    def __init__(
        self,
        lookup: Callable[[BillNumberQuery], Iterable[str] | None],
        modes: Mapping[BillCategory, NumberingMode] | None = None,
    ) -> None:
        self._lookup = lookup
        self._modes = {**DEFAULT_MODES, **(modes or {})}

    def mode_for(self, category: BillCategory) -> NumberingMode:
        return self._modes[category]

    def query_for(self, category: BillCategory, reference_date: date | None = None) -> BillNumberQuery:
        """Build the lookup query for a category on a given bill date."""
        if self.mode_for(category) is NumberingMode.GLOBAL:
            return BillNumberQuery(category)
        return BillNumberQuery(category, financial_year(reference_date or date.today()))

    def next_bill_number(self, category: BillCategory, reference_date: date | None = None) -> SequenceResult:
        """Compute the next bill number for a category.

        Args:
            category: Bill category.
            reference_date: Bill date, used to pick the financial year. Defaults to today.

        Returns:
            SequenceResult; its bill_number is display-ready.

        Raises:
            LookupFailed: If the issued numbers could not be read.
        """
        query = self.query_for(category, reference_date)
        try:
            issued = self._lookup(query)
        except BillbookError:
            raise
        except Exception as e:
            raise LookupFailed(f"Could not read issued {category.label} bill numbers: {e}") from e

        if issued is None:
            raise LookupFailed(f"Lookup of {category.label} bill numbers returned no result")
        return next_sequence(category, issued, query.period)


def issue_bill_number(
    sequencer: BillNumberSequencer,
    category: BillCategory,
    reference_date: date | None,
    insert: Callable[[SequenceResult], T],
    max_attempts: int = 3,
) -> tuple[SequenceResult, T]:
    """Assign a bill number and insert the bill, retrying on conflicts.

    Args:
        sequencer: Sequencer used to compute each candidate number.
        category: Bill category.
        reference_date: Bill date.
        insert: Stores the bill under the given number; raises
            DuplicateBillNumber if the number was taken meanwhile.
        max_attempts: Total number of numbers to try.

    Returns:
        Tuple of (sequence_result, insert_result).

    Raises:
        DuplicateBillNumber: If every attempt collided.
        LookupFailed: If the issued numbers could not be read.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    while True:
        result = sequencer.next_bill_number(category, reference_date)
        try:
            return result, insert(result)
        except DuplicateBillNumber:
            if attempt >= max_attempts:
                raise
            attempt += 1
