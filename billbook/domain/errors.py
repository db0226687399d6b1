"""Typed errors raised by the billbook core.

Domain code raises these and never logs or prints; the command layer decides
how to report them.
"""


class BillbookError(Exception):
    """Base class for all billbook errors."""


class InvalidAmount(BillbookError, ValueError):
    """Amount is negative, NaN or infinite."""


class LookupFailed(BillbookError):
    """Previously issued bill numbers could not be read."""


class DuplicateBillNumber(BillbookError):
    """The store rejected a bill because its number is already taken."""

    def __init__(self, bill_number: str) -> None:
        super().__init__(f"Bill number {bill_number} is already issued")
        self.bill_number = bill_number


class MalformedStoredNumber(BillbookError, ValueError):
    """A stored bill number does not match the expected format."""

    def __init__(self, raw: object, reason: str) -> None:
        super().__init__(f"Malformed bill number {raw!r}: {reason}")
        self.raw = raw


class InvalidBill(BillbookError, ValueError):
    """Bill data failed validation."""
