"""Tests for billbook.domain.bill_numbers."""

import sqlite3
from datetime import date

import pytest

from billbook.domain.bill_numbers import (
    BillNumberQuery,
    BillNumberSequencer,
    NumberingMode,
    SequenceResult,
    display_bill_number,
    format_bill_number,
    issue_bill_number,
    next_sequence,
    parse_sequence,
)
from billbook.domain.errors import DuplicateBillNumber, LookupFailed, MalformedStoredNumber
from billbook.domain.models import BillCategory, FinancialYear

CASH = BillCategory.CASH
CREDIT = BillCategory.CREDIT
FY_2025 = FinancialYear("2025-26")


class TestFormatBillNumber:
    """Tests for format_bill_number."""

    def test_pads_to_three_digits(self) -> None:
        """Should zero-pad short sequences."""
        assert format_bill_number(CASH, 7) == "K007"
        assert format_bill_number(CREDIT, 42) == "P042"

    def test_never_truncates(self) -> None:
        """Should keep all digits of long sequences."""
        assert format_bill_number(CASH, 1042) == "K1042"

    def test_financial_year_form(self) -> None:
        """Should include the financial year between slashes."""
        assert format_bill_number(CREDIT, 3, FY_2025) == "P/2025-26/003"

    def test_negative_raises(self) -> None:
        """Should reject negative sequences."""
        with pytest.raises(ValueError):
            format_bill_number(CASH, -1)


class TestDisplayBillNumber:
    """Tests for display_bill_number."""

    def test_bare_sequence(self) -> None:
        """Should prefix bare integers and digit strings."""
        assert display_bill_number(CASH, 7) == "K007"
        assert display_bill_number(CASH, "7") == "K007"
        assert display_bill_number(CASH, " 12 ") == "K012"

    def test_prefixed_number(self) -> None:
        """Should re-pad prefixed numbers."""
        assert display_bill_number(CREDIT, "P7") == "P007"
        assert display_bill_number(CASH, "K1042") == "K1042"

    def test_compound_number(self) -> None:
        """Should re-pad financial year numbers."""
        assert display_bill_number(CREDIT, "P/2025-26/3") == "P/2025-26/003"

    def test_prefix_mismatch_raises(self) -> None:
        """Should refuse a number belonging to the other category."""
        with pytest.raises(MalformedStoredNumber):
            display_bill_number(CASH, "P007")

    def test_garbage_raises(self) -> None:
        """Should refuse unrecognised values."""
        with pytest.raises(MalformedStoredNumber):
            display_bill_number(CASH, "abc")
        with pytest.raises(MalformedStoredNumber):
            display_bill_number(CASH, -1)


class TestParseSequence:
    """Tests for parse_sequence."""

    def test_simple_number(self) -> None:
        """Should read the digits after the prefix."""
        assert parse_sequence(CASH, "K007") == 7

    def test_wrong_prefix_raises(self) -> None:
        """Should reject numbers of the other category."""
        with pytest.raises(MalformedStoredNumber):
            parse_sequence(CASH, "P007")

    def test_trailing_newline_raises(self) -> None:
        """Should match the whole stored value."""
        with pytest.raises(MalformedStoredNumber):
            parse_sequence(CASH, "K005\n")

    def test_compound_number(self) -> None:
        """Should read the last segment of a financial year number."""
        assert parse_sequence(CREDIT, "P/2025-26/012", FY_2025) == 12

    def test_compound_wrong_period_raises(self) -> None:
        """Should reject numbers from another financial year."""
        with pytest.raises(MalformedStoredNumber):
            parse_sequence(CREDIT, "P/2024-25/012", FY_2025)

    def test_compound_extra_segment_raises(self) -> None:
        """Should reject numbers with too many segments."""
        with pytest.raises(MalformedStoredNumber):
            parse_sequence(CREDIT, "P/2025-26/12/1", FY_2025)


class TestNextSequence:
    """Tests for next_sequence."""

    def test_first_bill(self) -> None:
        """Should start at 1 when nothing was issued."""
        result = next_sequence(CASH, [])
        assert result.sequence == 1
        assert result.bill_number == "K001"
        assert result.skipped == ()

    def test_highest_plus_one(self) -> None:
        """Should continue from the highest issued number."""
        assert next_sequence(CASH, ["K001", "K002", "K010"]).bill_number == "K011"

    def test_order_does_not_matter(self) -> None:
        """Should not rely on the issued numbers being sorted."""
        assert next_sequence(CASH, ["K010", "K002"]).bill_number == "K011"

    def test_grows_past_width(self) -> None:
        """Should widen past 999 without truncation."""
        assert next_sequence(CASH, ["K999"]).bill_number == "K1000"

    def test_skips_malformed(self) -> None:
        """Should skip malformed numbers and report them."""
        result = next_sequence(CASH, ["K001", "KXYZ"])
        assert result.bill_number == "K002"
        assert result.skipped == ("KXYZ",)

    def test_ignores_other_category(self) -> None:
        """Should not count numbers of the other category."""
        result = next_sequence(CASH, ["K003", "P009"])
        assert result.bill_number == "K004"
        assert result.skipped == ()

    def test_financial_year_scope(self) -> None:
        """Should only count numbers of the same financial year."""
        result = next_sequence(CREDIT, ["P/2025-26/001", "P/2024-25/099"], FY_2025)
        assert result.bill_number == "P/2025-26/002"
        assert result.skipped == ()

    def test_new_financial_year_restarts(self) -> None:
        """Should restart at 1 in a new financial year."""
        assert next_sequence(CREDIT, ["P/2024-25/099"], FY_2025).bill_number == "P/2025-26/001"

    def test_trailing_newline_is_malformed(self) -> None:
        """Should not accept a stored number with trailing whitespace."""
        result = next_sequence(CASH, ["K005\n"])
        assert result.bill_number == "K001"
        assert result.skipped == ("K005\n",)

    def test_financial_year_malformed(self) -> None:
        """Should skip malformed numbers inside the financial year."""
        result = next_sequence(CREDIT, ["P/2025-26/004", "P/2025-26/abc"], FY_2025)
        assert result.bill_number == "P/2025-26/005"
        assert result.skipped == ("P/2025-26/abc",)


class FakeLookup:
    """Records queries and returns canned issued numbers."""

    def __init__(self, issued=None, error: Exception | None = None) -> None:
        self.issued = issued
        self.error = error
        self.queries: list[BillNumberQuery] = []

    def __call__(self, query: BillNumberQuery):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.issued


class TestBillNumberSequencer:
    """Tests for BillNumberSequencer."""

    def test_default_modes(self) -> None:
        """Should number kacchi bills globally and pakki bills per financial year."""
        sequencer = BillNumberSequencer(FakeLookup([]))
        assert sequencer.mode_for(CASH) is NumberingMode.GLOBAL
        assert sequencer.mode_for(CREDIT) is NumberingMode.FINANCIAL_YEAR

    def test_global_query(self) -> None:
        """Should look up the whole category in global mode."""
        lookup = FakeLookup(["K001", "K010"])
        result = BillNumberSequencer(lookup).next_bill_number(CASH, date(2025, 5, 15))

        assert result.bill_number == "K011"
        assert lookup.queries == [BillNumberQuery(CASH)]
        assert lookup.queries[0].prefix == "K"

    def test_financial_year_query(self) -> None:
        """Should look up only the financial year of the bill date."""
        lookup = FakeLookup(["P/2025-26/001", "P/2024-25/099"])
        result = BillNumberSequencer(lookup).next_bill_number(CREDIT, date(2025, 5, 15))

        assert result.bill_number == "P/2025-26/002"
        assert lookup.queries == [BillNumberQuery(CREDIT, FY_2025)]
        assert lookup.queries[0].prefix == "P/2025-26/"

    def test_financial_year_boundary(self) -> None:
        """Should switch financial year on 1 April."""
        sequencer = BillNumberSequencer(FakeLookup([]))
        assert sequencer.query_for(CREDIT, date(2026, 3, 31)).period == "2025-26"
        assert sequencer.query_for(CREDIT, date(2026, 4, 1)).period == "2026-27"

    def test_mode_override(self) -> None:
        """Should honour configured modes."""
        sequencer = BillNumberSequencer(FakeLookup([]), {CASH: NumberingMode.FINANCIAL_YEAR})
        assert sequencer.next_bill_number(CASH, date(2025, 5, 15)).bill_number == "K/2025-26/001"

    def test_empty_lookup_starts_at_one(self) -> None:
        """Should treat an empty result as no bills issued."""
        result = BillNumberSequencer(FakeLookup([])).next_bill_number(CASH)
        assert result == SequenceResult(category=CASH, sequence=1)

    def test_lookup_error_becomes_lookup_failed(self) -> None:
        """Should wrap lookup exceptions in LookupFailed."""
        error = sqlite3.OperationalError("database is locked")
        sequencer = BillNumberSequencer(FakeLookup(error=error))

        with pytest.raises(LookupFailed) as exc_info:
            sequencer.next_bill_number(CASH)
        assert exc_info.value.__cause__ is error

    def test_lookup_none_is_lookup_failed(self) -> None:
        """Should not mistake a missing result for an empty one."""
        with pytest.raises(LookupFailed):
            BillNumberSequencer(FakeLookup(None)).next_bill_number(CASH)

    def test_billbook_errors_pass_through(self) -> None:
        """Should re-raise billbook errors from the lookup unchanged."""
        error = LookupFailed("offline")
        with pytest.raises(LookupFailed) as exc_info:
            BillNumberSequencer(FakeLookup(error=error)).next_bill_number(CASH)
        assert exc_info.value is error


class TestIssueBillNumber:
    """Tests for issue_bill_number."""

    def test_first_attempt(self) -> None:
        """Should insert under the computed number."""
        sequencer = BillNumberSequencer(FakeLookup(["K004"]))
        result, bill_id = issue_bill_number(sequencer, CASH, None, lambda r: 7)
        assert result.bill_number == "K005"
        assert bill_id == 7

    def test_retries_after_concurrent_insert(self) -> None:
        """Should recompute the number when another writer took it."""
        issued: list[str] = []
        attempts: list[str] = []

        def insert(result: SequenceResult) -> int:
            attempts.append(result.bill_number)
            issued.append(result.bill_number)
            if len(attempts) == 1:
                raise DuplicateBillNumber(result.bill_number)
            return 42

        sequencer = BillNumberSequencer(lambda query: list(issued))
        result, bill_id = issue_bill_number(sequencer, CASH, None, insert)

        assert attempts == ["K001", "K002"]
        assert result.bill_number == "K002"
        assert bill_id == 42

    def test_gives_up_after_max_attempts(self) -> None:
        """Should re-raise the conflict once every attempt collided."""
        attempts: list[str] = []

        def insert(result: SequenceResult) -> int:
            attempts.append(result.bill_number)
            raise DuplicateBillNumber(result.bill_number)

        sequencer = BillNumberSequencer(FakeLookup([]))
        with pytest.raises(DuplicateBillNumber):
            issue_bill_number(sequencer, CASH, None, insert, max_attempts=3)
        assert len(attempts) == 3

    def test_lookup_failure_not_retried(self) -> None:
        """Should not retry when issued numbers cannot be read."""
        lookup = FakeLookup(error=sqlite3.OperationalError("disk I/O error"))
        with pytest.raises(LookupFailed):
            issue_bill_number(BillNumberSequencer(lookup), CASH, None, lambda r: 1)
        assert len(lookup.queries) == 1

    def test_invalid_max_attempts(self) -> None:
        """Should require at least one attempt."""
        with pytest.raises(ValueError):
            issue_bill_number(BillNumberSequencer(FakeLookup([])), CASH, None, lambda r: 1, max_attempts=0)
