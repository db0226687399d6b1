"""Tests for billbook.domain.bills pure functions."""

from datetime import date
from decimal import Decimal

import pytest

from billbook.domain.bills import (
    BillDraft,
    bill_from_row,
    build_bill,
    build_item,
    calculate_gst,
    check_edit_keeps_number,
    rupees_to_money,
)
from billbook.domain.errors import InvalidAmount, InvalidBill
from billbook.domain.models import BillCategory, Money

CASH = BillCategory.CASH
CREDIT = BillCategory.CREDIT


class TestRupeesToMoney:
    """Tests for rupees_to_money."""

    def test_string_amounts(self) -> None:
        """Should convert rupee strings to paise."""
        assert rupees_to_money("1250.50") == 125050
        assert rupees_to_money("1,250.5") == 125050
        assert rupees_to_money(" 15 ") == 1500

    def test_numbers(self) -> None:
        """Should convert ints, floats and Decimals."""
        assert rupees_to_money(15) == 1500
        assert rupees_to_money(12.345) == 1235
        assert rupees_to_money(Decimal("0.005")) == 1

    def test_invalid_values_raise(self) -> None:
        """Should reject text and negative amounts."""
        with pytest.raises(InvalidAmount):
            rupees_to_money("abc")
        with pytest.raises(InvalidAmount):
            rupees_to_money("-5")

    def test_too_large_raises(self) -> None:
        """Should reject amounts beyond decimal precision."""
        with pytest.raises(InvalidAmount, match="too large"):
            rupees_to_money("1e40")


class TestBuildItem:
    """Tests for build_item."""

    def test_amount_from_bags_and_rate(self) -> None:
        """Should multiply bags by rate when no amount is given."""
        item = build_item("Paddy", qty_bags=10, rate=Money(150000))
        assert item.amount == 1500000

    def test_zero_bags_or_rate(self) -> None:
        """Should treat zero bags or a zero rate as a zero amount."""
        assert build_item("Rice", qty_bags=0, rate=Money(10000)).amount == 0
        assert build_item("Rice", qty_bags=5, rate=Money(0)).amount == 0

    def test_explicit_amount_wins(self) -> None:
        """Should keep an explicit amount."""
        item = build_item("Paddy", amount=Money(99900), qty_bags=10, rate=Money(150000))
        assert item.amount == 99900

    def test_strips_particular(self) -> None:
        """Should strip surrounding whitespace from the description."""
        assert build_item("  Wheat ", amount=Money(100)).particular == "Wheat"

    def test_missing_amount_raises(self) -> None:
        """Should require an amount or bags and rate."""
        with pytest.raises(InvalidBill):
            build_item("Paddy", qty_bags=10)

    def test_blank_particular_raises(self) -> None:
        """Should require a description."""
        with pytest.raises(InvalidBill):
            build_item("   ", amount=Money(100))

    def test_negative_values_raise(self) -> None:
        """Should reject negative amounts and bags."""
        with pytest.raises(InvalidBill):
            build_item("Paddy", amount=Money(-1))
        with pytest.raises(InvalidBill):
            build_item("Paddy", amount=Money(100), qty_bags=-2)


class TestCalculateGst:
    """Tests for calculate_gst."""

    def test_split_rates(self) -> None:
        """Should compute each tax on the taxable value."""
        gst = calculate_gst(Money(100000), 2.5, 2.5, 0)
        assert gst.cgst_amount == 2500
        assert gst.sgst_amount == 2500
        assert gst.igst_amount == 0
        assert gst.total == 5000
        assert gst.cgst_percent == Decimal("2.5")

    def test_rounds_half_up_per_tax(self) -> None:
        """Should round each tax to the nearest paisa."""
        gst = calculate_gst(Money(333), 5, 0, 18)
        assert gst.cgst_amount == 17
        assert gst.igst_amount == 60

    def test_rate_out_of_range_raises(self) -> None:
        """Should reject rates outside 0-100."""
        with pytest.raises(InvalidBill):
            calculate_gst(Money(100), 101)
        with pytest.raises(InvalidBill):
            calculate_gst(Money(100), 0, -1)


class TestBuildBill:
    """Tests for build_bill."""

    def test_pakki_bill_totals(self) -> None:
        """Should compute taxable value, GST, grand total and words."""
        draft = build_bill(
            CREDIT,
            "ramesh  traders",
            date(2025, 5, 15),
            [build_item("Paddy", amount=Money(100000))],
            gst_rates=(2.5, 2.5, 0),
            balance=Money(5000),
        )

        assert draft.party_name == "Ramesh Traders"
        assert draft.total_amount == 100000
        assert draft.gst_total == 5000
        assert draft.grand_total == 110000
        assert draft.amount_words == "One Thousand One Hundred Rupees Only"
        assert draft.financial_year == "2025-26"

    def test_kacchi_bill_rejects_gst(self) -> None:
        """Should refuse GST on kacchi bills."""
        with pytest.raises(InvalidBill, match="Kacchi"):
            build_bill(CASH, "Ramesh", date(2025, 5, 15), [build_item("Paddy", amount=Money(100))], (5, 0, 0))

    def test_zero_rates_mean_no_gst(self) -> None:
        """Should accept all-zero rates on kacchi bills."""
        draft = build_bill(CASH, "Ramesh", date(2025, 5, 15), [build_item("Paddy", amount=Money(100))], (0, 0, 0))
        assert draft.gst is None
        assert draft.gst_total == 0

    def test_details_cleaned(self) -> None:
        """Should upper-case vehicles and blank out empty fields."""
        draft = build_bill(
            CREDIT,
            "Ramesh",
            date(2025, 5, 15),
            [build_item("Paddy", amount=Money(100))],
            vehicle_number=" mh10ab1234 ",
            notes="   ",
            bank_name="State Bank",
        )
        assert draft.vehicle_number == "MH10AB1234"
        assert draft.notes is None
        assert draft.bank_name == "State Bank"

    def test_kacchi_drops_bank_details(self) -> None:
        """Should not keep bank details on kacchi bills."""
        draft = build_bill(
            CASH,
            "Ramesh",
            date(2025, 5, 15),
            [build_item("Paddy", amount=Money(100))],
            bank_name="State Bank",
            bank_account="12345",
        )
        assert draft.bank_name is None
        assert draft.bank_account is None

    def test_invalid_input_raises(self) -> None:
        """Should reject missing party, missing items, negative balance and unknown fields."""
        item = build_item("Paddy", amount=Money(100))
        with pytest.raises(InvalidBill):
            build_bill(CASH, "  ", date(2025, 5, 15), [item])
        with pytest.raises(InvalidBill):
            build_bill(CASH, "Ramesh", date(2025, 5, 15), [])
        with pytest.raises(InvalidBill):
            build_bill(CASH, "Ramesh", date(2025, 5, 15), [item], balance=Money(-1))
        with pytest.raises(InvalidBill):
            build_bill(CASH, "Ramesh", date(2025, 5, 15), [item], colour="red")


class TestCheckEditKeepsNumber:
    """Tests for check_edit_keeps_number."""

    def draft(self, category: BillCategory, bill_date: date) -> BillDraft:
        return build_bill(category, "Ramesh", bill_date, [build_item("Paddy", amount=Money(100))])

    def test_same_category_and_year(self) -> None:
        """Should accept edits that keep the number valid."""
        check_edit_keeps_number("K007", self.draft(CASH, date(2030, 1, 1)))
        check_edit_keeps_number("P/2025-26/003", self.draft(CREDIT, date(2026, 3, 31)))

    def test_category_change_raises(self) -> None:
        """Should refuse turning a kacchi number into a pakki bill."""
        with pytest.raises(InvalidBill):
            check_edit_keeps_number("K007", self.draft(CREDIT, date(2025, 5, 15)))

    def test_date_outside_financial_year_raises(self) -> None:
        """Should keep financial year numbers within their year."""
        with pytest.raises(InvalidBill):
            check_edit_keeps_number("P/2025-26/003", self.draft(CREDIT, date(2026, 4, 1)))


class TestBillFromRow:
    """Tests for bill_from_row."""

    def test_builds_bill_with_items(self) -> None:
        """Should map stored columns onto a Bill."""
        row = {
            "id": 3,
            "bill_number": "P/2025-26/001",
            "bill_type": "pakki",
            "party_name": "Ramesh Traders",
            "bill_date": "2025-05-15",
            "financial_year": "2025-26",
            "total_amount": 100000,
            "gst_total": 5000,
            "cgst_amount": 2500,
            "sgst_amount": 2500,
            "igst_amount": 0,
            "balance": None,
            "party_gst_number": "27ABCDE1234F1Z5",
            "total_amount_words": "One Thousand Fifty Rupees Only",
        }
        items = [{"particular": "Paddy", "amount": 100000, "qty_bags": 10, "weight_kg": 500.0, "rate": 10000}]

        bill = bill_from_row(row, items)

        assert bill.category is CREDIT
        assert bill.balance == 0
        assert bill.grand_total == 105000
        assert bill.month_number == 5
        assert bill.amount_words == "One Thousand Fifty Rupees Only"
        assert bill.items[0].rate == 10000
        assert bill.items[0].qty_bags == 10
