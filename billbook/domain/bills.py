"""Pure functions for building and validating bills.

This module contains the functional core for bill operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in paise (Money type).
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from billbook.dates import financial_year
from billbook.domain.amount_words import paise_to_words, to_decimal
from billbook.domain.errors import InvalidAmount, InvalidBill
from billbook.domain.models import BillCategory, BillNumber, FinancialYear, Money, PartyName


@dataclass(frozen=True)
class BillItem:
    """Immutable line item of a bill."""

    particular: str
    amount: Money
    qty_bags: int | None = None
    weight_kg: float | None = None
    rate: Money | None = None


@dataclass(frozen=True)
class GstBreakdown:
    """Immutable GST percentages and amounts for a pakki bill."""

    cgst_percent: Decimal = Decimal(0)
    sgst_percent: Decimal = Decimal(0)
    igst_percent: Decimal = Decimal(0)
    cgst_amount: Money = Money(0)
    sgst_amount: Money = Money(0)
    igst_amount: Money = Money(0)

    @property
    def total(self) -> Money:
        return Money(self.cgst_amount + self.sgst_amount + self.igst_amount)


@dataclass(frozen=True)
class BillDraft:
    """Immutable bill waiting for a bill number."""

    category: BillCategory
    party_name: PartyName
    bill_date: date
    items: tuple[BillItem, ...]
    gst: GstBreakdown | None = None
    balance: Money = Money(0)
    party_gst_number: str | None = None
    vehicle_number: str | None = None
    bank_name: str | None = None
    bank_ifsc: str | None = None
    bank_account: str | None = None
    notes: str | None = None

    @property
    def total_amount(self) -> Money:
        """Sum of item amounts (taxable value)."""
        return Money(sum(item.amount for item in self.items))

    @property
    def gst_total(self) -> Money:
        return self.gst.total if self.gst else Money(0)

    @property
    def grand_total(self) -> Money:
        return Money(self.total_amount + self.gst_total + self.balance)

    @property
    def amount_words(self) -> str:
        return paise_to_words(self.grand_total)

    @property
    def financial_year(self) -> FinancialYear:
        return financial_year(self.bill_date)


@dataclass(frozen=True)
class Bill:
    """Immutable bill as stored."""

    id: int
    bill_number: BillNumber
    category: BillCategory
    party_name: PartyName
    bill_date: str
    financial_year: FinancialYear
    total_amount: Money
    gst_total: Money = Money(0)
    cgst_amount: Money = Money(0)
    sgst_amount: Money = Money(0)
    igst_amount: Money = Money(0)
    balance: Money = Money(0)
    party_gst_number: str | None = None
    amount_words: str | None = None
    items: tuple[BillItem, ...] = field(default=())

    @property
    def grand_total(self) -> Money:
        return Money(self.total_amount + self.gst_total + self.balance)

    @property
    def month_number(self) -> int:
        return int(self.bill_date[5:7])


def rupees_to_money(value: str | int | float | Decimal) -> Money:
    """Convert a rupee amount entered by a user to paise.

    Args:
        value: Amount in rupees, e.g. "1250.50".

    Returns:
        Amount in paise, rounded half up.

    Raises:
        InvalidAmount: If the value is not a number, negative, not finite or too large.
    """
    if isinstance(value, str):
        try:
            value = Decimal(value.strip().replace(",", ""))
        except InvalidOperation as e:
            raise InvalidAmount(f"'{value}' is not an amount") from e

    rupees = to_decimal(value)
    try:
        paise = (rupees * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise InvalidAmount(f"Amount {value} is too large") from e
    return Money(int(paise))


def build_item(
    particular: str,
    amount: Money | None = None,
    qty_bags: int | None = None,
    weight_kg: float | None = None,
    rate: Money | None = None,
) -> BillItem:
    """Create a line item, deriving the amount from bags and rate if missing.

    Args:
        particular: Product description.
        amount: Line amount in paise.
        qty_bags: Number of bags.
        weight_kg: Weight in kilograms (informational).
        rate: Rate per bag in paise.

    Returns:
        BillItem.

    Raises:
        InvalidBill: If the item has no description or no way to get an amount.
    """
    particular = particular.strip()
    if not particular:
        raise InvalidBill("Item particular is required")
    if qty_bags is not None and qty_bags < 0:
        raise InvalidBill(f"Bags must not be negative for '{particular}'")
    if weight_kg is not None and weight_kg < 0:
        raise InvalidBill(f"Weight must not be negative for '{particular}'")

    if amount is None and qty_bags is not None and rate is not None:
        amount = Money(qty_bags * rate)
    if amount is None:
        raise InvalidBill(f"Item '{particular}' needs an amount, or bags and rate")
    if amount < 0:
        raise InvalidBill(f"Amount must not be negative for '{particular}'")

    return BillItem(particular=particular, amount=amount, qty_bags=qty_bags, weight_kg=weight_kg, rate=rate)


def _percent(value: Decimal | float | int, name: str) -> Decimal:
    percent = Decimal(str(value))
    if not percent.is_finite() or not 0 <= percent <= 100:
        raise InvalidBill(f"{name} must be between 0 and 100, got {value}")
    return percent


def _tax(taxable: Money, percent: Decimal) -> Money:
    return Money(int((taxable * percent / 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)))


def calculate_gst(
    taxable: Money,
    cgst_percent: Decimal | float | int = 0,
    sgst_percent: Decimal | float | int = 0,
    igst_percent: Decimal | float | int = 0,
) -> GstBreakdown:
    """Calculate GST amounts on a taxable value.

    Each tax is rounded to the nearest paisa on its own.

    Args:
        taxable: Taxable value in paise.
        cgst_percent: Central GST rate.
        sgst_percent: State GST rate.
        igst_percent: Integrated GST rate.

    Returns:
        GstBreakdown.

    Raises:
        InvalidBill: If a rate is outside 0-100.
    """
    cgst = _percent(cgst_percent, "CGST")
    sgst = _percent(sgst_percent, "SGST")
    igst = _percent(igst_percent, "IGST")
    return GstBreakdown(
        cgst_percent=cgst,
        sgst_percent=sgst,
        igst_percent=igst,
        cgst_amount=_tax(taxable, cgst),
        sgst_amount=_tax(taxable, sgst),
        igst_amount=_tax(taxable, igst),
    )


def build_bill(
    category: BillCategory,
    party_name: str,
    bill_date: date,
    items: list[BillItem],
    gst_rates: tuple[Decimal | float, Decimal | float, Decimal | float] | None = None,
    balance: Money = Money(0),
    **details: str | None,
) -> BillDraft:
    """Validate bill input and compute its totals.

    Args:
        category: Kacchi or pakki.
        party_name: Party the bill is raised for (title-cased).
        bill_date: Bill date.
        items: Line items (at least one).
        gst_rates: Optional (cgst, sgst, igst) percentages; pakki bills only.
        balance: Carried balance added to the grand total, in paise.
        **details: Optional party_gst_number, vehicle_number, bank_name,
            bank_ifsc, bank_account and notes.

    Returns:
        BillDraft ready to be numbered and stored.

    Raises:
        InvalidBill: If the input is inconsistent.
    """
    name = " ".join(word.capitalize() for word in party_name.split())
    if not name:
        raise InvalidBill("Party name is required")
    if not items:
        raise InvalidBill("A bill needs at least one item")
    if balance < 0:
        raise InvalidBill("Balance must not be negative")

    unknown = set(details) - {"party_gst_number", "vehicle_number", "bank_name", "bank_ifsc", "bank_account", "notes"}
    if unknown:
        raise InvalidBill(f"Unknown bill fields: {', '.join(sorted(unknown))}")

    cleaned = {key: (value.strip() or None) if value else None for key, value in details.items()}
    if cleaned.get("vehicle_number"):
        cleaned["vehicle_number"] = cleaned["vehicle_number"].upper()

    gst = None
    if gst_rates is not None and any(gst_rates):
        if category is BillCategory.CASH:
            raise InvalidBill("Kacchi bills do not carry GST")
        total = Money(sum(item.amount for item in items))
        gst = calculate_gst(total, *gst_rates)

    if category is BillCategory.CASH:
        # Bank details are only printed on pakki bills
        for key in ("bank_name", "bank_ifsc", "bank_account"):
            cleaned[key] = None

    return BillDraft(
        category=category,
        party_name=PartyName(name),
        bill_date=bill_date,
        items=tuple(items),
        gst=gst,
        balance=balance,
        **cleaned,
    )


def check_edit_keeps_number(bill_number: str, draft: BillDraft) -> None:
    """Check that an edited bill still belongs under its issued number.

    Edits never renumber a bill, so the category must stay the same and a
    financial year number (P/2025-26/003) must keep its date in that year.

    Args:
        bill_number: Number the bill was issued under.
        draft: Edited bill.

    Raises:
        InvalidBill: If the edit would need a different bill number.
    """
    if not bill_number.startswith(draft.category.prefix):
        raise InvalidBill(f"Bill {bill_number} cannot become a {draft.category.label} bill")

    segments = bill_number.split("/")
    if len(segments) == 3 and segments[1] != draft.financial_year:
        raise InvalidBill(f"Bill {bill_number} must stay dated within financial year {segments[1]}")


def bill_from_row(row: dict[str, Any], items: list[dict[str, Any]] | None = None) -> Bill:
    """Build a Bill from a stored row.

    Args:
        row: Bill row as a dictionary.
        items: Optional item rows belonging to the bill.

    Returns:
        Bill.
    """
    return Bill(
        id=row["id"],
        bill_number=BillNumber(row["bill_number"]),
        category=BillCategory(row["bill_type"]),
        party_name=PartyName(row["party_name"]),
        bill_date=row["bill_date"],
        financial_year=FinancialYear(row["financial_year"]),
        total_amount=Money(row["total_amount"]),
        gst_total=Money(row.get("gst_total") or 0),
        cgst_amount=Money(row.get("cgst_amount") or 0),
        sgst_amount=Money(row.get("sgst_amount") or 0),
        igst_amount=Money(row.get("igst_amount") or 0),
        balance=Money(row.get("balance") or 0),
        party_gst_number=row.get("party_gst_number"),
        amount_words=row.get("total_amount_words"),
        items=tuple(
            BillItem(
                particular=item["particular"],
                amount=Money(item["amount"]),
                qty_bags=item.get("qty_bags"),
                weight_kg=item.get("weight_kg"),
                rate=Money(item["rate"]) if item.get("rate") is not None else None,
            )
            for item in items or []
        ),
    )
