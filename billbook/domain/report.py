"""Pure functions for bill book and CA report aggregations.

This module contains the functional core for reporting operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in paise (Money type).
"""

from dataclasses import dataclass

from billbook.dates import FINANCIAL_YEAR_MONTHS
from billbook.domain.bills import Bill
from billbook.domain.models import Money, PartyName


@dataclass(frozen=True)
class ReportSummary:
    """Immutable totals over a set of bills."""

    total_bills: int
    total_taxable: Money
    total_cgst: Money
    total_sgst: Money
    total_igst: Money
    total_gst: Money
    total_balance: Money
    grand_total: Money


@dataclass(frozen=True)
class PartyTotal:
    """Immutable totals for one party."""

    party_name: PartyName
    gst_number: str | None
    bills: int
    taxable: Money
    gst: Money
    total: Money


@dataclass(frozen=True)
class MonthGroup:
    """Immutable bill book section for one month."""

    month: int
    bills: list[Bill]
    total: Money


def summarize_bills(bills: list[Bill]) -> ReportSummary:
    """Calculate CA report totals.

    Args:
        bills: Bills in the report period.

    Returns:
        ReportSummary (all zeros for no bills).
    """
    return ReportSummary(
        total_bills=len(bills),
        total_taxable=Money(sum(b.total_amount for b in bills)),
        total_cgst=Money(sum(b.cgst_amount for b in bills)),
        total_sgst=Money(sum(b.sgst_amount for b in bills)),
        total_igst=Money(sum(b.igst_amount for b in bills)),
        total_gst=Money(sum(b.gst_total for b in bills)),
        total_balance=Money(sum(b.balance for b in bills)),
        grand_total=Money(sum(b.grand_total for b in bills)),
    )


def party_breakdown(bills: list[Bill]) -> list[PartyTotal]:
    """Total bills per party, largest first.

    Parties are matched case-insensitively; the first spelling seen is kept.

    Args:
        bills: Bills in the report period.

    Returns:
        List of PartyTotal sorted by total descending, then name.
    """
    totals: dict[str, dict] = {}
    for bill in bills:
        key = bill.party_name.casefold()
        entry = totals.setdefault(
            key,
            {"party_name": bill.party_name, "gst_number": None, "bills": 0, "taxable": 0, "gst": 0, "total": 0},
        )
        entry["gst_number"] = entry["gst_number"] or bill.party_gst_number
        entry["bills"] += 1
        entry["taxable"] += bill.total_amount
        entry["gst"] += bill.gst_total
        entry["total"] += bill.grand_total

    parties = [
        PartyTotal(
            party_name=PartyName(e["party_name"]),
            gst_number=e["gst_number"],
            bills=e["bills"],
            taxable=Money(e["taxable"]),
            gst=Money(e["gst"]),
            total=Money(e["total"]),
        )
        for e in totals.values()
    ]
    return sorted(parties, key=lambda p: (-p.total, p.party_name))


def group_by_month(bills: list[Bill]) -> list[MonthGroup]:
    """Group bills into bill book sections, April first.

    Within a month, bills are ordered by date then entry order. Months with
    no bills are left out.

    Args:
        bills: Bills of one financial year.

    Returns:
        List of MonthGroup in financial year order.
    """
    by_month: dict[int, list[Bill]] = {}
    for bill in bills:
        by_month.setdefault(bill.month_number, []).append(bill)

    groups = []
    for month in FINANCIAL_YEAR_MONTHS:
        month_bills = sorted(by_month.get(month, []), key=lambda b: (b.bill_date, b.id))
        if month_bills:
            groups.append(
                MonthGroup(month=month, bills=month_bills, total=Money(sum(b.grand_total for b in month_bills)))
            )
    return groups


def bill_book_rows(bills: list[Bill]) -> list[dict[str, object]]:
    """Flatten bills into rows for a bill book export.

    Amounts are converted to rupees.

    Args:
        bills: Bills to export.

    Returns:
        List of row dictionaries, one per bill.
    """
    return [
        {
            "bill_number": b.bill_number,
            "bill_type": b.category.value,
            "bill_date": b.bill_date,
            "party_name": b.party_name,
            "party_gst_number": b.party_gst_number or "",
            "taxable": b.total_amount / 100,
            "cgst": b.cgst_amount / 100,
            "sgst": b.sgst_amount / 100,
            "igst": b.igst_amount / 100,
            "gst_total": b.gst_total / 100,
            "balance": b.balance / 100,
            "grand_total": b.grand_total / 100,
            "amount_in_words": b.amount_words or "",
        }
        for b in bills
    ]
