"""Bill book and CA report commands."""

import logging
import sqlite3
import sys
from datetime import date
from pathlib import Path

import pandas as pd
from rich.console import Console
from rich.table import Table

from billbook.commands.bills import render_company
from billbook.config import get_company, load_config
from billbook.dates import financial_year, month_range, parse_financial_year
from billbook.domain.amount_words import format_inr
from billbook.domain.bills import Bill, bill_from_row
from billbook.domain.models import BillCategory, FinancialYear
from billbook.domain.report import bill_book_rows, group_by_month, party_breakdown, summarize_bills
from billbook.store.queries import get_bills
from billbook.store.schema import get_db_path

console = Console()
logger = logging.getLogger(__name__)


def load_period_bills(
    db_path: Path,
    year: FinancialYear,
    month: int | None,
    category: BillCategory | None,
) -> list[Bill]:
    """Load the bills of a financial year (or one of its months).

    Args:
        db_path: Path to database.
        year: Financial year.
        month: Optional calendar month.
        category: Optional bill category; None means both.

    Returns:
        Bills ordered by date, then entry order.
    """
    rows = get_bills(db_path, category=category, financial_year=year, month=month)
    return [bill_from_row(row) for row in rows]


def resolve_period(
    year: str | None, month: int | None, category: str | None
) -> tuple[FinancialYear, int | None, BillCategory | None, str]:
    """Validate report filters and build a period label.

    Args:
        year: Financial year (YYYY-YY) or None for the current one.
        month: Optional calendar month (1-12).
        category: kacchi, pakki, both or None.

    Returns:
        Tuple of (financial_year, month, category, label).

    Raises:
        ValueError: If a filter is invalid.
    """
    fy = FinancialYear(year) if year else financial_year(date.today())
    parse_financial_year(fy)

    bill_category = None
    if category and category.lower() != "both":
        bill_category = BillCategory.parse(category)

    type_label = f"{bill_category.label} " if bill_category else ""
    if month is not None:
        _, _, month_label = month_range(fy, month)
        label = f"{type_label}Bills - {month_label} (FY {fy})"
    else:
        label = f"{type_label}Bills - FY {fy}"
    return fy, month, bill_category, label


def export_csv(bills: list[Bill], output: str) -> None:
    """Write bills to a CSV file."""
    output_path = Path(output).expanduser()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(bill_book_rows(bills)).to_csv(output_path, index=False)
    logger.info("Exported %d bills to %s", len(bills), output_path)
    console.print(f"[green]✓[/green] Exported {len(bills)} bills to: {output_path}")


def book_command(
    year: str | None = None,
    month: int | None = None,
    category: str | None = None,
    output: str | None = None,
) -> None:
    """Show the bill book of a financial year, month by month."""
    db_path = get_db_path()

    try:
        fy, month, bill_category, label = resolve_period(year, month, category)
        bills = load_period_bills(db_path, fy, month, bill_category)

        if not bills:
            console.print(f"[yellow]No bills found for {label}[/yellow]")
            return

        render_company(get_company(load_config()))
        console.print(f"\n[bold]Bill Book: {label}[/bold]\n")

        for group in group_by_month(bills):
            _, _, month_label = month_range(fy, group.month)
            table = Table(title=month_label)
            table.add_column("Bill No.", style="bold red")
            table.add_column("Date", style="cyan")
            table.add_column("Party", style="white")
            table.add_column("Taxable", justify="right")
            table.add_column("GST", justify="right")
            table.add_column("Grand Total", justify="right", style="green")

            for bill in group.bills:
                table.add_row(
                    bill.bill_number,
                    bill.bill_date,
                    bill.party_name,
                    format_inr(bill.total_amount),
                    format_inr(bill.gst_total) if bill.gst_total else "[dim]-[/dim]",
                    format_inr(bill.grand_total),
                )
            table.add_section()
            table.add_row(
                "", "", f"[bold]{len(group.bills)} bills[/bold]", "", "", f"[bold]{format_inr(group.total)}[/bold]"
            )
            console.print(table)

        if output:
            export_csv(bills, output)

    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Export failed: {e}[/red]", style="bold")
        sys.exit(1)


def ca_report_command(
    year: str | None = None,
    month: int | None = None,
    category: str | None = None,
    output: str | None = None,
) -> None:
    """Show the CA summary: totals, GST breakdown and party-wise totals."""
    db_path = get_db_path()

    try:
        fy, month, bill_category, label = resolve_period(year, month, category)
        bills = load_period_bills(db_path, fy, month, bill_category)

        if not bills:
            console.print(f"[yellow]No bills found for {label}[/yellow]")
            return

        summary = summarize_bills(bills)
        render_company(get_company(load_config()))
        console.print(f"\n[bold]CA Report: {label}[/bold]\n")
        console.print(f"  {'Total bills':20} {summary.total_bills:>16}")
        console.print(f"  {'Taxable value':20} {format_inr(summary.total_taxable):>16}")
        console.print(f"  {'CGST':20} {format_inr(summary.total_cgst):>16}")
        console.print(f"  {'SGST':20} {format_inr(summary.total_sgst):>16}")
        console.print(f"  {'IGST':20} {format_inr(summary.total_igst):>16}")
        console.print(f"  {'Total GST':20} {format_inr(summary.total_gst):>16}")
        if summary.total_balance:
            console.print(f"  {'Balances':20} {format_inr(summary.total_balance):>16}")
        console.print(f"  [bold]{'Grand total':20} {format_inr(summary.grand_total):>16}[/bold]\n")

        table = Table(title="Party-wise Summary")
        table.add_column("Party", style="white")
        table.add_column("GST No.", style="dim")
        table.add_column("Bills", justify="right")
        table.add_column("Taxable", justify="right")
        table.add_column("GST", justify="right")
        table.add_column("Total", justify="right", style="green")

        for party in party_breakdown(bills):
            table.add_row(
                party.party_name,
                party.gst_number or "-",
                str(party.bills),
                format_inr(party.taxable),
                format_inr(party.gst),
                format_inr(party.total),
            )
        console.print(table)

        if output:
            export_csv(bills, output)

    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Export failed: {e}[/red]", style="bold")
        sys.exit(1)
