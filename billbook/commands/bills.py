"""Commands for creating, editing, listing, showing and deleting bills."""

import logging
import sqlite3
import sys
from datetime import date
from decimal import Decimal

import typer
from rich.console import Console
from rich.table import Table

from billbook.commands.numbers import make_sequencer, normalize_bill_date, report_skipped
from billbook.config import get_company, get_max_number_attempts, load_config
from billbook.dates import parse_financial_year
from billbook.domain.amount_words import format_inr
from billbook.domain.bill_numbers import SequenceResult, issue_bill_number
from billbook.domain.bills import (
    Bill,
    BillItem,
    bill_from_row,
    build_bill,
    build_item,
    check_edit_keeps_number,
    rupees_to_money,
)
from billbook.domain.errors import BillbookError, DuplicateBillNumber, InvalidBill
from billbook.domain.models import BillCategory, FinancialYear, Money
from billbook.store.queries import delete_bill, get_bill, get_bill_items, get_bills, insert_bill, update_bill
from billbook.store.schema import database_exists, get_db_path

console = Console()
logger = logging.getLogger(__name__)

ITEM_FIELDS = ("particular", "bags", "weight", "rate", "amount")


def parse_item_option(spec: str) -> BillItem:
    """Parse an --item option.

    The format is PARTICULAR[:BAGS[:WEIGHT_KG[:RATE[:AMOUNT]]]] with rupee
    rate and amount; empty fields are allowed. When AMOUNT is empty it is
    BAGS x RATE.

    Examples:
        "Kolhapuri:10:500:1200" -> 10 bags at ₹1,200 = ₹12,000
        "PADDY::::4500.50" -> amount only

    Args:
        spec: Option value.

    Returns:
        BillItem.

    Raises:
        InvalidBill: If the item cannot be parsed.
    """
    parts = spec.split(":")
    if len(parts) > len(ITEM_FIELDS):
        raise InvalidBill(f"Too many fields in item '{spec}' (expected {':'.join(ITEM_FIELDS)})")
    fields = dict(zip(ITEM_FIELDS, [p.strip() for p in parts] + [""] * (len(ITEM_FIELDS) - len(parts))))

    try:
        qty_bags = int(fields["bags"]) if fields["bags"] else None
        weight_kg = float(fields["weight"]) if fields["weight"] else None
    except ValueError as e:
        raise InvalidBill(f"Invalid bags or weight in item '{spec}'") from e

    rate = rupees_to_money(fields["rate"]) if fields["rate"] else None
    amount = rupees_to_money(fields["amount"]) if fields["amount"] else None

    return build_item(fields["particular"], amount=amount, qty_bags=qty_bags, weight_kg=weight_kg, rate=rate)


def render_company(company: dict[str, str], show_gst: bool = True) -> None:
    """Print the company header configured in the [company] block."""
    if not company["name"]:
        return
    console.print(f"[bold]{company['name']}[/bold]")
    if company["address"]:
        console.print(company["address"])
    if show_gst and company["gst"]:
        console.print(f"GSTIN: {company['gst']}")


def render_bill(bill: Bill, company: dict[str, str] | None = None) -> None:
    """Print a bill with its items and totals."""
    if company:
        # Kacchi bills carry no GST, so the company GSTIN is left off them
        render_company(company, show_gst=bill.category is BillCategory.CREDIT)
    console.print(f"\n[bold]{bill.category.label} Bill {bill.bill_number}[/bold]")
    console.print(f"[dim]Date: {bill.bill_date} | Financial year: {bill.financial_year}[/dim]")
    party = bill.party_name
    if bill.party_gst_number:
        party += f" (GST {bill.party_gst_number})"
    console.print(f"Party: [cyan]{party}[/cyan]\n")

    table = Table()
    table.add_column("#", justify="right", style="dim")
    table.add_column("Particular", style="white")
    table.add_column("Bags", justify="right")
    table.add_column("Weight (kg)", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Amount", justify="right", style="green")

    for i, item in enumerate(bill.items, 1):
        table.add_row(
            str(i),
            item.particular,
            str(item.qty_bags) if item.qty_bags is not None else "-",
            f"{item.weight_kg:g}" if item.weight_kg is not None else "-",
            format_inr(item.rate) if item.rate is not None else "-",
            format_inr(item.amount),
        )
    console.print(table)

    console.print(f"  {'Total':20} {format_inr(bill.total_amount):>16}")
    if bill.gst_total:
        for name, amount in (("CGST", bill.cgst_amount), ("SGST", bill.sgst_amount), ("IGST", bill.igst_amount)):
            if amount:
                console.print(f"  {name:20} {format_inr(amount):>16}")
    if bill.balance:
        console.print(f"  {'Balance':20} {format_inr(bill.balance):>16}")
    console.print(f"  [bold]{'Grand total':20} {format_inr(bill.grand_total):>16}[/bold]")
    if bill.amount_words:
        console.print(f"\n[italic]{bill.amount_words}[/italic]")
    if company and company["jurisdiction"]:
        console.print(f"[dim]Subject to {company['jurisdiction']} jurisdiction[/dim]")


def create_command(
    category: str,
    party: str,
    items: list[str],
    bill_date: str | None = None,
    cgst: float = 0.0,
    sgst: float = 0.0,
    igst: float = 0.0,
    balance: str | None = None,
    party_gst: str | None = None,
    vehicle: str | None = None,
    bank_name: str | None = None,
    bank_ifsc: str | None = None,
    bank_account: str | None = None,
    notes: str | None = None,
) -> None:
    """Create a bill and assign it the next bill number."""
    db_path = get_db_path()

    if not database_exists(db_path):
        console.print("[red]Database not found. Run 'billbook init' first.[/red]", style="bold")
        sys.exit(1)

    try:
        config = load_config()
        bill_category = BillCategory.parse(category)
        draft = build_bill(
            bill_category,
            party,
            normalize_bill_date(bill_date),
            [parse_item_option(spec) for spec in items],
            gst_rates=(cgst, sgst, igst),
            balance=rupees_to_money(balance) if balance else Money(0),
            party_gst_number=party_gst,
            vehicle_number=vehicle,
            bank_name=bank_name,
            bank_ifsc=bank_ifsc,
            bank_account=bank_account,
            notes=notes,
        )

        def insert(result: SequenceResult) -> int:
            report_skipped(result)
            try:
                return insert_bill(draft, result.bill_number, db_path)
            except DuplicateBillNumber:
                logger.warning("Bill number %s was taken before insert, retrying", result.bill_number)
                raise

        result, bill_id = issue_bill_number(
            make_sequencer(db_path, config),
            bill_category,
            draft.bill_date,
            insert,
            get_max_number_attempts(config),
        )
        logger.info("Created bill %s (id %d)", result.bill_number, bill_id)

        console.print(f"[green]✓[/green] Created bill [bold]{result.bill_number}[/bold]")
        row = get_bill(result.bill_number, db_path)
        if row:
            render_bill(bill_from_row(row, get_bill_items(bill_id, db_path)), get_company(config))

    except DuplicateBillNumber as e:
        console.print(f"[red]{e}. Another bill was created at the same time; please try again.[/red]", style="bold")
        sys.exit(1)
    except (BillbookError, ValueError) as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def edit_command(
    bill_number: str,
    party: str | None = None,
    items: list[str] | None = None,
    bill_date: str | None = None,
    cgst: float | None = None,
    sgst: float | None = None,
    igst: float | None = None,
    balance: str | None = None,
    party_gst: str | None = None,
    vehicle: str | None = None,
    bank_name: str | None = None,
    bank_ifsc: str | None = None,
    bank_account: str | None = None,
    notes: str | None = None,
) -> None:
    """Edit a bill in place, keeping its bill number.

    Options that are not given keep their stored value. Giving --item
    replaces all items. Totals and the amount in words are recalculated.
    """
    db_path = get_db_path()
    number = bill_number.strip().upper()

    if not database_exists(db_path):
        console.print("[red]Database not found. Run 'billbook init' first.[/red]", style="bold")
        sys.exit(1)

    try:
        row = get_bill(number, db_path)
        if row is None:
            console.print(f"[red]Bill {number} not found[/red]", style="bold")
            sys.exit(1)

        stored = bill_from_row(row, get_bill_items(row["id"], db_path))
        new_items = [parse_item_option(spec) for spec in items] if items else list(stored.items)
        gst_rates = (
            Decimal(str(cgst)) if cgst is not None else Decimal(row["cgst_percent"]),
            Decimal(str(sgst)) if sgst is not None else Decimal(row["sgst_percent"]),
            Decimal(str(igst)) if igst is not None else Decimal(row["igst_percent"]),
        )
        overrides = {
            "party_gst_number": party_gst,
            "vehicle_number": vehicle,
            "bank_name": bank_name,
            "bank_ifsc": bank_ifsc,
            "bank_account": bank_account,
            "notes": notes,
        }
        details = {key: value if value is not None else row[key] for key, value in overrides.items()}

        draft = build_bill(
            stored.category,
            party or stored.party_name,
            normalize_bill_date(bill_date) if bill_date else date.fromisoformat(stored.bill_date),
            new_items,
            gst_rates=gst_rates,
            balance=rupees_to_money(balance) if balance else stored.balance,
            **details,
        )
        check_edit_keeps_number(number, draft)

        if not update_bill(number, draft, db_path):
            console.print(f"[red]Bill {number} not found[/red]", style="bold")
            sys.exit(1)
        logger.info("Edited bill %s", number)

        console.print(f"[green]✓[/green] Updated bill [bold]{number}[/bold]")
        updated = get_bill(number, db_path)
        if updated:
            render_bill(bill_from_row(updated, get_bill_items(updated["id"], db_path)), get_company(load_config()))

    except (BillbookError, ValueError) as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def list_command(
    category: str | None = None,
    financial_year: str | None = None,
    party: str | None = None,
    limit: int = 50,
    all: bool = False,
) -> None:
    """List bills."""
    db_path = get_db_path()

    try:
        bill_category = BillCategory.parse(category) if category else None
        if financial_year:
            parse_financial_year(financial_year)
        actual_limit = None if all else limit
        rows = get_bills(
            db_path,
            category=bill_category,
            financial_year=FinancialYear(financial_year) if financial_year else None,
            party=party,
            limit=actual_limit,
        )

        if not rows:
            console.print("[yellow]No bills found[/yellow]")
            return

        title = f"Bills (showing all {len(rows)})" if all else f"Bills (showing {len(rows)})"
        table = Table(title=title)
        table.add_column("Bill No.", style="bold red")
        table.add_column("Date", style="cyan")
        table.add_column("Type", style="magenta")
        table.add_column("Party", style="white")
        table.add_column("GST", justify="right")
        table.add_column("Grand Total", justify="right", style="green")

        for row in rows:
            bill = bill_from_row(row)
            gst_display = format_inr(bill.gst_total) if bill.gst_total else "[dim]-[/dim]"
            table.add_row(
                bill.bill_number,
                bill.bill_date,
                bill.category.label,
                bill.party_name,
                gst_display,
                format_inr(bill.grand_total),
            )

        console.print(table)

    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def show_command(bill_number: str) -> None:
    """Show one bill."""
    db_path = get_db_path()

    try:
        row = get_bill(bill_number.strip().upper(), db_path)
        if row is None:
            console.print(f"[red]Bill {bill_number} not found[/red]", style="bold")
            sys.exit(1)

        render_bill(bill_from_row(row, get_bill_items(row["id"], db_path)), get_company(load_config()))

    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def delete_command(bill_number: str, yes: bool = False) -> None:
    """Delete a bill."""
    db_path = get_db_path()
    number = bill_number.strip().upper()

    try:
        if not yes and not typer.confirm(f"Delete bill {number}?", default=False):
            console.print("[dim]Cancelled[/dim]")
            return

        if delete_bill(number, db_path):
            logger.info("Deleted bill %s", number)
            console.print(f"[green]✓[/green] Deleted bill {number}")
        else:
            console.print(f"[red]Bill {number} not found[/red]", style="bold")
            sys.exit(1)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
