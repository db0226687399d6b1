"""CLI entry point for billbook."""

import logging

import typer
from rich.logging import RichHandler

from billbook.commands.admin import backup_command, init_command, numbering_command
from billbook.commands.bills import create_command, delete_command, edit_command, list_command, show_command
from billbook.commands.numbers import format_number_command, next_number_command, words_command
from billbook.commands.report import book_command, ca_report_command

app = typer.Typer(
    name="billbook",
    help="Billbook - kacchi and pakki bills for a trading company",
    add_completion=False,
)


def configure_logging(verbose: bool) -> None:
    """Send log records to the terminal through rich."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log messages"),
) -> None:
    """Billbook - kacchi and pakki bills for a trading company."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
    migrate: bool = typer.Option(False, "--migrate", help="Update the database schema only"),
) -> None:
    """Initialize billbook database and configuration."""
    init_command(force, migrate)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: ~/.billbook/backups)"),
) -> None:
    """Backup your database and configuration files."""
    backup_command(output_dir)


@app.command(name="numbering")
def numbering(
    category: str = typer.Argument(None, help="kacchi or pakki"),
    mode: str = typer.Argument(None, help="'global' or 'financial-year'"),
) -> None:
    """Show or set the bill numbering mode of each bill type."""
    numbering_command(category, mode)


@app.command(name="words")
def words(amount: str) -> None:
    """Spell an amount in rupees (e.g. 1234567.89)."""
    words_command(amount)


@app.command(name="next-number")
def next_number(
    category: str = typer.Argument(..., help="kacchi or pakki"),
    bill_date: str = typer.Option(None, "--date", help="Bill date (default: today)"),
) -> None:
    """Show the number the next bill would get."""
    next_number_command(category, bill_date)


@app.command(name="format-number")
def format_number(
    category: str = typer.Argument(..., help="kacchi or pakki"),
    raw: str = typer.Argument(..., help="Stored bill number, e.g. 7, K7 or P/2025-26/3"),
) -> None:
    """Show a stored bill number in display form."""
    format_number_command(category, raw)


@app.command(name="create")
def create(
    category: str = typer.Argument(..., help="kacchi or pakki"),
    party: str = typer.Option(..., "--party", "-p", help="Party name"),
    items: list[str] = typer.Option(
        ..., "--item", "-i", help="PARTICULAR[:BAGS[:WEIGHT_KG[:RATE[:AMOUNT]]]], repeatable"
    ),
    bill_date: str = typer.Option(None, "--date", help="Bill date (default: today)"),
    cgst: float = typer.Option(0.0, "--cgst", help="CGST percent (pakki only)"),
    sgst: float = typer.Option(0.0, "--sgst", help="SGST percent (pakki only)"),
    igst: float = typer.Option(0.0, "--igst", help="IGST percent (pakki only)"),
    balance: str = typer.Option(None, "--balance", help="Previous balance to add (in ₹)"),
    party_gst: str = typer.Option(None, "--party-gst", help="Party GST number"),
    vehicle: str = typer.Option(None, "--vehicle", help="Vehicle number"),
    bank_name: str = typer.Option(None, "--bank-name", help="Bank name (pakki only)"),
    bank_ifsc: str = typer.Option(None, "--bank-ifsc", help="Bank IFSC (pakki only)"),
    bank_account: str = typer.Option(None, "--bank-account", help="Bank account number (pakki only)"),
    notes: str = typer.Option(None, "--notes", help="Notes printed on the bill"),
) -> None:
    """Create a bill with the next bill number."""
    create_command(
        category,
        party,
        items,
        bill_date,
        cgst,
        sgst,
        igst,
        balance,
        party_gst,
        vehicle,
        bank_name,
        bank_ifsc,
        bank_account,
        notes,
    )


@app.command(name="edit")
def edit(
    bill_number: str = typer.Argument(..., help="Bill number, e.g. K007 or P/2025-26/003"),
    party: str = typer.Option(None, "--party", "-p", help="Party name"),
    items: list[str] = typer.Option(
        None, "--item", "-i", help="Replace all items: PARTICULAR[:BAGS[:WEIGHT_KG[:RATE[:AMOUNT]]]], repeatable"
    ),
    bill_date: str = typer.Option(None, "--date", help="Bill date"),
    cgst: float = typer.Option(None, "--cgst", help="CGST percent (pakki only)"),
    sgst: float = typer.Option(None, "--sgst", help="SGST percent (pakki only)"),
    igst: float = typer.Option(None, "--igst", help="IGST percent (pakki only)"),
    balance: str = typer.Option(None, "--balance", help="Previous balance to add (in ₹)"),
    party_gst: str = typer.Option(None, "--party-gst", help="Party GST number"),
    vehicle: str = typer.Option(None, "--vehicle", help="Vehicle number"),
    bank_name: str = typer.Option(None, "--bank-name", help="Bank name (pakki only)"),
    bank_ifsc: str = typer.Option(None, "--bank-ifsc", help="Bank IFSC (pakki only)"),
    bank_account: str = typer.Option(None, "--bank-account", help="Bank account number (pakki only)"),
    notes: str = typer.Option(None, "--notes", help="Notes printed on the bill"),
) -> None:
    """Edit a bill, keeping its bill number. Options not given stay unchanged."""
    edit_command(
        bill_number,
        party,
        items,
        bill_date,
        cgst,
        sgst,
        igst,
        balance,
        party_gst,
        vehicle,
        bank_name,
        bank_ifsc,
        bank_account,
        notes,
    )


@app.command(name="list")
def list_bills(
    category: str = typer.Option(None, "--type", "-t", help="kacchi or pakki"),
    year: str = typer.Option(None, "--year", "-y", help="Financial year (YYYY-YY)"),
    party: str = typer.Option(None, "--party", "-p", help="Filter by party name"),
    limit: int = typer.Option(50, help="Maximum bills to show"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all bills"),
) -> None:
    """List your bills."""
    list_command(category, year, party, limit, all)


@app.command()
def show(bill_number: str) -> None:
    """Show a bill with its items and amount in words."""
    show_command(bill_number)


@app.command()
def delete(
    bill_number: str,
    yes: bool = typer.Option(False, "--yes", help="Don't ask for confirmation"),
) -> None:
    """Delete a bill."""
    delete_command(bill_number, yes)


@app.command(name="book")
def book(
    year: str = typer.Option(None, "--year", "-y", help="Financial year (YYYY-YY, default: current)"),
    month: int = typer.Option(None, "--month", "-m", min=1, max=12, help="Calendar month (1-12)"),
    category: str = typer.Option(None, "--type", "-t", help="kacchi, pakki or both"),
    output: str = typer.Option(None, "--output", "-o", help="Also export to this CSV file"),
) -> None:
    """Show the monthly or yearly bill book."""
    book_command(year, month, category, output)


@app.command(name="ca-report")
def ca_report(
    year: str = typer.Option(None, "--year", "-y", help="Financial year (YYYY-YY, default: current)"),
    month: int = typer.Option(None, "--month", "-m", min=1, max=12, help="Calendar month (1-12)"),
    category: str = typer.Option(None, "--type", "-t", help="kacchi, pakki or both"),
    output: str = typer.Option(None, "--output", "-o", help="Also export to this CSV file"),
) -> None:
    """Show the CA summary report with GST and party-wise totals."""
    ca_report_command(year, month, category, output)


if __name__ == "__main__":
    app()
