"""Commands for amounts in words and bill numbers."""

import logging
import sqlite3
import sys
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd
from rich.console import Console

from billbook.config import get_numbering_modes, load_config
from billbook.domain.amount_words import format_inr, paise_to_words
from billbook.domain.bill_numbers import BillNumberSequencer, SequenceResult, display_bill_number
from billbook.domain.bills import rupees_to_money
from billbook.domain.errors import BillbookError
from billbook.domain.models import BillCategory
from billbook.store.queries import get_issued_bill_numbers
from billbook.store.schema import database_exists, get_db_path

console = Console()
logger = logging.getLogger(__name__)


def normalize_bill_date(raw_date: str | None) -> date:
    """Parse a bill date typed by a user.

    Uses pandas.to_datetime with day-first parsing, so both 2025-05-15 and
    15/05/2025 work. An empty value means today.

    Args:
        raw_date: Raw date string.

    Returns:
        Parsed date.

    Raises:
        ValueError: If date cannot be parsed.
    """
    if not raw_date:
        return date.today()
    try:
        return pd.to_datetime(raw_date, dayfirst=True).date()
    except (ValueError, pd.errors.ParserError) as e:
        raise ValueError(f"Could not parse date '{raw_date}': {e}") from e


def make_sequencer(db_path: Path, config: dict[str, Any]) -> BillNumberSequencer:
    """Build a sequencer reading issued numbers from the database."""
    return BillNumberSequencer(
        lambda query: get_issued_bill_numbers(query, db_path),
        get_numbering_modes(config),
    )


def report_skipped(result: SequenceResult) -> None:
    """Warn about stored bill numbers that could not be parsed."""
    for raw in result.skipped:
        logger.warning("Ignoring malformed %s bill number %r", result.category.label, raw)
    if result.skipped:
        console.print(
            f"[yellow]Ignored {len(result.skipped)} malformed {result.category.label} bill number(s)[/yellow]"
        )


def words_command(amount: str) -> None:
    """Print an amount in words."""
    try:
        money = rupees_to_money(amount)
        console.print(f"[cyan]{format_inr(money)}[/cyan]")
        console.print(paise_to_words(money))
    except BillbookError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)


def next_number_command(category: str, bill_date: str | None = None) -> None:
    """Print the bill number the next bill of a category would get."""
    db_path = get_db_path()

    if not database_exists(db_path):
        console.print("[red]Database not found. Run 'billbook init' first.[/red]", style="bold")
        sys.exit(1)

    try:
        bill_category = BillCategory.parse(category)
        reference_date = normalize_bill_date(bill_date)
        sequencer = make_sequencer(db_path, load_config())
        result = sequencer.next_bill_number(bill_category, reference_date)
        report_skipped(result)

        mode = sequencer.mode_for(bill_category).value
        console.print(f"[green]{result.bill_number}[/green] [dim]({bill_category.label}, {mode} numbering)[/dim]")

    except (BillbookError, ValueError) as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def format_number_command(category: str, raw: str) -> None:
    """Print a stored bill number in display form."""
    try:
        console.print(display_bill_number(BillCategory.parse(category), raw))
    except (BillbookError, ValueError) as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
