"""Admin commands for init, backup and numbering configuration."""

import shutil
import sqlite3
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console

from billbook.config import (
    create_default_config,
    get_config_path,
    get_numbering_modes,
    load_config,
    set_numbering_mode,
)
from billbook.domain.bill_numbers import NumberingMode
from billbook.domain.models import BillCategory
from billbook.store.queries import get_bills
from billbook.store.schema import database_exists, get_db_path, init_database

console = Console()


def backup_command(
    output_dir: str | None = None,
) -> None:
    """Backup database and configuration files."""
    db_path = get_db_path()
    config_path = get_config_path()

    if not db_path.exists():
        console.print("[red]Database not found. Run 'billbook init' first.[/red]", style="bold")
        sys.exit(1)

    if output_dir:
        backup_dir = Path(output_dir).expanduser()
    else:
        backup_dir = Path.home() / ".billbook" / "backups"

    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    db_backup = backup_dir / f"billbook_{timestamp}.db"
    config_backup = backup_dir / f"config_{timestamp}.toml"

    try:
        shutil.copy2(db_path, db_backup)
        console.print(f"[green]✓[/green] Database backed up to: {db_backup}")

        if config_path.exists():
            shutil.copy2(config_path, config_backup)
            console.print(f"[green]✓[/green] Config backed up to: {config_backup}")

        console.print("\n[green]Backup complete![/green]", style="bold")
        console.print(f"[dim]Backup directory: {backup_dir}[/dim]")

    except OSError as e:
        console.print(f"[red]Backup failed: {e}[/red]", style="bold")
        sys.exit(1)


def run_migration(db_path: Path) -> None:
    """Run database migrations on existing database."""
    console.print(f"[cyan]Running migrations on {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Migrations complete")
    console.print("[dim]Database schema is up to date[/dim]")


def run_full_init(db_path: Path, config_path: Path) -> None:
    """Initialize new database and config."""
    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Database initialized")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")


def init_command(force: bool = False, migrate: bool = False) -> None:
    """Initialize billbook database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        if migrate:
            if not db_exists:
                console.print("[red]No database found to migrate[/red]", style="bold")
                console.print(f"[dim]Expected location: {db_path}[/dim]")
                sys.exit(1)
            run_migration(db_path)
            return

        # Guard: refuse to overwrite without force flag
        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'billbook init --force' to overwrite[/yellow]")
            console.print("[yellow]Or 'billbook init --migrate' to update database schema only[/yellow]")
            sys.exit(1)

        if force and db_exists:
            db_path.unlink()

        run_full_init(db_path, config_path)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def numbering_command(category: str | None = None, mode: str | None = None) -> None:
    """Show or change how bill numbers are sequenced."""
    try:
        if category and mode:
            bill_category = BillCategory.parse(category)
            numbering_mode = NumberingMode(mode)

            # Switching modes on a category with bills would mix formats
            if database_exists() and get_bills(category=bill_category, limit=1):
                current = get_numbering_modes(load_config())[bill_category]
                if current is not numbering_mode:
                    console.print(
                        f"[red]{bill_category.label} bills already exist with {current.value} numbering; "
                        "the mode cannot be changed[/red]",
                        style="bold",
                    )
                    sys.exit(1)

            set_numbering_mode(bill_category, numbering_mode)
            console.print(f"[green]✓[/green] {bill_category.label} bills use {numbering_mode.value} numbering")
            return

        if category or mode:
            console.print("[red]Give both a category and a mode[/red]", style="bold")
            sys.exit(1)

        for bill_category, numbering_mode in get_numbering_modes(load_config()).items():
            console.print(f"  {bill_category.label:8} {numbering_mode.value}")

    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)
