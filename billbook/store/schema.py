"""Database schema initialization and migrations."""

import os
import sqlite3
from pathlib import Path


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "billbook" / "billbook.db"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def init_database(db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    Bill numbers are UNIQUE: concurrent creations that compute the same next
    number fail on insert instead of issuing a duplicate invoice.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS bills (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                bill_number TEXT NOT NULL UNIQUE,
                bill_type TEXT NOT NULL CHECK (bill_type IN ('kacchi', 'pakki')),
                party_name TEXT NOT NULL,
                party_gst_number TEXT,
                bill_date TEXT NOT NULL,
                financial_year TEXT NOT NULL,
                month_number INTEGER NOT NULL,
                total_amount INTEGER NOT NULL,
                balance INTEGER NOT NULL DEFAULT 0,
                is_gst_enabled INTEGER NOT NULL DEFAULT 0,
                cgst_percent TEXT NOT NULL DEFAULT '0',
                sgst_percent TEXT NOT NULL DEFAULT '0',
                igst_percent TEXT NOT NULL DEFAULT '0',
                cgst_amount INTEGER NOT NULL DEFAULT 0,
                sgst_amount INTEGER NOT NULL DEFAULT 0,
                igst_amount INTEGER NOT NULL DEFAULT 0,
                gst_total INTEGER NOT NULL DEFAULT 0,
                vehicle_number TEXT,
                bank_name TEXT,
                bank_ifsc TEXT,
                bank_account TEXT,
                notes TEXT,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS bill_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                bill_id INTEGER NOT NULL REFERENCES bills(id) ON DELETE CASCADE,
                particular TEXT NOT NULL,
                qty_bags INTEGER,
                weight_kg REAL,
                rate INTEGER,
                amount INTEGER NOT NULL
            )
        """
        )

        # Migrations for older databases (must run before creating indexes on new columns)
        cursor.execute("PRAGMA table_info(bills)")
        columns = [row[1] for row in cursor.fetchall()]

        # Migration: Add 'total_amount_words' column if missing
        if "total_amount_words" not in columns:
            cursor.execute("ALTER TABLE bills ADD COLUMN total_amount_words TEXT")

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_bill_type_year ON bills(bill_type, financial_year)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_bill_date ON bills(bill_date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_bill_party ON bills(party_name)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_item_bill ON bill_items(bill_id)")

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
