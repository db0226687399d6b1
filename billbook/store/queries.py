"""Database query functions."""

import sqlite3
from pathlib import Path
from typing import Any

from billbook.domain.bill_numbers import BillNumberQuery
from billbook.domain.bills import BillDraft
from billbook.domain.errors import DuplicateBillNumber
from billbook.domain.models import BillCategory, BillNumber, FinancialYear
from billbook.store.schema import get_db_path

BILL_COLUMNS = (
    "id, bill_number, bill_type, party_name, party_gst_number, bill_date, financial_year, month_number, "
    "total_amount, total_amount_words, balance, is_gst_enabled, cgst_percent, sgst_percent, igst_percent, "
    "cgst_amount, sgst_amount, igst_amount, gst_total, vehicle_number, bank_name, bank_ifsc, bank_account, "
    "notes, created_at"
)

# Columns written from a BillDraft; bill_number is set once on insert
BILL_WRITE_COLUMNS = (
    "bill_type",
    "party_name",
    "party_gst_number",
    "bill_date",
    "financial_year",
    "month_number",
    "total_amount",
    "total_amount_words",
    "balance",
    "is_gst_enabled",
    "cgst_percent",
    "sgst_percent",
    "igst_percent",
    "cgst_amount",
    "sgst_amount",
    "igst_amount",
    "gst_total",
    "vehicle_number",
    "bank_name",
    "bank_ifsc",
    "bank_account",
    "notes",
)


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection with row factory.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection with row_factory and foreign keys configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_issued_bill_numbers(query: BillNumberQuery, db_path: Path | None = None) -> list[str]:
    """Get issued bill numbers in a numbering scope.

    Args:
        query: Category and optional financial year to look in.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Bill numbers of the category starting with the query prefix (may be empty).

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT bill_number FROM bills WHERE bill_type = ? AND substr(bill_number, 1, ?) = ?",
            (query.category.value, len(query.prefix), query.prefix),
        )
        return [row[0] for row in cursor.fetchall()]


def _bill_values(draft: BillDraft) -> tuple[Any, ...]:
    """Column values of a bill, in BILL_WRITE_COLUMNS order."""
    gst = draft.gst
    return (
        draft.category.value,
        draft.party_name,
        draft.party_gst_number,
        draft.bill_date.isoformat(),
        draft.financial_year,
        draft.bill_date.month,
        draft.total_amount,
        draft.amount_words,
        draft.balance,
        1 if gst else 0,
        str(gst.cgst_percent) if gst else "0",
        str(gst.sgst_percent) if gst else "0",
        str(gst.igst_percent) if gst else "0",
        gst.cgst_amount if gst else 0,
        gst.sgst_amount if gst else 0,
        gst.igst_amount if gst else 0,
        draft.gst_total,
        draft.vehicle_number,
        draft.bank_name,
        draft.bank_ifsc,
        draft.bank_account,
        draft.notes,
    )


def _insert_items(cursor: sqlite3.Cursor, bill_id: int, draft: BillDraft) -> None:
    cursor.executemany(
        "INSERT INTO bill_items (bill_id, particular, qty_bags, weight_kg, rate, amount) VALUES (?, ?, ?, ?, ?, ?)",
        [(bill_id, item.particular, item.qty_bags, item.weight_kg, item.rate, item.amount) for item in draft.items],
    )


def insert_bill(draft: BillDraft, bill_number: BillNumber, db_path: Path | None = None) -> int:
    """Insert a bill and its items in one transaction.

    Args:
        draft: Validated bill.
        bill_number: Number assigned to the bill.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        ID of the new bill.

    Raises:
        DuplicateBillNumber: If the bill number is already taken.
        sqlite3.Error: If database operation fails.
    """
    columns = ", ".join(("bill_number", *BILL_WRITE_COLUMNS))
    placeholders = ", ".join("?" for _ in range(len(BILL_WRITE_COLUMNS) + 1))
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                f"INSERT INTO bills ({columns}) VALUES ({placeholders})",
                (bill_number, *_bill_values(draft)),
            )
            bill_id = cursor.lastrowid
            assert bill_id is not None

            _insert_items(cursor, bill_id, draft)
            conn.commit()
            return bill_id
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "bills.bill_number" in str(e):
                raise DuplicateBillNumber(bill_number) from e
            raise
        except sqlite3.Error:
            conn.rollback()
            raise


def update_bill(bill_number: str, draft: BillDraft, db_path: Path | None = None) -> bool:
    """Replace the contents of an issued bill, keeping its number.

    The bill row and all of its items are rewritten in one transaction.

    Args:
        bill_number: Bill number as issued.
        draft: Validated new contents of the bill.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        True if the bill was updated, False if no bill has that number.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    assignments = ", ".join(f"{column} = ?" for column in BILL_WRITE_COLUMNS)
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT id FROM bills WHERE bill_number = ?", (bill_number,))
            row = cursor.fetchone()
            if row is None:
                return False
            bill_id = row["id"]

            cursor.execute(f"UPDATE bills SET {assignments} WHERE id = ?", (*_bill_values(draft), bill_id))
            cursor.execute("DELETE FROM bill_items WHERE bill_id = ?", (bill_id,))
            _insert_items(cursor, bill_id, draft)
            conn.commit()
            return True
        except sqlite3.Error:
            conn.rollback()
            raise


def get_bills(
    db_path: Path | None = None,
    category: BillCategory | None = None,
    financial_year: FinancialYear | None = None,
    month: int | None = None,
    party: str | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Get bills, oldest first.

    Args:
        db_path: Path to the database file. If None, uses default location.
        category: Optional bill category filter.
        financial_year: Optional financial year filter (YYYY-YY).
        month: Optional calendar month filter (1-12).
        party: Optional case-insensitive substring of the party name.
        limit: Maximum number of bills to return (the most recent ones). If None, returns all.

    Returns:
        List of bill dictionaries ordered by date, then entry order.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        query = f"SELECT {BILL_COLUMNS} FROM bills WHERE 1 = 1"
        params: list[Any] = []

        if category is not None:
            query += " AND bill_type = ?"
            params.append(category.value)
        if financial_year is not None:
            query += " AND financial_year = ?"
            params.append(financial_year)
        if month is not None:
            query += " AND month_number = ?"
            params.append(month)
        if party:
            query += " AND party_name LIKE ?"
            params.append(f"%{party}%")

        query += " ORDER BY bill_date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor.execute(query, params)
        rows = [dict(row) for row in cursor.fetchall()]
        rows.reverse()
        return rows


def get_bill(bill_number: str, db_path: Path | None = None) -> dict[str, Any] | None:
    """Get a bill by its number.

    Args:
        bill_number: Bill number as issued.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Bill dictionary or None if not found.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT {BILL_COLUMNS} FROM bills WHERE bill_number = ?", (bill_number,))
        row = cursor.fetchone()
        return dict(row) if row else None


def get_bill_items(bill_id: int, db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get the items of a bill in entry order.

    Args:
        bill_id: Bill ID.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        List of item dictionaries.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, particular, qty_bags, weight_kg, rate, amount FROM bill_items WHERE bill_id = ? ORDER BY id",
            (bill_id,),
        )
        return [dict(row) for row in cursor.fetchall()]


def delete_bill(bill_number: str, db_path: Path | None = None) -> bool:
    """Delete a bill and its items.

    Bill numbers of deleted bills can be issued again only if they were the
    highest in their scope.

    Args:
        bill_number: Bill number as issued.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        True if a bill was deleted, False if none matched.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM bills WHERE bill_number = ?", (bill_number,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise
