"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

# Re-export schema functions
# Re-export all query functions
from billbook.store.queries import (
    delete_bill,
    get_bill,
    get_bill_items,
    get_bills,
    get_issued_bill_numbers,
    insert_bill,
    update_bill,
)
from billbook.store.schema import database_exists, get_db_path, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "delete_bill",
    "get_bill",
    "get_bill_items",
    "get_bills",
    "get_issued_bill_numbers",
    "insert_bill",
    "update_bill",
]
