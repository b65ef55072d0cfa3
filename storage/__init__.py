# storage/__init__.py
"""
Storage layer for the Mapalengke directory.

Provides SQLite-based persistence for vendors, products, listings
and stalls.
"""

from .sqlite_store import (
    SQLiteStore,
    open_conn,
    ensure_schema,
    get_schema_version,
    table_exists,
    generate_id,
)

from .schema import (
    SCHEMA_VERSION,
    DEFAULT_CATEGORIES,
)

__all__ = [
    # Main class
    "SQLiteStore",
    # Schema info
    "SCHEMA_VERSION",
    "DEFAULT_CATEGORIES",
    # Functions
    "open_conn",
    "ensure_schema",
    "get_schema_version",
    "table_exists",
    "generate_id",
]
