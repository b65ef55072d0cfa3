# storage/sqlite_store.py
"""
SQLite storage layer for the Mapalengke directory.

Provides CRUD operations for:
- Product categories and products
- Vendor profiles
- Vendor listings (vendor_products)
- Stalls

fetch_listing_rows() returns rows in the same nested join shape the hosted
backend delivers, so the same normalizer handles both.
"""
from __future__ import annotations

import re
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .schema import ALL_TABLES, CREATE_INDEXES, DEFAULT_CATEGORIES, SCHEMA_VERSION


def open_conn(path: str = "data/mapalengke.sqlite") -> sqlite3.Connection:
    """Open a database connection with row factory."""
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def generate_id() -> str:
    """Generate a unique row ID."""
    return str(uuid.uuid4())[:12]


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")


def table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    """Check if a table exists."""
    cur = conn.cursor()
    cur.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table_name,),
    )
    return cur.fetchone() is not None


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version, or 0 if not initialized."""
    if not table_exists(conn, "schema_version"):
        return 0
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] if row and row[0] else 0


def ensure_schema(conn: sqlite3.Connection, seed_categories: bool = True) -> Dict[str, Any]:
    """Create any missing tables and indexes. Safe to call repeatedly."""
    result: Dict[str, Any] = {"tables_created": 0, "categories_seeded": 0}
    cur = conn.cursor()
    for name, ddl in ALL_TABLES:
        if not table_exists(conn, name):
            cur.execute(ddl)
            result["tables_created"] += 1
    for ddl in CREATE_INDEXES:
        cur.execute(ddl)

    if seed_categories:
        for cid, name in DEFAULT_CATEGORIES:
            cur.execute(
                "INSERT OR IGNORE INTO product_categories (id, name) VALUES (?, ?)",
                (cid, name),
            )
            result["categories_seeded"] += cur.rowcount

    if get_schema_version(conn) < SCHEMA_VERSION:
        cur.execute(
            "INSERT OR REPLACE INTO schema_version (version, applied_at) VALUES (?, ?)",
            (SCHEMA_VERSION, datetime.utcnow().isoformat()),
        )
    conn.commit()
    result["version"] = SCHEMA_VERSION
    return result


class SQLiteStore:
    """
    Main storage class.
    Provides typed CRUD for categories, products, vendors, listings and stalls.
    """

    def __init__(self, db_path: str = "data/mapalengke.sqlite"):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = open_conn(self.db_path)
        return self._conn

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def ensure_schema(self) -> Dict[str, Any]:
        """Ensure database has current schema."""
        return ensure_schema(self.conn)

    def get_stats(self) -> Dict[str, int]:
        """Get row counts for all tables."""
        stats: Dict[str, int] = {}
        for name, _ in ALL_TABLES:
            if name == "schema_version":
                continue
            if table_exists(self.conn, name):
                row = self.conn.execute(f"SELECT COUNT(*) FROM {name}").fetchone()
                stats[name] = row[0]
            else:
                stats[name] = -1
        return stats

    # =========================================================================
    # Category / Product Operations
    # =========================================================================

    def insert_category(self, name: str, category_id: Optional[str] = None) -> str:
        """Insert a category (no-op when the name exists). Returns its ID."""
        existing = self.get_category_id(name)
        if existing:
            return existing
        cid = category_id or slugify(name) or generate_id()
        self.conn.execute(
            "INSERT INTO product_categories (id, name) VALUES (?, ?)", (cid, name)
        )
        self.conn.commit()
        return cid

    def get_category_id(self, name: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT id FROM product_categories WHERE lower(name) = lower(?)", (name,)
        ).fetchone()
        return row["id"] if row else None

    def insert_product(
        self,
        name: str,
        category: Optional[str] = None,
        description: str = "",
        product_id: Optional[str] = None,
    ) -> str:
        """Insert a product; `category` is a category name. Returns the product ID."""
        pid = product_id or generate_id()
        category_id = self.insert_category(category) if category else None
        self.conn.execute(
            "INSERT INTO products (id, name, description, category_id) VALUES (?, ?, ?, ?)",
            (pid, name, description or "", category_id),
        )
        self.conn.commit()
        return pid

    def find_product_id(self, name: str) -> Optional[str]:
        """ID of the first product with exactly this name, or None."""
        row = self.conn.execute(
            "SELECT id FROM products WHERE name = ? ORDER BY rowid LIMIT 1", (name,)
        ).fetchone()
        return row["id"] if row else None

    # =========================================================================
    # Vendor Operations
    # =========================================================================

    def insert_vendor(
        self,
        business_name: str,
        phone_number: Optional[str] = None,
        stall_number: Optional[str] = None,
        complete_address: Optional[str] = None,
        vendor_id: Optional[str] = None,
    ) -> str:
        """Insert a vendor profile. Returns the vendor ID."""
        vid = vendor_id or generate_id()
        self.conn.execute(
            """
            INSERT INTO vendor_profiles (
                id, business_name, phone_number, stall_number, complete_address
            ) VALUES (?, ?, ?, ?, ?)
            """,
            (vid, business_name, phone_number, stall_number, complete_address),
        )
        self.conn.commit()
        return vid

    def get_vendor(self, vendor_id: str) -> Optional[Dict[str, Any]]:
        """Get vendor profile by ID."""
        row = self.conn.execute(
            """
            SELECT id, business_name, phone_number, stall_number, complete_address
            FROM vendor_profiles WHERE id = ?
            """,
            (vendor_id,),
        ).fetchone()
        return dict(row) if row else None

    # =========================================================================
    # Listing Operations
    # =========================================================================

    def insert_listing(
        self,
        vendor_id: str,
        product_id: str,
        price: Optional[float] = None,
        uom: Optional[str] = None,
        status: str = "available",
        listing_id: Optional[str] = None,
    ) -> str:
        """Insert a vendor_products row. Status is stored as given."""
        lid = listing_id or generate_id()
        self.conn.execute(
            """
            INSERT INTO vendor_products (id, vendor_id, product_id, price, uom, status)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (lid, vendor_id, product_id, price, uom, status),
        )
        self.conn.commit()
        return lid

    def update_listing_status(self, listing_id: str, status: str) -> bool:
        """Update a listing's status. Returns True if updated."""
        cur = self.conn.execute(
            "UPDATE vendor_products SET status = ?, updated_at = ? WHERE id = ?",
            (status, datetime.utcnow().isoformat(), listing_id),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def update_listing(
        self,
        listing_id: str,
        product_id: str,
        price: Optional[float],
        uom: Optional[str],
        status: str,
    ) -> bool:
        """Replace a listing's product, price, unit and status. Returns True if updated."""
        cur = self.conn.execute(
            """
            UPDATE vendor_products
            SET product_id = ?, price = ?, uom = ?, status = ?, updated_at = ?
            WHERE id = ?
            """,
            (product_id, price, uom, status, datetime.utcnow().isoformat(), listing_id),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def delete_listing(self, listing_id: str) -> bool:
        """Delete a listing. Returns True if a row was removed."""
        cur = self.conn.execute("DELETE FROM vendor_products WHERE id = ?", (listing_id,))
        self.conn.commit()
        return cur.rowcount > 0

    def fetch_listing_rows(
        self, vendor_id: Optional[str] = None, listing_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        All listings (or one vendor's, or a single listing) as nested join rows:
        {id, vendor_id, status, price, uom, vendor_profiles: {...},
         products: {..., product_categories: {name} | None}}
        """
        clauses: List[str] = []
        params: List[Any] = []
        if vendor_id:
            clauses.append("vp.vendor_id = ?")
            params.append(vendor_id)
        if listing_id:
            clauses.append("vp.id = ?")
            params.append(listing_id)
        where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
        cur = self.conn.execute(
            f"""
            SELECT
                vp.id, vp.vendor_id, vp.status, vp.price, vp.uom,
                v.business_name, v.phone_number, v.stall_number, v.complete_address,
                p.id AS product_id, p.name AS product_name, p.description,
                p.category_id, c.name AS category_name
            FROM vendor_products vp
            JOIN vendor_profiles v ON v.id = vp.vendor_id
            JOIN products p ON p.id = vp.product_id
            LEFT JOIN product_categories c ON c.id = p.category_id
            {where}
            ORDER BY vp.rowid
            """,
            params,
        )
        return [self._nest_row(row) for row in cur.fetchall()]

    @staticmethod
    def _nest_row(row: sqlite3.Row) -> Dict[str, Any]:
        category = {"name": row["category_name"]} if row["category_name"] else None
        return {
            "id": row["id"],
            "vendor_id": row["vendor_id"],
            "status": row["status"],
            "price": row["price"],
            "uom": row["uom"],
            "vendor_profiles": {
                "id": row["vendor_id"],
                "business_name": row["business_name"],
                "phone_number": row["phone_number"],
                "stall_number": row["stall_number"],
                "complete_address": row["complete_address"],
            },
            "products": {
                "id": row["product_id"],
                "name": row["product_name"],
                "description": row["description"],
                "category_id": row["category_id"],
                "product_categories": category,
            },
        }

    # =========================================================================
    # Stall Operations
    # =========================================================================

    def insert_stall(
        self,
        vendor_id: Optional[str],
        stall_number: str,
        location_description: Optional[str] = None,
    ) -> int:
        """Insert or replace the stall record for a vendor."""
        cur = self.conn.execute(
            """
            INSERT OR REPLACE INTO stalls (vendor_profile_id, stall_number, location_description)
            VALUES (?, ?, ?)
            """,
            (vendor_id, stall_number, location_description),
        )
        self.conn.commit()
        return cur.lastrowid

    def stalls_for_vendors(self, vendor_ids: Iterable[str]) -> List[Dict[str, Any]]:
        ids = list(vendor_ids)
        if not ids:
            return []
        marks = ", ".join("?" for _ in ids)
        cur = self.conn.execute(
            f"""
            SELECT vendor_profile_id, stall_number, location_description
            FROM stalls WHERE vendor_profile_id IN ({marks})
            """,
            ids,
        )
        return [dict(row) for row in cur.fetchall()]

    # =========================================================================
    # Seeding
    # =========================================================================

    def load_seed(self, data: Dict[str, Any]) -> Dict[str, int]:
        """
        Load a seed document:
          categories: [name | {id, name}]
          products:   [{id, name, category, description}]
          vendors:    [{id, business_name, phone_number, stall_number, complete_address}]
          listings:   [{id, vendor_id, product_id, price, uom, status}]
          stalls:     [{vendor_id, stall_number, location_description}]
        Returns counts per section.
        """
        counts = {k: 0 for k in ("categories", "products", "vendors", "listings", "stalls")}

        for c in data.get("categories", []) or []:
            if isinstance(c, dict):
                self.insert_category(c["name"], category_id=c.get("id"))
            else:
                self.insert_category(str(c))
            counts["categories"] += 1

        for p in data.get("products", []) or []:
            self.insert_product(
                p["name"],
                category=p.get("category"),
                description=p.get("description", ""),
                product_id=p.get("id"),
            )
            counts["products"] += 1

        for v in data.get("vendors", []) or []:
            self.insert_vendor(
                v["business_name"],
                phone_number=v.get("phone_number"),
                stall_number=v.get("stall_number"),
                complete_address=v.get("complete_address"),
                vendor_id=v.get("id"),
            )
            counts["vendors"] += 1

        for li in data.get("listings", []) or []:
            self.insert_listing(
                li["vendor_id"],
                li["product_id"],
                price=li.get("price"),
                uom=li.get("uom"),
                status=li.get("status", "available"),
                listing_id=li.get("id"),
            )
            counts["listings"] += 1

        for s in data.get("stalls", []) or []:
            self.insert_stall(
                s.get("vendor_id", s.get("vendor_profile_id")),
                s["stall_number"],
                s.get("location_description"),
            )
            counts["stalls"] += 1

        return counts
