# storage/schema.py
"""
Database schema definitions for the Mapalengke directory.

The tables mirror the hosted backend's: product_categories, products,
vendor_profiles, vendor_products (the vendor x product listing) and stalls.

Schema version history:
  v1: Directory tables
"""
from __future__ import annotations

SCHEMA_VERSION = 1

# =============================================================================
# Core Tables
# =============================================================================

CREATE_PRODUCT_CATEGORIES = """
CREATE TABLE IF NOT EXISTS product_categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE
);
"""

CREATE_PRODUCTS = """
CREATE TABLE IF NOT EXISTS products (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT DEFAULT '',
    category_id TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (category_id) REFERENCES product_categories(id) ON DELETE SET NULL
);
"""

CREATE_VENDOR_PROFILES = """
CREATE TABLE IF NOT EXISTS vendor_profiles (
    id TEXT PRIMARY KEY,
    business_name TEXT NOT NULL,
    phone_number TEXT,
    stall_number TEXT,
    complete_address TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_VENDOR_PRODUCTS = """
CREATE TABLE IF NOT EXISTS vendor_products (
    id TEXT PRIMARY KEY,
    vendor_id TEXT NOT NULL,
    product_id TEXT NOT NULL,
    price REAL,
    uom TEXT,
    status TEXT NOT NULL DEFAULT 'available',
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (vendor_id) REFERENCES vendor_profiles(id) ON DELETE CASCADE,
    FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE CASCADE
);
"""

CREATE_STALLS = """
CREATE TABLE IF NOT EXISTS stalls (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    vendor_profile_id TEXT UNIQUE,
    stall_number TEXT NOT NULL,
    location_description TEXT,
    FOREIGN KEY (vendor_profile_id) REFERENCES vendor_profiles(id) ON DELETE SET NULL
);
"""

# Schema version tracking
CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT
);
"""

# =============================================================================
# Indexes
# =============================================================================

CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_products_category_id ON products(category_id);",
    "CREATE INDEX IF NOT EXISTS idx_vendor_products_vendor_id ON vendor_products(vendor_id);",
    "CREATE INDEX IF NOT EXISTS idx_vendor_products_status ON vendor_products(status);",
    "CREATE INDEX IF NOT EXISTS idx_stalls_vendor ON stalls(vendor_profile_id);",
]

# Order matters for foreign keys
ALL_TABLES = [
    ("schema_version", CREATE_SCHEMA_VERSION),
    ("product_categories", CREATE_PRODUCT_CATEGORIES),
    ("products", CREATE_PRODUCTS),
    ("vendor_profiles", CREATE_VENDOR_PROFILES),
    ("vendor_products", CREATE_VENDOR_PRODUCTS),
    ("stalls", CREATE_STALLS),
]

# Product categories the vendor screens offer
DEFAULT_CATEGORIES = [
    ("fish", "Fish"),
    ("dried-fish", "Dried Fish"),
    ("meat", "Meat"),
    ("pork", "Pork"),
    ("beef", "Beef"),
    ("chicken", "Chicken"),
    ("vegetables-fruits", "Vegetables & Fruits"),
    ("rice-grain", "Rice & Grain"),
    ("grocery", "Grocery"),
]
