"""
Tests for the SQLite store.
"""
import sqlite3

import pytest

from adapters.base import DataSourceError
from adapters.sqlite_source import SQLiteDataSource
from mpk_core.models import ListingStatus
from storage.schema import DEFAULT_CATEGORIES, SCHEMA_VERSION
from storage.sqlite_store import SQLiteStore, get_schema_version, table_exists


@pytest.fixture
def store(tmp_path):
    s = SQLiteStore(str(tmp_path / "t.sqlite"))
    s.ensure_schema()
    yield s
    s.close()


def test_ensure_schema_is_repeatable(store):
    again = store.ensure_schema()
    assert again["tables_created"] == 0
    assert again["categories_seeded"] == 0
    assert get_schema_version(store.conn) == SCHEMA_VERSION
    for t in ("vendor_profiles", "products", "vendor_products", "stalls"):
        assert table_exists(store.conn, t)


def test_default_categories(store):
    assert store.get_stats()["product_categories"] == len(DEFAULT_CATEGORIES)
    assert store.get_category_id("fish") == "fish"
    assert store.insert_category("Fish") == "fish"


def test_load_seed_counts(seeded_store, seed_data):
    stats = seeded_store.get_stats()
    assert stats["vendor_profiles"] == len(seed_data["vendors"])
    assert stats["vendor_products"] == len(seed_data["listings"])
    assert stats["stalls"] == len(seed_data["stalls"])


def test_fetch_listing_rows_shape(store):
    vid = store.insert_vendor("Aling Nena", "0917", stall_number="F-1")
    pid = store.insert_product("Tilapia", category="Fish")
    store.insert_listing(vid, pid, price=140, uom="kg", status="Active")

    rows = store.fetch_listing_rows()
    assert len(rows) == 1
    row = rows[0]
    assert row["status"] == "Active"
    assert row["vendor_profiles"]["business_name"] == "Aling Nena"
    assert row["vendor_profiles"]["stall_number"] == "F-1"
    assert row["products"]["product_categories"] == {"name": "Fish"}


def test_product_without_category(store):
    vid = store.insert_vendor("V")
    pid = store.insert_product("Mystery")
    store.insert_listing(vid, pid)
    assert store.fetch_listing_rows()[0]["products"]["product_categories"] is None


def test_fetch_listing_rows_for_vendor(seeded_store):
    rows = seeded_store.fetch_listing_rows(vendor_id="v-karne-ni-juan")
    assert len(rows) == 4
    assert {r["vendor_id"] for r in rows} == {"v-karne-ni-juan"}


def test_update_listing_status(store):
    vid = store.insert_vendor("V")
    pid = store.insert_product("Bangus")
    lid = store.insert_listing(vid, pid, status="available")
    assert store.update_listing_status(lid, "unavailable") is True
    assert store.fetch_listing_rows()[0]["status"] == "unavailable"
    assert store.update_listing_status("missing", "available") is False


def test_stall_replaced_per_vendor(store):
    vid = store.insert_vendor("V")
    store.insert_stall(vid, "F-1", "old")
    store.insert_stall(vid, "F-2", "new")
    stalls = store.stalls_for_vendors([vid])
    assert stalls == [
        {"vendor_profile_id": vid, "stall_number": "F-2", "location_description": "new"}
    ]
    assert store.stalls_for_vendors([]) == []


def test_duplicate_vendor_id_rejected(store):
    store.insert_vendor("V", vendor_id="dup")
    with pytest.raises(sqlite3.IntegrityError):
        store.insert_vendor("W", vendor_id="dup")


def test_sqlite_source_wraps_errors(store):
    source = SQLiteDataSource(store)
    store.conn.execute("DROP TABLE stalls")
    with pytest.raises(DataSourceError) as exc:
        source.fetch_stalls(["x"])
    assert exc.value.retryable is True


def test_sqlite_source_reads_vendor(seeded_store):
    source = SQLiteDataSource(seeded_store)
    vendor = source.fetch_vendor("v-gulayan")
    assert vendor.business_name == "Gulayan ni Rosa"
    assert vendor.complete_address == "Vegetable row, north wing"
    assert source.fetch_vendor("nope") is None
    assert len(source.fetch_listings()) == 10


def test_find_product_id_is_exact(seeded_store):
    assert seeded_store.find_product_id("Tilapia") == "p-tilapia"
    assert seeded_store.find_product_id("tilapia") is None
    assert seeded_store.find_product_id("Galunggong") is None


def test_update_and_delete_listing(seeded_store):
    assert seeded_store.update_listing("l-tilapia", "p-bangus", 99.5, "kg", "unavailable")
    (row,) = seeded_store.fetch_listing_rows(listing_id="l-tilapia")
    assert (row["products"]["name"], row["price"], row["status"]) == ("Bangus", 99.5, "unavailable")
    assert seeded_store.update_listing("missing", "p-bangus", 1, "kg", "available") is False

    assert seeded_store.delete_listing("l-tilapia") is True
    assert seeded_store.fetch_listing_rows(listing_id="l-tilapia") == []
    assert seeded_store.delete_listing("l-tilapia") is False


def test_fetch_listing_rows_filters_combine(seeded_store):
    assert len(seeded_store.fetch_listing_rows(vendor_id="v-karne-ni-juan", listing_id="l-chop")) == 1
    assert seeded_store.fetch_listing_rows(vendor_id="v-aling-nena", listing_id="l-chop") == []


def test_sqlite_source_listing_writes(seeded_store):
    source = SQLiteDataSource(seeded_store)
    pid = source.find_or_create_product("Tahong", category="Fish")
    assert source.find_or_create_product("Tahong") == pid
    lid = source.insert_listing("v-aling-nena", pid, 90.0, "kg", ListingStatus.UNAVAILABLE)
    li = source.fetch_listing(lid)
    assert (li.vendor_id, li.product.category_name, li.is_available) == ("v-aling-nena", "Fish", False)
    assert source.set_listing_status(lid, ListingStatus.AVAILABLE) is True
    assert source.fetch_listing(lid).is_available
    assert source.delete_listing(lid) is True
    assert source.fetch_listing(lid) is None
