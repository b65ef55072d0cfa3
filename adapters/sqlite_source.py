# adapters/sqlite_source.py
from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, List, Optional

from adapters.base import DataSourceError, WritableDataSource
from adapters.rows import listing_from_row, stall_from_row, vendor_from_record
from mpk_core.models import Listing, ListingStatus, Stall, Vendor
from storage.sqlite_store import SQLiteStore

LOGGER = logging.getLogger(__name__)


class SQLiteDataSource(WritableDataSource):
    """Data source over a local SQLiteStore. sqlite3 errors become DataSourceError."""

    def __init__(self, store: SQLiteStore):
        self.store = store

    def fetch_listings(self) -> List[Listing]:
        try:
            rows = self.store.fetch_listing_rows()
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to load listings: {e}") from e
        LOGGER.debug("loaded %d listing rows from %s", len(rows), self.store.db_path)
        return [listing_from_row(r) for r in rows]

    def fetch_stalls(self, vendor_ids: Iterable[str]) -> List[Stall]:
        try:
            rows = self.store.stalls_for_vendors(vendor_ids)
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to load stalls: {e}") from e
        return [stall_from_row(r) for r in rows]

    def fetch_vendor(self, vendor_id: str) -> Optional[Vendor]:
        try:
            rec = self.store.get_vendor(vendor_id)
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to load vendor {vendor_id}: {e}") from e
        return vendor_from_record(rec) if rec else None

    def fetch_vendor_listings(self, vendor_id: str) -> List[Listing]:
        try:
            rows = self.store.fetch_listing_rows(vendor_id=vendor_id)
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to load listings for {vendor_id}: {e}") from e
        return [listing_from_row(r) for r in rows]

    # ---------- listing management ----------
    def fetch_listing(self, listing_id: str) -> Optional[Listing]:
        try:
            rows = self.store.fetch_listing_rows(listing_id=listing_id)
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to load listing {listing_id}: {e}") from e
        return listing_from_row(rows[0]) if rows else None

    def find_or_create_product(self, name: str, category: Optional[str] = None) -> str:
        try:
            pid = self.store.find_product_id(name)
            if pid is None:
                pid = self.store.insert_product(name, category=category)
                LOGGER.info("created product %s (%s)", name, pid)
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to save product {name!r}: {e}") from e
        return pid

    def insert_listing(
        self,
        vendor_id: str,
        product_id: str,
        price: float,
        uom: str,
        status: ListingStatus,
    ) -> str:
        try:
            return self.store.insert_listing(
                vendor_id, product_id, price=price, uom=uom, status=status.value
            )
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to create listing: {e}") from e

    def update_listing(
        self,
        listing_id: str,
        product_id: str,
        price: float,
        uom: str,
        status: ListingStatus,
    ) -> bool:
        try:
            return self.store.update_listing(listing_id, product_id, price, uom, status.value)
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to update listing {listing_id}: {e}") from e

    def set_listing_status(self, listing_id: str, status: ListingStatus) -> bool:
        try:
            return self.store.update_listing_status(listing_id, status.value)
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to update listing {listing_id}: {e}") from e

    def delete_listing(self, listing_id: str) -> bool:
        try:
            return self.store.delete_listing(listing_id)
        except sqlite3.Error as e:
            raise DataSourceError(f"failed to delete listing {listing_id}: {e}") from e
