# directory/service.py
"""
Directory service: the category, vendor and dashboard queries behind the
customer and vendor views.
"""
from __future__ import annotations

import logging
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Union

from adapters.base import BaseDataSource, DataSourceError, WritableDataSource
from directory.aggregator import aggregate, apply_stalls, profile_stall
from directory.rules import DEFAULT_CONFIG, compile_rules
from directory.sorting import sort_vendors
from mpk_core.models import (
    Listing,
    ListingStatus,
    Session,
    Stall,
    VendorDashboard,
    VendorDetails,
    VendorSummary,
)

LOGGER = logging.getLogger(__name__)


class DirectoryService:
    """Answers directory queries against a data source using category rules."""

    def __init__(
        self,
        source: BaseDataSource,
        rules_path: Optional[str] = None,
        default_location: Optional[str] = None,
    ):
        self.source = source
        self.default_location = default_location
        self.cfg = DEFAULT_CONFIG
        if rules_path:
            p = Path(rules_path)
            if p.exists():
                with open(p, "r", encoding="utf-8") as f:
                    loaded = yaml.safe_load(f)
                if isinstance(loaded, dict):
                    self.cfg = loaded
                else:
                    LOGGER.warning(
                        "rules file %s is not a mapping; using built-in categories", p
                    )
            else:
                LOGGER.warning("rules file %s not found; using built-in categories", p)
        self.rules = compile_rules(self.cfg)

    def category_names(self) -> List[str]:
        return self.rules.names()

    def _stalls_for(self, vendor_ids: List[str]) -> List[Stall]:
        """Stall records, or [] when the lookup fails (profile fields still apply)."""
        if not vendor_ids:
            return []
        try:
            return self.source.fetch_stalls(vendor_ids)
        except DataSourceError as e:
            LOGGER.warning("stall lookup failed, continuing without it: %s", e)
            return []

    def vendors_by_category(self, category: str, sort: str = "alpha") -> List[VendorSummary]:
        """Vendors selling in `category`, sorted by `sort` (alpha | stall)."""
        listings = self.source.fetch_listings()
        summaries = aggregate(
            listings, category, rules=self.rules, default_location=self.default_location
        )
        # Stall-table records win over the profile fields aggregate() fell back to.
        apply_stalls(summaries, self._stalls_for(list(summaries)), vendors={})
        LOGGER.info("%s: %d vendors", category, len(summaries))
        return sort_vendors(summaries.values(), sort)

    def category_overview(self) -> Dict[str, int]:
        """Number of vendors per configured category."""
        listings = self.source.fetch_listings()
        return {
            name: len(aggregate(listings, name, rules=self.rules))
            for name in self.rules.names()
        }

    def _vendor_stall(self, vendor_id: str, vendor) -> Optional[Stall]:
        for stall in self._stalls_for([vendor_id]):
            if stall.vendor_id == vendor_id:
                return stall
        return profile_stall(vendor, self.default_location)

    def vendor_details(self, vendor_id: str, search: Optional[str] = None) -> VendorDetails:
        """
        Vendor profile, stall and available listings.
        `search` keeps listings whose product name contains it (case-insensitive).
        """
        vendor = self.source.fetch_vendor(vendor_id)
        if vendor is None:
            raise LookupError(f"vendor not found: {vendor_id}")

        listings: List[Listing] = [
            li for li in self.source.fetch_vendor_listings(vendor_id) if li.is_available
        ]
        query = (search or "").strip().lower()
        if query:
            listings = [li for li in listings if query in li.product.name.lower()]

        return VendorDetails(
            vendor=vendor,
            stall=self._vendor_stall(vendor_id, vendor),
            listings=listings,
        )

    def vendor_dashboard(self, session: Session) -> VendorDashboard:
        """All of the signed-in vendor's listings with active/inactive counts."""
        vendor = self.source.fetch_vendor(session.vendor_id)
        if vendor is None:
            raise LookupError(f"vendor not found: {session.vendor_id}")
        return VendorDashboard(
            session=session,
            vendor=vendor,
            stall=self._vendor_stall(session.vendor_id, vendor),
            listings=self.source.fetch_vendor_listings(session.vendor_id),
        )

    # ---------- vendor listing management ----------
    def _writer(self) -> WritableDataSource:
        if not isinstance(self.source, WritableDataSource):
            raise DataSourceError(
                f"{type(self.source).__name__} is read-only", retryable=False
            )
        return self.source

    def _own_listing(self, session: Session, listing_id: str) -> Listing:
        listing = self._writer().fetch_listing(listing_id)
        if listing is None:
            raise LookupError(f"listing not found: {listing_id}")
        if listing.vendor_id != session.vendor_id:
            raise PermissionError(
                f"listing {listing_id} does not belong to vendor {session.vendor_id}"
            )
        return listing

    def save_listing(
        self,
        session: Session,
        name: str,
        price: Union[float, str, None],
        uom: Optional[str],
        status: Union[ListingStatus, str] = ListingStatus.AVAILABLE,
        listing_id: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Listing:
        """
        Create a listing for the signed-in vendor, or update one it owns.

        The product is looked up by exact name and created (under `category`)
        when missing. Name, price and unit of measure are required.
        """
        name = (name or "").strip()
        uom = (uom or "").strip()
        if not name or price is None or price == "" or not uom:
            raise ValueError("product name, price and unit of measure are required")
        try:
            amount = float(price)
        except (TypeError, ValueError):
            raise ValueError(f"price must be a number, got {price!r}")
        if amount < 0:
            raise ValueError(f"price must not be negative, got {amount}")
        state = _as_status(status)

        writer = self._writer()
        if listing_id:
            self._own_listing(session, listing_id)
        product_id = writer.find_or_create_product(name, category=category)
        if listing_id:
            writer.update_listing(listing_id, product_id, amount, uom, state)
            LOGGER.info("vendor %s updated listing %s (%s)", session.vendor_id, listing_id, name)
        else:
            listing_id = writer.insert_listing(session.vendor_id, product_id, amount, uom, state)
            LOGGER.info("vendor %s created listing %s (%s)", session.vendor_id, listing_id, name)

        saved = writer.fetch_listing(listing_id)
        if saved is None:
            raise DataSourceError(f"listing {listing_id} vanished after save")
        return saved

    def set_listing_status(
        self, session: Session, listing_id: str, status: Union[ListingStatus, str]
    ) -> Listing:
        """Mark one of the signed-in vendor's listings available or unavailable."""
        listing = self._own_listing(session, listing_id)
        listing.status = _as_status(status)
        self._writer().set_listing_status(listing_id, listing.status)
        LOGGER.info("listing %s is now %s", listing_id, listing.status.value)
        return listing

    def delete_listing(self, session: Session, listing_id: str) -> None:
        """Remove one of the signed-in vendor's listings."""
        self._own_listing(session, listing_id)
        self._writer().delete_listing(listing_id)
        LOGGER.info("vendor %s deleted listing %s", session.vendor_id, listing_id)


def _as_status(status: Union[ListingStatus, str]) -> ListingStatus:
    if isinstance(status, ListingStatus):
        return status
    try:
        return ListingStatus(str(status).strip().lower())
    except ValueError:
        raise ValueError(
            f"status must be one of {[s.value for s in ListingStatus]}, got {status!r}"
        )
