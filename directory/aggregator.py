# directory/aggregator.py
"""
Fold vendor_products rows into one summary per vendor for a category.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from adapters.rows import listing_from_row, stall_from_row
from directory.rules import CategoryRules, detect_meat_types, matches_listing
from mpk_core.models import Listing, Stall, Vendor, VendorSummary

LOGGER = logging.getLogger(__name__)

Row = Union[Listing, Dict[str, Any]]
StallRecords = Union[Mapping[str, Stall], Iterable[Union[Stall, Dict[str, Any]]], None]


def _as_listing(row: Row) -> Listing:
    if isinstance(row, Listing):
        return row
    return listing_from_row(row)


def _as_stalls(stalls: StallRecords) -> List[Stall]:
    if stalls is None:
        return []
    if isinstance(stalls, Mapping):
        out = []
        for vid, s in stalls.items():
            if not isinstance(s, (Stall, dict)):
                LOGGER.debug("skipping stall record for %s: %r", vid, s)
                continue
            if not isinstance(s, Stall):
                s = stall_from_row(s)
            if s.vendor_id is None:
                s = Stall(s.stall_number, s.location_description, vendor_id=str(vid))
            out.append(s)
        return out
    # stall_from_row maps junk to a record with no vendor_id, which matches nobody
    return [s if isinstance(s, Stall) else stall_from_row(s) for s in stalls]


def profile_stall(vendor: Vendor, default_location: Optional[str] = None) -> Optional[Stall]:
    """Stall built from the vendor's own profile fields, or None if it has neither."""
    if not vendor.stall_number and not vendor.complete_address:
        return None
    return Stall(
        stall_number=vendor.stall_number,
        location_description=vendor.complete_address or default_location,
        vendor_id=vendor.id,
    )


def apply_stalls(
    summaries: Dict[str, VendorSummary],
    stalls: StallRecords,
    vendors: Mapping[str, Vendor],
    default_location: Optional[str] = None,
) -> None:
    """
    Overlay stall-table records, then fall back to each vendor's profile
    fields. Vendors with neither keep stall=None.
    """
    for stall in _as_stalls(stalls):
        summary = summaries.get(stall.vendor_id or "")
        if summary is not None:
            summary.stall = stall

    for vid, summary in summaries.items():
        if summary.stall is None and vid in vendors:
            summary.stall = profile_stall(vendors[vid], default_location)


def aggregate(
    rows: Iterable[Row],
    selected_category: str,
    stalls: StallRecords = None,
    rules: Optional[CategoryRules] = None,
    default_location: Optional[str] = None,
) -> Dict[str, VendorSummary]:
    """
    Return {vendor_id: VendorSummary} for every vendor with at least one
    listing in `selected_category`, in first-seen order.

    product_count counts matching listings, available_product_count the
    available ones among them. Meat badges are OR-ed over matching listings.
    """
    summaries: Dict[str, VendorSummary] = {}
    vendors: Dict[str, Vendor] = {}
    seen = skipped = 0

    for row in rows:
        seen += 1
        listing = _as_listing(row)
        if not matches_listing(selected_category, listing, rules):
            skipped += 1
            continue

        vid = listing.vendor_id
        summary = summaries.get(vid)
        if summary is None:
            summary = VendorSummary(
                id=vid,
                business_name=listing.vendor.business_name,
                contact_number=listing.vendor.phone_number,
            )
            summaries[vid] = summary
            vendors[vid] = listing.vendor

        summary.product_count += 1
        if listing.is_available:
            summary.available_product_count += 1
        summary.meat_types.merge(
            detect_meat_types(listing.product.name, listing.product.category_name, rules)
        )

    apply_stalls(summaries, stalls, vendors, default_location)

    LOGGER.debug(
        "aggregate %r: %d rows, %d skipped, %d vendors",
        selected_category,
        seen,
        skipped,
        len(summaries),
    )
    return summaries
