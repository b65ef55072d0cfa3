# adapters/rows.py
"""
Turn upstream join rows into domain objects.

A vendor_products row as delivered by the backend looks like:

    {
      "vendor_id": "...", "status": "available", "price": 180, "uom": "kg",
      "vendor_profiles": {"id", "business_name", "phone_number",
                          "stall_number", "complete_address"},
      "products": {"id", "name", "description",
                   "product_categories": {"name"} | [{"name"}]},
    }

`vendor`/`product`/`category` are accepted as shorter aliases. Malformed
fields fall back to empty values; nothing here raises on bad shape.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mpk_core.models import Listing, ListingStatus, Product, Stall, Vendor
from mpk_utils.normalizers import first_name, first_record

LOGGER = logging.getLogger(__name__)

AVAILABLE_STATUSES = {"available", "active"}
UNAVAILABLE_STATUSES = {"unavailable", "inactive"}


def normalize_status(raw: Any) -> ListingStatus:
    """available/active (any case) -> AVAILABLE, everything else -> UNAVAILABLE."""
    s = str(raw or "").strip().lower()
    if s in AVAILABLE_STATUSES:
        return ListingStatus.AVAILABLE
    if s and s not in UNAVAILABLE_STATUSES:
        LOGGER.debug("unknown listing status %r treated as unavailable", raw)
    return ListingStatus.UNAVAILABLE


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def vendor_from_record(rec: Any, fallback_id: Any = None) -> Vendor:
    v = first_record(rec)
    vid = v.get("id", fallback_id)
    return Vendor(
        id="" if vid is None else str(vid),
        business_name=str(v.get("business_name") or ""),
        phone_number=_text(v.get("phone_number") or v.get("contact_number")),
        stall_number=_text(v.get("stall_number")),
        complete_address=_text(v.get("complete_address")),
    )


def product_from_record(rec: Any) -> Product:
    p = first_record(rec)
    category = p.get("product_categories", p.get("category"))
    pid = p.get("id")
    return Product(
        id="" if pid is None else str(pid),
        name=str(p.get("name") or ""),
        category_name=first_name(category),
        description=str(p.get("description") or ""),
    )


def listing_from_row(row: Dict[str, Any]) -> Listing:
    """Build a Listing from one upstream join row."""
    if not isinstance(row, dict):
        row = {}
    vendor = vendor_from_record(
        row.get("vendor_profiles", row.get("vendor")), fallback_id=row.get("vendor_id")
    )
    if not vendor.id and row.get("vendor_id") is not None:
        vendor.id = str(row["vendor_id"])
    product = product_from_record(row.get("products", row.get("product")))
    rid = row.get("id")
    return Listing(
        vendor=vendor,
        product=product,
        status=normalize_status(row.get("status")),
        price=_float(row.get("price")),
        uom=_text(row.get("uom")),
        id=None if rid is None else str(rid),
    )


def stall_from_row(row: Dict[str, Any]) -> Stall:
    """Stall lookup row; `vendor_profile_id` is the backend's column name."""
    if not isinstance(row, dict):
        row = {}
    vid = row.get("vendor_id", row.get("vendor_profile_id"))
    return Stall(
        stall_number=_text(row.get("stall_number")),
        location_description=_text(row.get("location_description")),
        vendor_id=None if vid is None else str(vid),
    )
