# adapters/json_source.py
"""
Data source over an exported JSON document:

    {"rows": [<vendor_products join rows>], "stalls": [<stall rows>]}

A bare list is read as the rows with no stall table.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from adapters.base import BaseDataSource, DataSourceError
from adapters.rows import listing_from_row, stall_from_row
from mpk_core.models import Listing, Stall, Vendor


class JsonDataSource(BaseDataSource):
    def __init__(
        self,
        rows: Iterable[Dict[str, Any]],
        stalls: Optional[Iterable[Dict[str, Any]]] = None,
    ):
        self.listings: List[Listing] = [listing_from_row(r) for r in rows]
        self.stalls: List[Stall] = [stall_from_row(s) for s in stalls or []]

    @classmethod
    def from_file(cls, path: str) -> "JsonDataSource":
        p = Path(path)
        try:
            with p.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DataSourceError(f"failed to read {p}: {e}", retryable=False) from e
        if isinstance(data, list):
            return cls(data)
        return cls(data.get("rows", []) or [], data.get("stalls", []) or [])

    def fetch_listings(self) -> List[Listing]:
        return list(self.listings)

    def fetch_stalls(self, vendor_ids: Iterable[str]) -> List[Stall]:
        wanted = set(vendor_ids)
        return [s for s in self.stalls if s.vendor_id in wanted]

    def fetch_vendor(self, vendor_id: str) -> Optional[Vendor]:
        for li in self.listings:
            if li.vendor_id == vendor_id:
                return li.vendor
        return None

    def fetch_vendor_listings(self, vendor_id: str) -> List[Listing]:
        return [li for li in self.listings if li.vendor_id == vendor_id]
