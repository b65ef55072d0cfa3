# directory/sorting.py
from __future__ import annotations

import unicodedata
from typing import Iterable, List, Optional, Tuple

from mpk_core.models import VendorSummary
from mpk_utils.normalizers import stall_key

SORT_MODES = ("alpha", "stall")


def stall_sort_key(stall_number: Optional[str]) -> Tuple[str, int]:
    return stall_key(stall_number)


def name_sort_key(name: Optional[str]) -> Tuple[str, str]:
    """
    Accents folded onto their base letter ("Ángel" files under A), then
    case-folded. The raw case-folded name breaks ties between spellings.
    """
    folded = (name or "").casefold()
    base = "".join(
        ch for ch in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(ch)
    )
    return base, folded


def _name_key(v: VendorSummary) -> Tuple[str, str]:
    return name_sort_key(v.business_name)


def _stall_key(v: VendorSummary) -> Tuple[str, int]:
    return stall_sort_key(v.stall.stall_number if v.stall else None)


def sort_vendors(vendors: Iterable[VendorSummary], mode: str = "alpha") -> List[VendorSummary]:
    """
    alpha: business name, ignoring case and accents.
    stall: letter prefix, then stall number as an integer (F-2 before F-10).
    Ties keep input order.
    """
    if mode == "alpha":
        return sorted(vendors, key=_name_key)
    if mode == "stall":
        return sorted(vendors, key=_stall_key)
    raise ValueError(f"unknown sort mode {mode!r}; expected one of {SORT_MODES}")
