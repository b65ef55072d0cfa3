from __future__ import annotations

import re
import sys
from typing import Any, Optional, Tuple


# ---------------- Text ----------------


def norm_text(value: Any) -> str:
    """Lower-cased string; None and non-strings never raise."""
    if value is None:
        return ""
    return str(value).lower()


def contains_any(text: str, keywords) -> bool:
    return any(k in text for k in keywords)


# ---------------- Upstream join shape ----------------


def first_record(value: Any) -> dict:
    """
    One-to-many joins come back either as an object or as a list of objects.
    Return the object (or the first element), or {} for anything else.
    """
    if isinstance(value, dict):
        return value
    if isinstance(value, (list, tuple)):
        if value and isinstance(value[0], dict):
            return value[0]
    return {}


def first_name(value: Any) -> str:
    """`name` of an object-or-list join field, '' when malformed."""
    name = first_record(value).get("name")
    return "" if name is None else str(name)


# ---------------- Stall numbers ----------------

STALL_PREFIX_RX = re.compile(r"[A-Za-z]+")
STALL_NUMBER_RX = re.compile(r"\d+")

MISSING_PREFIX = "zzz"
MISSING_NUMBER = sys.maxsize


def compact_stall(stall_number: Optional[str]) -> str:
    """'df - 3 ' -> 'DF-3'"""
    return re.sub(r"\s+", "", norm_text(stall_number)).upper()


def stall_key(stall_number: Optional[str]) -> Tuple[str, int]:
    """
    (letters, number) for ordering stalls.
    Missing letters sort last via 'zzz'; missing digits sort last via maxsize.
    """
    s = "" if stall_number is None else str(stall_number)
    m = STALL_PREFIX_RX.search(s)
    prefix = m.group(0).casefold() if m else MISSING_PREFIX
    n = STALL_NUMBER_RX.search(s)
    number = int(n.group(0)) if n else MISSING_NUMBER
    return prefix, number
