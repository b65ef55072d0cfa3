# directory/rules.py
"""
Category rules for the market directory.

A category is matched one of two ways:
- Stall zoning: the stall number prefix decides (fish = F, dried fish = DF).
- Keywords: product name / product category name, or the business name,
  contains one of the rule's English or Filipino keywords.

Rules compile from a config dict (the shape of config/categories.yaml).
DEFAULT_CONFIG is used when no file is given.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mpk_core.models import Listing, MeatTypes
from mpk_utils.normalizers import compact_stall, contains_any, norm_text

PORK_KEYWORDS = ["pork", "baboy", "pigue", "pata", "liempo", "lomo", "tadyang"]
BEEF_KEYWORDS = [
    "beef",
    "baka",
    "brisket",
    "sirloin",
    "tenderloin",
    "ribeye",
    "ribs",
    "short rib",
    "shank",
    "oxtail",
    "kalitiran",
    "tadyang",
]
CHICKEN_KEYWORDS = ["chicken", "manok", "drumstick", "thigh", "wing", "breast"]
OTHER_MEAT_KEYWORDS = ["meat", "goat", "kambing", "carabeef", "veal"]

DEFAULT_CONFIG: Dict[str, Any] = {
    "categories": [
        {
            "name": "Fish",
            "if_stall_startswith": ["F"],
            "unless_stall_startswith": ["DF"],
        },
        {
            "name": "Dried Fish",
            "if_stall_startswith": ["DF"],
        },
        {
            "name": "Meat",
            "if_product_contains": OTHER_MEAT_KEYWORDS
            + PORK_KEYWORDS
            + BEEF_KEYWORDS
            + CHICKEN_KEYWORDS,
            "if_business_contains": [
                "meat",
                "butcher",
                "karne",
                "pork",
                "beef",
                "chicken",
                "manok",
            ],
        },
        {
            "name": "Pork",
            "if_product_contains": PORK_KEYWORDS,
            "if_business_contains": ["pork", "karne"],
        },
        {
            "name": "Beef",
            "if_product_contains": BEEF_KEYWORDS,
            "if_business_contains": ["beef", "karne"],
        },
        {
            "name": "Chicken",
            "if_product_contains": CHICKEN_KEYWORDS,
            "if_business_contains": ["chicken", "manok", "karne"],
        },
        {
            "name": "Vegetables & Fruits",
            "if_product_contains": ["vegetable", "gulay", "fruit", "prutas"],
            "if_business_contains": ["vegetable", "veggie", "gulay", "fruit", "prutas"],
        },
        {
            "name": "Rice & Grain",
            "aliases": ["rice/grain"],
            "if_product_contains": ["rice", "grain", "bigas", "palay"],
            "if_business_contains": ["rice", "grain", "bigas", "palay"],
        },
        {
            "name": "Grocery",
            "if_product_contains": [
                "sardines",
                "canned",
                "noodles",
                "suka",
                "toyo",
                "patis",
                "sugar",
                "salt",
                "oil",
            ],
            "if_business_contains": ["grocery", "sari-sari", "store"],
        },
    ],
    # Badge keywords; matched on product and product category names only.
    "meat_types": {
        "pork": PORK_KEYWORDS + ["loin", "chop", "shoulder"],
        "beef": BEEF_KEYWORDS,
        "chicken": CHICKEN_KEYWORDS,
    },
}


def category_key(name: Optional[str]) -> str:
    return norm_text(name).strip()


@dataclass
class CategoryRule:
    """A single directory category and the conditions that select a listing."""

    name: str
    aliases: List[str] = field(default_factory=list)

    # Stall zoning (authoritative when set)
    stall_prefixes: List[str] = field(default_factory=list)
    excluded_stall_prefixes: List[str] = field(default_factory=list)

    # Keyword heuristics (lower-case)
    product_keywords: List[str] = field(default_factory=list)
    business_keywords: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return category_key(self.name)

    @property
    def is_zoned(self) -> bool:
        return bool(self.stall_prefixes)

    def check_stall(self, stall_number: Optional[str]) -> bool:
        stall = compact_stall(stall_number)
        if not stall:
            return False
        if any(stall.startswith(p) for p in self.excluded_stall_prefixes):
            return False
        return any(stall.startswith(p) for p in self.stall_prefixes)

    def check_keywords(
        self, business_name: str, product_name: str, product_category_name: str
    ) -> bool:
        if contains_any(product_name, self.product_keywords):
            return True
        if contains_any(product_category_name, self.product_keywords):
            return True
        return contains_any(business_name, self.business_keywords)

    def applies(
        self,
        business_name: Any = "",
        product_name: Any = "",
        product_category_name: Any = "",
        stall_number: Any = "",
    ) -> bool:
        if self.is_zoned:
            return self.check_stall(stall_number)
        return self.check_keywords(
            norm_text(business_name),
            norm_text(product_name),
            norm_text(product_category_name),
        )


@dataclass
class CategoryRules:
    """Compiled dispatch table: category key (and aliases) -> rule."""

    rules: List[CategoryRule] = field(default_factory=list)
    meat_types: Dict[str, List[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._by_key: Dict[str, CategoryRule] = {}
        for rule in self.rules:
            self._by_key.setdefault(rule.key, rule)
            for alias in rule.aliases:
                self._by_key.setdefault(category_key(alias), rule)

    def get(self, category: Optional[str]) -> Optional[CategoryRule]:
        return self._by_key.get(category_key(category))

    def names(self) -> List[str]:
        return [r.name for r in self.rules]


def parse_rule(r: Dict[str, Any]) -> CategoryRule:
    """Parse a category rule from a YAML config dict."""

    def _lower(key: str) -> List[str]:
        return [str(s).lower() for s in r.get(key, []) or []]

    def _upper(key: str) -> List[str]:
        return [compact_stall(s) for s in r.get(key, []) or []]

    return CategoryRule(
        name=str(r.get("name", "unnamed")),
        aliases=[str(a) for a in r.get("aliases", []) or []],
        stall_prefixes=_upper("if_stall_startswith"),
        excluded_stall_prefixes=_upper("unless_stall_startswith"),
        product_keywords=_lower("if_product_contains"),
        business_keywords=_lower("if_business_contains"),
    )


def compile_rules(cfg: Optional[Dict[str, Any]] = None) -> CategoryRules:
    """Compile category rules from config, keeping config order for display."""
    if cfg is None:
        cfg = DEFAULT_CONFIG
    rules = [parse_rule(r) for r in cfg.get("categories", []) or []]
    meat_cfg = cfg.get("meat_types") or DEFAULT_CONFIG["meat_types"]
    meat_types = {
        kind: [str(k).lower() for k in meat_cfg.get(kind, []) or []]
        for kind in ("pork", "beef", "chicken")
    }
    return CategoryRules(rules=rules, meat_types=meat_types)


DEFAULT_RULES = compile_rules(DEFAULT_CONFIG)


def matches(
    selected_category: Any,
    business_name: Any = "",
    product_name: Any = "",
    product_category_name: Any = "",
    stall_number: Any = "",
    rules: Optional[CategoryRules] = None,
) -> bool:
    """
    True when the listing described by the arguments belongs to the category.
    Unknown categories never match.
    """
    rule = (rules or DEFAULT_RULES).get(selected_category)
    if rule is None:
        return False
    return rule.applies(business_name, product_name, product_category_name, stall_number)


def matches_listing(
    selected_category: Any, listing: Listing, rules: Optional[CategoryRules] = None
) -> bool:
    return matches(
        selected_category,
        business_name=listing.vendor.business_name,
        product_name=listing.product.name,
        product_category_name=listing.product.category_name,
        stall_number=listing.vendor.stall_number,
        rules=rules,
    )


def detect_meat_types(
    product_name: Any, product_category_name: Any = "", rules: Optional[CategoryRules] = None
) -> MeatTypes:
    """Badge flags for a single product, independent of the selected category."""
    kw = (rules or DEFAULT_RULES).meat_types
    name = norm_text(product_name)
    cat = norm_text(product_category_name)

    def _hit(kind: str) -> bool:
        words = kw.get(kind, [])
        return contains_any(name, words) or contains_any(cat, words)

    return MeatTypes(pork=_hit("pork"), beef=_hit("beef"), chicken=_hit("chicken"))


def product_badge(
    product_name: Any, product_category_name: Any = "", rules: Optional[CategoryRules] = None
) -> Optional[str]:
    """Single badge for a product row: beef, then pork, then chicken."""
    flags = detect_meat_types(product_name, product_category_name, rules)
    for kind in ("beef", "pork", "chicken"):
        if getattr(flags, kind):
            return kind
    return None


def category_names(rules: Optional[CategoryRules] = None) -> List[str]:
    return (rules or DEFAULT_RULES).names()
