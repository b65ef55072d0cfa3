"""
Tests for category rules: stall zoning, keyword heuristics, meat badges.
"""
from pathlib import Path

import pytest
import yaml

from directory.rules import (
    DEFAULT_RULES,
    category_names,
    compile_rules,
    detect_meat_types,
    matches,
    parse_rule,
    product_badge,
)

CATEGORIES_YAML = Path(__file__).resolve().parents[1] / "config" / "categories.yaml"


class TestStallZoning:
    def test_fish_on_f_stall(self):
        assert matches("fish", stall_number="F-3") is True

    def test_fish_excludes_dried_fish_stalls(self):
        assert matches("fish", stall_number="DF-3") is False

    def test_dried_fish_on_df_stall(self):
        assert matches("dried fish", stall_number="DF-3") is True
        assert matches("dried fish", stall_number="F-3") is False

    def test_stall_is_normalized(self):
        assert matches("Fish", stall_number=" f - 7") is True
        assert matches("DRIED FISH", stall_number="df 2") is True

    def test_names_are_ignored_for_zoned_categories(self):
        assert matches("fish", "Fish and Meat combo", "Tilapia", "Fish", "M-1") is False

    def test_missing_stall_never_matches(self):
        assert matches("fish", "Isda", "Tilapia", "", None) is False
        assert matches("dried fish", stall_number="") is False


class TestKeywordCategories:
    def test_meat_from_product_name(self):
        assert matches("meat", product_name="Pork Liempo") is True

    def test_meat_from_filipino_synonym(self):
        assert matches("meat", product_name="Kambing") is True
        assert matches("meat", product_name="Manok (whole)") is True

    def test_meat_from_business_name(self):
        assert matches("meat", business_name="Karne ni Juan", product_name="Misc") is True

    def test_meat_from_category_name(self):
        assert matches("meat", product_name="Special cut", product_category_name="Beef") is True

    def test_pork_beef_chicken(self):
        assert matches("pork", product_name="Pata") is True
        assert matches("beef", product_name="Oxtail") is True
        assert matches("chicken", product_name="Drumstick") is True
        assert matches("chicken", product_name="Pata") is False

    def test_listing_can_match_several_categories(self):
        args = dict(business_name="Stall 9", product_name="Pork Liempo")
        assert matches("meat", **args)
        assert matches("pork", **args)
        assert not matches("beef", **args)

    def test_vegetables_and_fruits(self):
        assert matches("vegetables & fruits", business_name="Gulayan ni Rosa") is True
        assert matches("Vegetables & Fruits", product_name="Fresh fruit basket") is True
        assert matches("vegetables & fruits", product_name="Tilapia") is False

    def test_rice_alias(self):
        assert matches("rice & grain", product_name="Dinorado Rice") is True
        assert matches("rice/grain", business_name="Bigasan") is True

    def test_grocery(self):
        assert matches("grocery", business_name="Mang Ben Sari-Sari Store") is True
        assert matches("grocery", product_name="Toyo 1L") is True

    def test_case_insensitive(self):
        assert matches("MEAT", product_name="PORK CHOP") is True


class TestEdgeCases:
    def test_unknown_category(self):
        assert matches("electronics", "Any", "Pork", "Meat", "F-1") is False
        assert matches("", product_name="Pork") is False
        assert matches(None, product_name="Pork") is False

    def test_none_fields(self):
        assert matches("meat", None, None, None, None) is False
        assert matches("meat", None, "Beef Brisket", None, None) is True

    def test_non_string_fields(self):
        assert matches("fish", stall_number=12) is False


class TestMeatTypes:
    def test_pork_badge(self):
        flags = detect_meat_types("Pork Liempo")
        assert flags.pork and not flags.beef and not flags.chicken

    def test_badge_only_cuts(self):
        assert detect_meat_types("Loin").pork is True
        assert detect_meat_types("Shoulder").pork is True

    def test_badge_from_category_name(self):
        assert detect_meat_types("Special", "Chicken").chicken is True

    def test_tadyang_is_pork_and_beef(self):
        flags = detect_meat_types("Tadyang")
        assert flags.pork and flags.beef

    def test_no_badge(self):
        assert not detect_meat_types("Tilapia").any()

    def test_product_badge_order(self):
        assert product_badge("Beef Brisket") == "beef"
        assert product_badge("Tadyang") == "beef"
        assert product_badge("Pork Chop") == "pork"
        assert product_badge("Chicken Wing") == "chicken"
        assert product_badge("Kangkong") is None


class TestRuleConfig:
    def test_narrow_meat_rules_are_subsets_of_meat(self):
        meat = DEFAULT_RULES.get("meat")
        for kind in ("pork", "beef", "chicken"):
            rule = DEFAULT_RULES.get(kind)
            assert set(rule.product_keywords) <= set(meat.product_keywords)
            assert set(rule.business_keywords) <= set(meat.business_keywords)

    def test_category_names_in_display_order(self):
        names = category_names()
        assert names[0] == "Fish"
        assert names[1] == "Dried Fish"
        assert "Rice & Grain" in names

    def test_parse_rule_normalizes(self):
        rule = parse_rule(
            {
                "name": "Seafood",
                "if_stall_startswith": ["sf"],
                "if_product_contains": ["SHRIMP"],
            }
        )
        assert rule.stall_prefixes == ["SF"]
        assert rule.product_keywords == ["shrimp"]
        assert rule.is_zoned

    def test_custom_rules(self):
        rules = compile_rules(
            {
                "categories": [
                    {"name": "Flowers", "if_business_contains": ["flower", "bulaklak"]}
                ]
            }
        )
        assert matches("flowers", business_name="Bulaklak ni Ana", rules=rules)
        assert not matches("meat", product_name="Pork", rules=rules)
        # badge keywords fall back to the built-in ones
        assert detect_meat_types("Pork", rules=rules).pork

    @pytest.mark.parametrize("category", DEFAULT_RULES.names())
    def test_yaml_matches_builtin(self, category):
        with open(CATEGORIES_YAML, "r", encoding="utf-8") as f:
            from_yaml = compile_rules(yaml.safe_load(f))
        a, b = from_yaml.get(category), DEFAULT_RULES.get(category)
        assert a is not None
        assert set(a.product_keywords) == set(b.product_keywords)
        assert set(a.business_keywords) == set(b.business_keywords)
        assert a.stall_prefixes == b.stall_prefixes
        assert a.excluded_stall_prefixes == b.excluded_stall_prefixes
        assert from_yaml.meat_types == DEFAULT_RULES.meat_types
