"""
Tests for folding listing rows into per-vendor summaries.
"""
from adapters.rows import listing_from_row
from directory.aggregator import aggregate, profile_stall
from mpk_core.models import Stall, Vendor

from conftest import make_row


def test_fish_scenario(fish_scenario_rows):
    out = aggregate(fish_scenario_rows, "Fish")
    assert list(out) == ["A"]
    a = out["A"]
    assert a.product_count == 2
    assert a.available_product_count == 1
    assert a.stall.stall_number == "F-1"
    assert a.stall.location_description is None


def test_available_never_exceeds_total():
    rows = [
        make_row("A", "Pork Liempo", "available"),
        make_row("A", "Pork Chop", "inactive"),
        make_row("B", "Beef Brisket", "Active"),
        make_row("B", "Chicken Wing", "unavailable"),
        make_row("C", "Chicken Breast", "sold out"),
    ]
    out = aggregate(rows, "meat")
    assert set(out) == {"A", "B", "C"}
    for summary in out.values():
        assert 0 <= summary.available_product_count <= summary.product_count
    assert out["C"].available_product_count == 0


def test_vendor_with_only_skipped_rows_is_absent():
    rows = [
        make_row("A", "Tilapia", stall="F-1"),
        make_row("B", "Tuyo", stall="DF-1"),
    ]
    assert set(aggregate(rows, "fish")) == {"A"}
    assert set(aggregate(rows, "dried fish")) == {"B"}


def test_vendor_counts_only_matching_rows():
    rows = [
        make_row("A", "Pork Liempo"),
        make_row("A", "Kangkong (gulay)"),
    ]
    out = aggregate(rows, "pork")
    assert out["A"].product_count == 1


def test_meat_badges_regardless_of_selected_category():
    rows = [make_row("A", "Pork Liempo", stall="F-9")]
    out = aggregate(rows, "fish")
    assert out["A"].meat_types.pork is True
    assert out["A"].meat_types.beef is False


def test_meat_badges_are_sticky():
    rows = [
        make_row("A", "Pork Liempo"),
        make_row("A", "Beef Brisket"),
        make_row("A", "Meat misc"),
    ]
    mt = aggregate(rows, "meat")["A"].meat_types
    assert (mt.pork, mt.beef, mt.chicken) == (True, True, False)


def test_unknown_category_is_empty(fish_scenario_rows):
    assert aggregate(fish_scenario_rows, "jewelry") == {}


def test_idempotent(fish_scenario_rows):
    first = aggregate(fish_scenario_rows, "Fish")
    second = aggregate(fish_scenario_rows, "Fish")
    assert first == second
    assert first["A"] is not second["A"]


def test_accepts_listing_objects(fish_scenario_rows):
    listings = [listing_from_row(r) for r in fish_scenario_rows]
    assert aggregate(listings, "Fish") == aggregate(fish_scenario_rows, "Fish")


def test_first_seen_order():
    rows = [
        make_row("Z", "Tilapia", stall="F-3"),
        make_row("A", "Bangus", stall="F-1"),
        make_row("Z", "Galunggong", stall="F-3"),
    ]
    assert list(aggregate(rows, "fish")) == ["Z", "A"]


def test_summary_seeded_from_vendor():
    rows = [make_row("A", "Tilapia", stall="F-1", business_name="Aling Nena", phone="0917")]
    a = aggregate(rows, "fish")["A"]
    assert a.business_name == "Aling Nena"
    assert a.contact_number == "0917"


class TestStallOverlay:
    def test_stall_record_wins(self):
        rows = [make_row("A", "Tilapia", stall="F-1", address="Somewhere")]
        stalls = [
            {"vendor_profile_id": "A", "stall_number": "F-12", "location_description": "Aisle 2"}
        ]
        a = aggregate(rows, "fish", stalls=stalls)["A"]
        assert a.stall.stall_number == "F-12"
        assert a.stall.location_description == "Aisle 2"

    def test_stall_mapping(self):
        rows = [make_row("A", "Tilapia", stall="F-1")]
        a = aggregate(rows, "fish", stalls={"A": Stall("F-2", "North")})["A"]
        assert a.stall.stall_number == "F-2"
        assert a.stall.vendor_id == "A"

    def test_stall_for_unknown_vendor_ignored(self):
        rows = [make_row("A", "Tilapia", stall="F-1")]
        out = aggregate(rows, "fish", stalls=[Stall("F-9", vendor_id="Q")])
        assert set(out) == {"A"}
        assert out["A"].stall.stall_number == "F-1"

    def test_profile_fallback_uses_default_location(self):
        rows = [make_row("A", "Pork Chop", stall="M-4")]
        a = aggregate(rows, "pork", default_location="Toril Public Market")["A"]
        assert a.stall.stall_number == "M-4"
        assert a.stall.location_description == "Toril Public Market"

    def test_address_only(self):
        rows = [make_row("A", "Pork Chop", address="Row 3")]
        a = aggregate(rows, "pork")["A"]
        assert a.stall.stall_number is None
        assert a.stall.location_description == "Row 3"

    def test_malformed_stall_records_are_skipped(self):
        rows = [make_row("A", "Tilapia", stall="F-1")]
        out = aggregate(rows, "fish", stalls=[None, "F-3", 7, {}])
        assert out["A"].stall.stall_number == "F-1"
        a = aggregate(rows, "fish", stalls={"A": None})["A"]
        assert a.stall.stall_number == "F-1"

    def test_no_stall_info_is_none(self):
        rows = [make_row("A", "Pork Chop")]
        assert aggregate(rows, "pork", default_location="Market")["A"].stall is None


def test_profile_stall_helper():
    assert profile_stall(Vendor(id="v", business_name="x")) is None
    s = profile_stall(Vendor(id="v", business_name="x", stall_number="DF-1"), "Market")
    assert (s.stall_number, s.location_description, s.vendor_id) == ("DF-1", "Market", "v")


def test_as_row_shape(fish_scenario_rows):
    row = aggregate(fish_scenario_rows, "fish")["A"].as_row()
    assert row == {
        "id": "A",
        "business_name": "Vendor A",
        "contact_number": "09170000000",
        "stall": {"stall_number": "F-1", "location_description": None},
        "productCount": 2,
        "availableProductCount": 1,
        "meatTypes": {"pork": False, "beef": False, "chicken": False},
    }
