import json
import pathlib
import sys

import pytest

# Ensure project root is on sys.path (works even if pytest changes CWD)
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.sqlite_store import SQLiteStore  # noqa: E402

SEED_PATH = ROOT / "config" / "seed.example.json"


def make_row(
    vendor_id,
    product,
    status="available",
    stall=None,
    business_name=None,
    category=None,
    phone="09170000000",
    address=None,
):
    """Upstream vendor_products join row."""
    return {
        "vendor_id": vendor_id,
        "status": status,
        "vendor_profiles": {
            "id": vendor_id,
            "business_name": business_name or f"Vendor {vendor_id}",
            "phone_number": phone,
            "stall_number": stall,
            "complete_address": address,
        },
        "products": {
            "id": f"p-{product.lower().replace(' ', '-')}",
            "name": product,
            "description": "",
            "product_categories": {"name": category} if category else None,
        },
    }


@pytest.fixture
def fish_scenario_rows():
    return [
        make_row("A", "Tilapia", "available", stall="F-1"),
        make_row("A", "Bangus", "unavailable", stall="F-1"),
        make_row("B", "Pork Chop", "active", stall="M-1"),
    ]


@pytest.fixture
def seed_data():
    return json.loads(SEED_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def seeded_store(tmp_path, seed_data):
    store = SQLiteStore(str(tmp_path / "market.sqlite"))
    store.ensure_schema()
    store.load_seed(seed_data)
    yield store
    store.close()
