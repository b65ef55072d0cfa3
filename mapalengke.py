# Command-line front end for the Mapalengke market directory.
# - Database management (db --init, db --stats) and seeding (seed)
# - Category browsing (categories, vendors)
# - Vendor details (vendor) and the vendor dashboard (dashboard)
# - Listing management (save-listing, listing-status, delete-listing)
#
# Examples:
#   python mapalengke.py db --init
#   python mapalengke.py seed config/seed.example.json
#   python mapalengke.py vendors Fish --sort stall
#   python mapalengke.py vendors "Rice & Grain" --rows export.json --json
#   python mapalengke.py vendor v-karne-ni-juan --search pork
#   python mapalengke.py dashboard --vendor-id v-karne-ni-juan
#   python mapalengke.py save-listing --vendor-id v-aling-nena --name Galunggong --price 180 --uom kg
#   python mapalengke.py delete-listing l-tilapia --vendor-id v-aling-nena --yes
#
# Notes:
# - --db defaults to [paths] db in config.toml.
# - --rows reads an exported vendor_products JSON instead of the database.

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from adapters.base import BaseDataSource, DataSourceError
from adapters.json_source import JsonDataSource
from adapters.sqlite_source import SQLiteDataSource
from config.loader import DEFAULTS, load_config, resolve_path
from directory.rules import product_badge
from directory.service import DirectoryService
from directory.sorting import SORT_MODES
from mpk_core.models import Listing, ListingStatus, Session, Stall, VendorSummary
from mpk_utils.logging_setup import setup_logging
from storage.sqlite_store import SQLiteStore

LOGGER = logging.getLogger("mapalengke")


# ---------- settings + wiring ----------
def _settings() -> Dict[str, Any]:
    try:
        return load_config()
    except FileNotFoundError as e:
        LOGGER.warning("%s; using defaults", e)
        return {section: dict(values) for section, values in DEFAULTS.items()}


def _db_path(db_path: Optional[str], cfg: Dict[str, Any]) -> str:
    if db_path:
        return db_path
    return str(resolve_path(cfg["paths"]["db"]))


def _open_store(db_path: str) -> SQLiteStore:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    store = SQLiteStore(db_path)
    store.ensure_schema()
    return store


def _service(db_path: Optional[str], rows_path: Optional[str] = None) -> DirectoryService:
    cfg = _settings()
    source: BaseDataSource
    if rows_path:
        source = JsonDataSource.from_file(rows_path)
    else:
        path = _db_path(db_path, cfg)
        try:
            source = SQLiteDataSource(_open_store(path))
        except sqlite3.Error as e:
            raise DataSourceError(f"cannot open database {path}: {e}") from e
        except OSError as e:
            raise DataSourceError(f"cannot open database {path}: {e}", retryable=False) from e
    return DirectoryService(
        source,
        rules_path=str(resolve_path(cfg["directory"]["rules"])),
        default_location=cfg["market"].get("name"),
    )


def _fail(msg: str) -> None:
    click.echo(msg, err=True)
    raise SystemExit(1)


# ---------- output ----------
def _stall_text(stall: Optional[Stall]) -> str:
    if stall is None or not stall.stall_number:
        text = "No Stall"
    else:
        text = f"Stall {stall.stall_number}"
    if stall is not None and stall.location_description:
        text += f" ({stall.location_description})"
    return text


def _print_vendors(category: str, vendors: List[VendorSummary]) -> None:
    if not vendors:
        click.echo(f"No vendors selling {category.lower()} products found.")
        return
    for v in vendors:
        badges = [k for k in ("pork", "beef", "chicken") if getattr(v.meat_types, k)]
        click.echo("-" * 60)
        click.echo(f"Vendor     : {v.business_name}  [{'Open' if v.is_open else 'Closed'}]")
        click.echo(f"Stall      : {_stall_text(v.stall)}")
        click.echo(f"Contact    : {v.contact_number or 'N/A'}")
        click.echo(
            f"Products   : {v.available_product_count} of {v.product_count} available"
        )
        if badges:
            click.echo(f"Badges     : {', '.join(badges)}")


def _listing_dict(li: Listing) -> Dict[str, Any]:
    return {
        "id": li.id,
        "product": li.product.name,
        "category": li.product.category_name or None,
        "price": li.price,
        "uom": li.uom,
        "status": li.status.value,
        "badge": product_badge(li.product.name, li.product.category_name),
    }


def _print_listings(listings: List[Listing]) -> None:
    if not listings:
        click.echo("  (no products)")
        return
    for li in listings:
        price = f"{li.price:.2f}" if li.price is not None else "N/A"
        unit = f"/{li.uom}" if li.uom else ""
        click.echo(f"  - {li.product.name:<30} {price}{unit}  [{li.status.value}]")


# ----------------------------- CLI -----------------------------
@click.group()
@click.option("--quiet", is_flag=True, help="Suppress info logs; only warnings/errors.")
@click.option("--verbose", is_flag=True, help="Verbose logging.")
def cli(quiet: bool, verbose: bool) -> None:
    """Mapalengke market directory CLI."""
    setup_logging(_settings()["logging"].get("level", "INFO"), quiet=quiet, verbose=verbose)


# ----------------------------- Database Management Commands -----------------------------
@cli.command("db")
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
@click.option("--init", "do_init", is_flag=True, help="Create the directory tables.")
@click.option("--stats", "do_stats", is_flag=True, help="Show table row counts.")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON.")
def db_cmd(db_path: Optional[str], do_init: bool, do_stats: bool, output_json: bool) -> None:
    """
    Database management commands.

    Examples:

        mapalengke db --init --db data/mapalengke.sqlite

        mapalengke db --stats --json
    """
    if not any([do_init, do_stats]):
        click.echo("No action specified. Use --init or --stats.")
        click.echo("Run 'mapalengke db --help' for usage.")
        raise SystemExit(1)

    path = _db_path(db_path, _settings())
    results: Dict[str, Any] = {"db_path": path, "actions": []}

    with _open_store(path) as store:
        if do_init:
            result = store.ensure_schema()
            results["init"] = result
            results["actions"].append("init")
            if not output_json:
                click.echo(
                    f"[init] schema_version={result['version']}, "
                    f"tables_created={result['tables_created']}"
                )
        if do_stats:
            stats = store.get_stats()
            results["stats"] = stats
            results["actions"].append("stats")
            if not output_json:
                click.echo("[stats] Table row counts:")
                for table, count in stats.items():
                    click.echo(f"  - {table}: {count if count >= 0 else '(not found)'}")

    if output_json:
        click.echo(json.dumps(results, indent=2))


@cli.command("seed")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
def seed_cmd(path: str, db_path: Optional[str]) -> None:
    """Load vendors, products, listings and stalls from a JSON seed file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise click.UsageError(f"{path} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise click.UsageError(f"{path} must contain a JSON object.")

    with _open_store(_db_path(db_path, _settings())) as store:
        try:
            counts = store.load_seed(data)
        except (KeyError, ValueError) as e:
            _fail(f"[error] bad seed record: {e!r}")
        except sqlite3.Error as e:
            _fail(f"[error] seeding failed: {e}")
    click.echo("[seed] " + ", ".join(f"{k}={v}" for k, v in counts.items()))


# ----------------------------- Directory Commands -----------------------------
@cli.command("categories")
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
@click.option("--rows", "rows_path", default=None, help="Exported vendor_products JSON.")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON.")
def categories_cmd(db_path: Optional[str], rows_path: Optional[str], output_json: bool) -> None:
    """List categories with the number of vendors in each."""
    try:
        overview = _service(db_path, rows_path).category_overview()
    except DataSourceError as e:
        _fail(f"[error] {e}" + (" (retry)" if e.retryable else ""))
    if output_json:
        click.echo(json.dumps(overview, indent=2))
        return
    for name, count in overview.items():
        click.echo(f"{name:<24} {count} vendor(s)")


@cli.command("vendors")
@click.argument("category")
@click.option(
    "--sort",
    "sort_mode",
    type=click.Choice(SORT_MODES),
    default="alpha",
    show_default=True,
    help="alpha = business name A-Z, stall = stall number.",
)
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
@click.option("--rows", "rows_path", default=None, help="Exported vendor_products JSON.")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON.")
def vendors_cmd(
    category: str,
    sort_mode: str,
    db_path: Optional[str],
    rows_path: Optional[str],
    output_json: bool,
) -> None:
    """
    Vendors selling in CATEGORY.

    Examples:

        mapalengke vendors Fish --sort stall

        mapalengke vendors "Vegetables & Fruits" --json
    """
    try:
        vendors = _service(db_path, rows_path).vendors_by_category(category, sort=sort_mode)
    except DataSourceError as e:
        _fail(f"[error] {e}" + (" (retry)" if e.retryable else ""))

    if output_json:
        click.echo(json.dumps([v.as_row() for v in vendors], indent=2))
    else:
        _print_vendors(category, vendors)


@cli.command("vendor")
@click.argument("vendor_id")
@click.option("--search", default=None, help="Only products whose name contains this.")
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON.")
def vendor_cmd(
    vendor_id: str, search: Optional[str], db_path: Optional[str], output_json: bool
) -> None:
    """A vendor's stall and available products."""
    try:
        details = _service(db_path).vendor_details(vendor_id, search=search)
    except LookupError as e:
        _fail(f"[error] {e}")
    except DataSourceError as e:
        _fail(f"[error] {e}" + (" (retry)" if e.retryable else ""))

    if output_json:
        click.echo(
            json.dumps(
                {
                    "id": details.vendor.id,
                    "business_name": details.vendor.business_name,
                    "contact_number": details.vendor.phone_number,
                    "stall": details.stall.as_dict() if details.stall else None,
                    "products": [_listing_dict(li) for li in details.listings],
                },
                indent=2,
            )
        )
        return
    click.echo(f"{details.vendor.business_name}")
    click.echo(f"  {_stall_text(details.stall)}")
    click.echo(f"  Contact: {details.vendor.phone_number or 'N/A'}")
    _print_listings(details.listings)


def _session(svc: DirectoryService, vendor_id: str, username: Optional[str]) -> Session:
    vendor = svc.source.fetch_vendor(vendor_id)
    if vendor is None:
        raise LookupError(f"vendor not found: {vendor_id}")
    return Session.for_vendor(vendor, username=username)


@cli.command("dashboard")
@click.option("--vendor-id", required=True, help="Vendor to sign in as.")
@click.option("--username", default=None, help="Display username (defaults to vendor id).")
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
def dashboard_cmd(vendor_id: str, username: Optional[str], db_path: Optional[str]) -> None:
    """A vendor's own listings with active/inactive counts."""
    try:
        svc = _service(db_path)
        session = _session(svc, vendor_id, username)
        dash = svc.vendor_dashboard(session)
    except LookupError as e:
        _fail(f"[error] {e}")
    except DataSourceError as e:
        _fail(f"[error] {e}" + (" (retry)" if e.retryable else ""))

    click.echo(f"Signed in as {session.username} ({dash.vendor.business_name})")
    click.echo(f"  {_stall_text(dash.stall)}")
    click.echo(
        f"  Products: {len(dash.listings)} total, "
        f"{dash.active_count} active, {dash.inactive_count} inactive"
    )
    _print_listings(dash.listings)


# ----------------------------- Listing Management Commands -----------------------------
STATUS_CHOICES = [s.value for s in ListingStatus]


@cli.command("save-listing")
@click.option("--vendor-id", required=True, help="Vendor to sign in as.")
@click.option("--name", required=True, help="Product name; created if it does not exist.")
@click.option("--price", required=True, type=float, help="Price per unit.")
@click.option("--uom", required=True, help="Unit of measure, e.g. kg or pc.")
@click.option("--status", type=click.Choice(STATUS_CHOICES), default="available", show_default=True)
@click.option("--category", default=None, help="Category for a newly created product.")
@click.option("--listing-id", default=None, help="Update this listing instead of adding one.")
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
def save_listing_cmd(
    vendor_id: str,
    name: str,
    price: float,
    uom: str,
    status: str,
    category: Optional[str],
    listing_id: Optional[str],
    db_path: Optional[str],
) -> None:
    """
    Add a product listing for a vendor, or update one it owns.

    Examples:

        mapalengke save-listing --vendor-id v-aling-nena --name Galunggong --price 180 --uom kg

        mapalengke save-listing --vendor-id v-aling-nena --listing-id l-1 --name Tilapia --price 150 --uom kg --status unavailable
    """
    try:
        svc = _service(db_path)
        session = _session(svc, vendor_id, None)
        li = svc.save_listing(
            session,
            name,
            price,
            uom,
            status=status,
            listing_id=listing_id,
            category=category,
        )
    except (LookupError, PermissionError, ValueError) as e:
        _fail(f"[error] {e}")
    except DataSourceError as e:
        _fail(f"[error] {e}" + (" (retry)" if e.retryable else ""))
    click.echo(f"[saved] {li.id}: {li.product.name} {li.price:.2f}/{li.uom} [{li.status.value}]")


@cli.command("listing-status")
@click.argument("listing_id")
@click.argument("status", type=click.Choice(STATUS_CHOICES))
@click.option("--vendor-id", required=True, help="Vendor to sign in as.")
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
def listing_status_cmd(
    listing_id: str, status: str, vendor_id: str, db_path: Optional[str]
) -> None:
    """Mark LISTING_ID available or unavailable."""
    try:
        svc = _service(db_path)
        li = svc.set_listing_status(_session(svc, vendor_id, None), listing_id, status)
    except (LookupError, PermissionError, ValueError) as e:
        _fail(f"[error] {e}")
    except DataSourceError as e:
        _fail(f"[error] {e}" + (" (retry)" if e.retryable else ""))
    click.echo(f"[status] {li.id}: {li.product.name} [{li.status.value}]")


@cli.command("delete-listing")
@click.argument("listing_id")
@click.option("--vendor-id", required=True, help="Vendor to sign in as.")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.option("--db", "db_path", default=None, help="Path to SQLite database file.")
def delete_listing_cmd(listing_id: str, vendor_id: str, yes: bool, db_path: Optional[str]) -> None:
    """Delete LISTING_ID from the vendor's products."""
    if not yes:
        click.confirm(f"Delete listing {listing_id}?", abort=True)
    try:
        svc = _service(db_path)
        svc.delete_listing(_session(svc, vendor_id, None), listing_id)
    except (LookupError, PermissionError) as e:
        _fail(f"[error] {e}")
    except DataSourceError as e:
        _fail(f"[error] {e}" + (" (retry)" if e.retryable else ""))
    click.echo(f"[deleted] {listing_id}")


if __name__ == "__main__":
    cli()
