# tasks.py
"""
Developer task runner using Invoke.
Run `inv --list` to see tasks.

Key tasks:
  inv seed [--db data/mapalengke.sqlite] [--file config/seed.example.json]
  inv vendors --category Fish [--sort stall]
  inv test
  inv clean
"""

from invoke import task
from pathlib import Path
import sys


REPO = Path(__file__).parent
DATADIR = REPO / "data"
DEFAULT_DB = DATADIR / "mapalengke.sqlite"
SEED_FILE = REPO / "config" / "seed.example.json"


def _python():
    """Return the python executable inside the current venv."""
    return sys.executable or "python"


@task(
    help={
        "db": "SQLite database path (default: data/mapalengke.sqlite)",
        "file": "Seed JSON (default: config/seed.example.json)",
    }
)
def seed(c, db=str(DEFAULT_DB), file=str(SEED_FILE)):
    """Create the database and load the seed file."""
    c.run(f'"{_python()}" mapalengke.py db --init --db "{db}"', pty=False)
    c.run(f'"{_python()}" mapalengke.py seed "{file}" --db "{db}"', pty=False)


@task(
    help={
        "category": "Directory category, e.g. Fish or 'Rice & Grain'",
        "sort": "alpha or stall (default: alpha)",
        "db": "SQLite database path (default: data/mapalengke.sqlite)",
    }
)
def vendors(c, category, sort="alpha", db=str(DEFAULT_DB)):
    """List vendors in a category."""
    c.run(
        f'"{_python()}" mapalengke.py vendors "{category}" --sort {sort} --db "{db}"',
        pty=False,
    )


@task
def test(c):
    """Run unit tests with pytest."""
    c.run(f'"{_python()}" -m pytest -q', pty=False)


@task
def clean(c):
    """Delete the local database."""
    for p in DATADIR.glob("*.sqlite"):
        p.unlink()
        print(f"Removed {p}")
    DATADIR.mkdir(parents=True, exist_ok=True)
