from __future__ import annotations
from pathlib import Path
from typing import Any, Dict

# Python 3.11 has tomllib; fall back to "tomli" on older versions if needed
try:
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

REPO = Path(__file__).resolve().parents[1]

DEFAULTS: Dict[str, Any] = {
    "paths": {"db": "data/mapalengke.sqlite"},
    "directory": {"rules": "config/categories.yaml"},
    "market": {"name": "Toril Public Market"},
    "logging": {"level": "INFO"},
}


def load_config(config_path: Path | None = None) -> Dict[str, Any]:
    """
    Load config.toml from repo root by default, layered over DEFAULTS.
    """
    if config_path is None:
        config_path = REPO / "config.toml"

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with config_path.open("rb") as f:
        data = tomllib.load(f)

    cfg = {section: dict(values) for section, values in DEFAULTS.items()}
    for section, values in data.items():
        if isinstance(values, dict):
            cfg.setdefault(section, {}).update(values)
        else:
            cfg[section] = values
    return cfg


def resolve_path(value: str) -> Path:
    """Relative config paths are taken from the repo root."""
    p = Path(value)
    return p if p.is_absolute() else REPO / p
