"""Application settings — single source of truth for paths and UI constants.

Values come from the dataclass defaults, overridden by ``DIGITALUX_*``
environment variables.  A ``.env`` / ``.env.local`` file at the repository
root is read once at import; variables already in the environment win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from .catalog.loader import DEFAULT_CATALOG


ROOT = Path(__file__).resolve().parent.parent
SHORTCUTS_FILE = ".digital-shortcuts.cfg"


# ── .env loader ────────────────────────────────────────────────────

def _load_env() -> None:
    for name in (".env", ".env.local"):
        p = ROOT / name
        if p.exists():
            for line in p.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if line and "=" in line and not line.startswith("#"):
                    k, v = line.split("=", 1)
                    k = k.strip()
                    v = v.strip().strip('"').strip("'")
                    if k and k not in os.environ:
                        os.environ[k] = v

_load_env()


def _default_shortcuts() -> Path:
    return Path.home() / SHORTCUTS_FILE


@dataclass(frozen=True)
class Settings:
    """Runtime settings.  Geometry values are in pixels."""

    catalog_path: Path = DEFAULT_CATALOG
    shortcuts_path: Path = field(default_factory=_default_shortcuts)
    language: str | None = None
    """Catalog translation to display; None uses the base names."""

    dark_mode: bool = True

    # ── Search surfaces ────────────────────────────────────────────
    sidebar_max_results: int = 12
    spotlight_max_results: int = 10

    sidebar_row_height: int = 34
    sidebar_min_width: int = 260
    spotlight_row_height: int = 38
    spotlight_width: int = 480
    spotlight_header_height: int = 52
    spotlight_top_offset: int = 80

    focus_debounce_s: float = 0.2
    """Delay between the query field losing focus and the popup closing,
    long enough for a click on a popup row to land first."""


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def settings_from_env(environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from ``DIGITALUX_*`` variables (unset ones keep defaults)."""
    env = os.environ if environ is None else environ
    overrides: dict = {}
    if env.get("DIGITALUX_CATALOG"):
        overrides["catalog_path"] = Path(env["DIGITALUX_CATALOG"]).expanduser()
    if env.get("DIGITALUX_SHORTCUTS_FILE"):
        overrides["shortcuts_path"] = Path(env["DIGITALUX_SHORTCUTS_FILE"]).expanduser()
    if env.get("DIGITALUX_LANGUAGE"):
        overrides["language"] = env["DIGITALUX_LANGUAGE"]
    if env.get("DIGITALUX_DARK_MODE"):
        overrides["dark_mode"] = _env_bool(env["DIGITALUX_DARK_MODE"])
    return Settings(**overrides)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    return settings_from_env()
