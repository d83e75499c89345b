"""
Runtime configuration for the catalogue viewer.

Values are read from environment variables with sensible defaults so
the viewer runs out of the box against the public PokeAPI:

    POKECATALOG_API_BASE         Base URL of the PokeAPI v2 service
    POKECATALOG_STORAGE_FILE     JSON key-value file holding favourites
    POKECATALOG_HTTP_TIMEOUT     Per-request timeout in seconds
    POKECATALOG_MAX_CONCURRENCY  Concurrent enrichment requests per page
    POKECATALOG_LOG_LEVEL        Root logging level
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Fixed page size of the list view. Not configurable at runtime.
PAGE_SIZE = 20

DEFAULT_API_BASE = "https://pokeapi.co/api/v2"
PROJECT_ROOT = Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class AppConfig:
    api_base: str
    storage_file: Path
    http_timeout: float
    max_concurrency: int
    log_level: str


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_config() -> AppConfig:
    """Build the configuration from the current environment."""
    storage = os.environ.get(
        "POKECATALOG_STORAGE_FILE", str(PROJECT_ROOT / "data" / "storage.json")
    )
    return AppConfig(
        api_base=os.environ.get("POKECATALOG_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        storage_file=Path(storage),
        http_timeout=_env_float("POKECATALOG_HTTP_TIMEOUT", 10.0),
        max_concurrency=_env_int("POKECATALOG_MAX_CONCURRENCY", 8),
        log_level=os.environ.get("POKECATALOG_LOG_LEVEL", "INFO").upper(),
    )
