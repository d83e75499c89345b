"""
Persistent key-value storage for the viewer.

``JsonKeyValueStore`` keeps a flat mapping of string keys to JSON
values in a single file on disk, the local equivalent of a browser's
``localStorage``.  ``FavoritesRepository`` sits on top of it and owns
the ``"pokemonFavorites"`` key: it is loaded once when a session starts
and overwritten in full after every favourite toggle.

Reads never fail: a missing, unreadable or malformed file is treated
as empty.  Writes report failure through their return value so the
caller can log and carry on with the in-memory state.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from .catalog.schemas import PokemonSummary


logger = logging.getLogger(__name__)

FAVORITES_KEY = "pokemonFavorites"


class JsonKeyValueStore:
    """A JSON file holding ``{key: value}``.

    Access is serialised with a lock; each write rewrites the whole
    file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, Any]:
        try:
            if self.path.exists():
                with self.path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.warning("Storage file %s does not hold an object; ignoring", self.path)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read storage file %s: %s", self.path, exc)
        return {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``. Raises ``OSError`` on failure."""
        with self._lock:
            data = self._read_all()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)


class FavoritesRepository:
    """Load and save the favourites collection."""

    def __init__(self, store: JsonKeyValueStore, key: str = FAVORITES_KEY):
        self.store = store
        self.key = key

    def load(self) -> Tuple[PokemonSummary, ...]:
        """Return the stored favourites, or an empty tuple.

        Entries that fail validation are skipped; duplicates by id keep
        their first occurrence.
        """
        raw = self.store.get(self.key)
        if raw is None:
            return ()
        if isinstance(raw, str):
            # Values written by a browser-side store are JSON strings.
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.warning("Favourites under %r are not valid JSON; starting empty", self.key)
                return ()
        if not isinstance(raw, list):
            logger.warning("Favourites under %r are not a list; starting empty", self.key)
            return ()
        favorites: List[PokemonSummary] = []
        seen = set()
        for entry in raw:
            try:
                record = PokemonSummary.model_validate(entry)
            except ValidationError:
                logger.warning("Skipping malformed favourite entry: %r", entry)
                continue
            if record.id in seen:
                continue
            seen.add(record.id)
            favorites.append(record)
        return tuple(favorites)

    def save(self, favorites: Sequence[PokemonSummary]) -> bool:
        """Overwrite the stored collection. Returns ``False`` on failure."""
        try:
            self.store.set(self.key, [f.model_dump() for f in favorites])
        except OSError as exc:
            logger.error("Failed to save favourites to %s: %s", self.store.path, exc)
            return False
        return True
