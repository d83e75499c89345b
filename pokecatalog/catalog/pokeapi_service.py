"""
PokeAPI integration for the catalogue.  This module wraps the two
read-only endpoints the viewer depends on:

* ``GET /pokemon?limit=L&offset=O`` — one page of the index listing,
  ``{count, results: [{name, url}]}``.

* ``GET /pokemon/{id}/`` (or the per-item ``url`` from the listing) —
  the full record used both for list enrichment and the detail page.

HTTP is done with the standard library, as in the rest of the project.
The blocking calls are pushed onto worker threads with
``asyncio.to_thread`` so the event loop stays responsive while requests
are outstanding.  Unlike a best-effort lookup, every failure here is
raised as ``PokeApiError`` because the session must tell a failed page
apart from an empty one.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

from .schemas import PokemonDetail, PokemonPage, PokemonSummary, Sprites


logger = logging.getLogger(__name__)

USER_AGENT = "PokeCatalog/1.0"


class PokeApiError(RuntimeError):
    """Raised when a PokeAPI request fails or returns an unusable body."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status

    @property
    def not_found(self) -> bool:
        return self.status == 404


def _http_get_json(url: str, timeout: float = 10) -> Any:
    """Perform an HTTP GET and return parsed JSON.

    Network errors, non-200 responses and undecodable bodies are logged
    and raised as ``PokeApiError``.
    """
    request = urllib.request.Request(
        url,
        headers={
            'User-Agent': USER_AGENT,
            'Accept': 'application/json',
        },
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            if response.status != 200:
                logger.warning("PokeAPI request to %s returned status %s", url, response.status)
                raise PokeApiError(url, f"HTTP {response.status}", response.status)
            data = response.read().decode('utf-8', errors='replace')
    except urllib.error.HTTPError as exc:
        logger.warning("PokeAPI request to %s returned status %s", url, exc.code)
        raise PokeApiError(url, f"HTTP {exc.code}", exc.code) from exc
    except (urllib.error.URLError, OSError) as exc:
        logger.error("Error fetching %s: %s", url, exc)
        raise PokeApiError(url, str(exc)) from exc
    try:
        return json.loads(data)
    except ValueError as exc:
        logger.error("Invalid JSON from %s: %s", url, exc)
        raise PokeApiError(url, "invalid JSON body") from exc


def _names(entries: Any, key: str) -> List[str]:
    """Collect ``entry[key]['name']`` from a list, skipping malformed rows."""
    names: List[str] = []
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        inner = entry.get(key)
        if isinstance(inner, dict) and isinstance(inner.get('name'), str):
            names.append(inner['name'])
    return names


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _int_or_none(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def parse_sprites(raw: Any) -> Sprites:
    """Map the ``sprites`` object onto the six gallery references."""
    if not isinstance(raw, dict):
        return Sprites()
    other = raw.get('other') if isinstance(raw.get('other'), dict) else {}
    dream = other.get('dream_world') if isinstance(other.get('dream_world'), dict) else {}
    artwork = (
        other.get('official-artwork') if isinstance(other.get('official-artwork'), dict) else {}
    )
    return Sprites(
        front_default=_str_or_none(raw.get('front_default')),
        back_default=_str_or_none(raw.get('back_default')),
        front_shiny=_str_or_none(raw.get('front_shiny')),
        back_shiny=_str_or_none(raw.get('back_shiny')),
        dream_world=_str_or_none(dream.get('front_default')),
        official_artwork=_str_or_none(artwork.get('front_default')),
    )


def parse_detail(data: Any, url: str = "") -> PokemonDetail:
    """Build a ``PokemonDetail`` from a ``/pokemon/{id}`` payload."""
    if not isinstance(data, dict):
        raise PokeApiError(url, "detail payload is not an object")
    pokemon_id = _int_or_none(data.get('id'))
    name = data.get('name')
    if not pokemon_id or pokemon_id <= 0 or not isinstance(name, str):
        raise PokeApiError(url, "detail payload has no id or name")
    species = data.get('species') if isinstance(data.get('species'), dict) else {}
    return PokemonDetail(
        id=pokemon_id,
        name=name,
        abilities=_names(data.get('abilities'), 'ability'),
        types=_names(data.get('types'), 'type'),
        species=str(species.get('name') or ''),
        height=_int_or_none(data.get('height')),
        weight=_int_or_none(data.get('weight')),
        base_experience=_int_or_none(data.get('base_experience')),
        order=_int_or_none(data.get('order')),
        sprites=parse_sprites(data.get('sprites')),
    )


def parse_page(data: Any, url: str = "") -> PokemonPage:
    """Validate a listing payload; entries without a ``url`` are dropped."""
    if not isinstance(data, dict) or not isinstance(data.get('count'), int):
        raise PokeApiError(url, "listing payload has no count")
    results: List[Dict[str, str]] = []
    for entry in data.get('results') or []:
        if isinstance(entry, dict) and isinstance(entry.get('url'), str):
            results.append({'name': str(entry.get('name') or ''), 'url': entry['url']})
    return PokemonPage(count=data['count'], results=results)


class PokeApiClient:
    """Async facade over the PokeAPI endpoints used by the viewer."""

    def __init__(self, base_url: str = "https://pokeapi.co/api/v2", timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    async def get_json(self, url: str) -> Any:
        return await asyncio.to_thread(_http_get_json, url, self.timeout)

    async def fetch_page(self, limit: int, offset: int) -> PokemonPage:
        params = urllib.parse.urlencode({'limit': limit, 'offset': offset})
        url = f"{self.base_url}/pokemon?{params}"
        return parse_page(await self.get_json(url), url)

    async def fetch_detail_by_url(self, url: str) -> PokemonDetail:
        return parse_detail(await self.get_json(url), url)

    async def fetch_detail(self, pokemon_id: int) -> PokemonDetail:
        return await self.fetch_detail_by_url(f"{self.base_url}/pokemon/{int(pokemon_id)}/")

    async def fetch_summary(self, url: str) -> PokemonSummary:
        """Enrich one listing entry into the summary form."""
        detail = await self.fetch_detail_by_url(url)
        return detail.to_summary()
