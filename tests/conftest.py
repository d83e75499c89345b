import asyncio
import os
import sys
from typing import Any, Dict, List, Optional

import pytest

# Ensure repository root is on sys.path so tests can import "pokecatalog".
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from pokecatalog.catalog.pokeapi_service import PokeApiClient, PokeApiError  # noqa: E402
from pokecatalog.catalog.schemas import PokemonSummary  # noqa: E402
from pokecatalog.storage import FavoritesRepository, JsonKeyValueStore  # noqa: E402

BASE = "https://pokeapi.test/api/v2"


def detail_payload(
    pokemon_id: int,
    name: str,
    abilities: Optional[List[str]] = None,
    types: Optional[List[str]] = None,
    species: Optional[str] = None,
    height: int = 7,
    weight: int = 69,
    sprites: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    if sprites is None:
        sprites = {
            "front_default": f"https://img.test/{pokemon_id}.png",
            "back_default": f"https://img.test/back/{pokemon_id}.png",
            "front_shiny": f"https://img.test/shiny/{pokemon_id}.png",
            "back_shiny": f"https://img.test/back/shiny/{pokemon_id}.png",
            "other": {
                "dream_world": {"front_default": f"https://img.test/dw/{pokemon_id}.svg"},
                "official-artwork": {"front_default": f"https://img.test/art/{pokemon_id}.png"},
            },
        }
    return {
        "id": pokemon_id,
        "name": name,
        "abilities": [{"ability": {"name": a}} for a in (abilities or ["static"])],
        "types": [{"type": {"name": t}} for t in (types or ["electric"])],
        "species": {"name": species or name},
        "height": height,
        "weight": weight,
        "base_experience": 112,
        "order": pokemon_id * 10,
        "sprites": sprites,
    }


def page_url(page: int) -> str:
    return f"{BASE}/pokemon?limit=20&offset={(page - 1) * 20}"


def detail_url(pokemon_id: int) -> str:
    return f"{BASE}/pokemon/{pokemon_id}/"


class FakePokeApi(PokeApiClient):
    """In-memory PokeAPI: URL -> payload, with optional failures and gates."""

    def __init__(self):
        super().__init__(BASE)
        self.responses: Dict[str, Any] = {}
        self.failures = set()
        self.gates: Dict[str, asyncio.Event] = {}
        self.requested: List[str] = []

    def add_pokemon(self, pokemon_id: int, name: str, **kwargs) -> None:
        self.responses[detail_url(pokemon_id)] = detail_payload(pokemon_id, name, **kwargs)

    def add_page(self, page: int, ids: List[int], count: int) -> None:
        self.responses[page_url(page)] = {
            "count": count,
            "results": [
                {"name": self.responses[detail_url(i)]["name"], "url": detail_url(i)}
                for i in ids
            ],
        }

    async def get_json(self, url: str) -> Any:
        self.requested.append(url)
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        if url in self.failures:
            raise PokeApiError(url, "HTTP 500", 500)
        if url not in self.responses:
            raise PokeApiError(url, "HTTP 404", 404)
        return self.responses[url]


@pytest.fixture
def fake_api() -> FakePokeApi:
    api = FakePokeApi()
    api.add_pokemon(25, "pikachu", abilities=["static", "lightning-rod"], types=["electric"])
    api.add_pokemon(26, "raichu", abilities=["static"], types=["electric"])
    api.add_pokemon(1, "bulbasaur", abilities=["overgrow"], types=["grass", "poison"])
    api.add_pokemon(4, "charmander", abilities=["blaze"], types=["fire"])
    api.add_pokemon(7, "squirtle", abilities=["torrent"], types=["water"])
    api.add_page(1, [1, 4, 25], count=45)
    api.add_page(2, [26, 7], count=45)
    api.add_page(3, [7], count=45)
    return api


@pytest.fixture
def repository(tmp_path) -> FavoritesRepository:
    return FavoritesRepository(JsonKeyValueStore(tmp_path / "storage.json"))


def summary(pokemon_id: int, name: str, **kwargs) -> PokemonSummary:
    return PokemonSummary(id=pokemon_id, name=name, **kwargs)
