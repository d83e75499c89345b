"""
Detail view state for a single record.

Each subject goes through ``idle -> loading -> loaded | errored``.  A
failed fetch is terminal for that subject: the page shows a static
message and a way back to the list, and a new attempt only happens when
the user opens the record again.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .pokeapi_service import PokeApiClient, PokeApiError
from .schemas import PokemonDetail, PokemonSummary
from .tasks import CancellationToken


logger = logging.getLogger(__name__)

DETAIL_ERROR_MESSAGE = "Could not load the Pokémon details. Please try again."
NOT_FOUND_MESSAGE = "That Pokémon does not exist."

# (label, attribute of ``Sprites``) in gallery order.
GALLERY_SLOTS: Tuple[Tuple[str, str], ...] = (
    ("Front", "front_default"),
    ("Back", "back_default"),
    ("Front shiny", "front_shiny"),
    ("Back shiny", "back_shiny"),
    ("Dream world", "dream_world"),
    ("Official artwork", "official_artwork"),
)


class DetailStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


class DetailSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: DetailStatus = DetailStatus.IDLE
    subject: Optional[PokemonSummary] = None
    detail: Optional[PokemonDetail] = None
    error: Optional[str] = None
    not_found: bool = False


class ImageSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    url: str


def _tenths(value: Optional[int]) -> str:
    if value is None:
        return "n/a"
    return f"{value / 10:g}"


def _plain(value: Optional[int]) -> str:
    return "n/a" if value is None else str(value)


def attribute_rows(detail: PokemonDetail) -> List[Tuple[str, str]]:
    """The seven labelled rows shown next to the hero sprite.

    Height is stored in decimetres and weight in hectograms.
    """
    return [
        ("Height", f"{_tenths(detail.height)} m"),
        ("Weight", f"{_tenths(detail.weight)} kg"),
        ("Base experience", _plain(detail.base_experience)),
        ("Abilities", ", ".join(detail.abilities)),
        ("Types", ", ".join(detail.types)),
        ("Species", detail.species),
        ("Order", _plain(detail.order)),
    ]


def gallery_slots(detail: PokemonDetail) -> List[ImageSlot]:
    """Image slots with a reference; absent ones are left out entirely."""
    slots = []
    for label, attr in GALLERY_SLOTS:
        url = getattr(detail.sprites, attr)
        if url:
            slots.append(ImageSlot(label=label, url=url))
    return slots


class DetailLoader:
    """Holds the detail snapshot for whichever record is on screen."""

    def __init__(self, client: PokeApiClient):
        self.client = client
        self.snapshot = DetailSnapshot()
        self._token: Optional[CancellationToken] = None

    def reset(self) -> DetailSnapshot:
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self.snapshot = DetailSnapshot()
        return self.snapshot

    async def show(self, subject: PokemonSummary) -> DetailSnapshot:
        """Fetch ``subject``'s details, superseding any earlier request."""
        return await self._load(subject.id, subject)

    async def show_id(self, pokemon_id: int) -> DetailSnapshot:
        """Fetch a record known only by id, as for a direct link.

        The subject is filled in from the same response, so the record
        is fetched once.
        """
        return await self._load(pokemon_id, None)

    async def _load(self, pokemon_id: int, subject: Optional[PokemonSummary]) -> DetailSnapshot:
        if self._token is not None:
            self._token.cancel()
        token = CancellationToken()
        self._token = token
        self.snapshot = DetailSnapshot(status=DetailStatus.LOADING, subject=subject)

        try:
            detail = await self.client.fetch_detail(pokemon_id)
        except PokeApiError as exc:
            if token.cancelled:
                return self.snapshot
            logger.error("Failed to load details for #%s: %s", pokemon_id, exc)
            self.snapshot = DetailSnapshot(
                status=DetailStatus.ERRORED,
                subject=subject,
                error=NOT_FOUND_MESSAGE if exc.not_found else DETAIL_ERROR_MESSAGE,
                not_found=exc.not_found,
            )
            return self.snapshot

        if token.cancelled:
            logger.debug("Discarding superseded details for #%s", pokemon_id)
            return self.snapshot
        self.snapshot = DetailSnapshot(
            status=DetailStatus.LOADED, subject=subject or detail.to_summary(), detail=detail
        )
        return self.snapshot
