"""
Pydantic schema definitions for the catalogue module.

``PokemonSummary`` carries exactly the fields needed to render a card
in the list view and is also the shape persisted in the favourites
store. ``PokemonDetail`` is the extended form fetched on demand for the
detail page. ``PaginatedPokemon`` bundles a projected list with its
pagination metadata for the JSON API.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PokemonSummary(BaseModel):
    """A single catalogue entry in summary form.

    Instances are immutable once built from an enrichment fetch. The
    ``image`` field is the default front sprite and is ``None`` when the
    service does not provide one, in which case the front-end renders a
    placeholder glyph instead.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    name: str
    image: Optional[str] = None
    abilities: List[str] = Field(default_factory=list)
    types: List[str] = Field(default_factory=list)
    species: str = ""


class Sprites(BaseModel):
    """Image references of a record. Any of them may be absent."""

    model_config = ConfigDict(frozen=True)

    front_default: Optional[str] = None
    back_default: Optional[str] = None
    front_shiny: Optional[str] = None
    back_shiny: Optional[str] = None
    # Artwork lives under ``sprites.other`` in the service payload.
    dream_world: Optional[str] = None
    official_artwork: Optional[str] = None


class PokemonDetail(BaseModel):
    """Extended attributes for the detail page.

    ``height`` and ``weight`` keep the service units (decimetres and
    hectograms); conversion happens at render time.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    abilities: List[str] = Field(default_factory=list)
    types: List[str] = Field(default_factory=list)
    species: str = ""
    height: Optional[int] = None
    weight: Optional[int] = None
    base_experience: Optional[int] = None
    order: Optional[int] = None
    sprites: Sprites = Field(default_factory=Sprites)

    def to_summary(self) -> PokemonSummary:
        return PokemonSummary(
            id=self.id,
            name=self.name,
            image=self.sprites.front_default,
            abilities=list(self.abilities),
            types=list(self.types),
            species=self.species,
        )


class PokemonPage(BaseModel):
    """One page of the service's index listing: ``{count, results}``."""

    count: int
    results: List[dict] = Field(default_factory=list)


class PaginatedPokemon(BaseModel):
    """A wrapper for paginated results returned from ``/pokemon``."""

    page: int
    page_size: int
    total_pages: int
    paginated: bool
    abilities: List[str]
    types: List[str]
    species: List[str]
    items: List[PokemonSummary]
