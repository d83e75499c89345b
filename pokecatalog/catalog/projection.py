"""
List view projection.

Everything here is a pure function of a record collection and a
``ListQuery``: the filter option sets, the filtered and sorted records
and the view model the renderer turns into a card grid.  The same
projection serves both the paginated list and the favourites view.
"""

from __future__ import annotations

import locale
from typing import Callable, Iterable, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .schemas import PokemonSummary


OrderOption = Literal["name-asc", "name-desc", "id-asc", "id-desc"]

ORDER_OPTIONS = {
    "name-asc": "Name A-Z",
    "name-desc": "Name Z-A",
    "id-asc": "ID ascending",
    "id-desc": "ID descending",
}
DEFAULT_ORDER = "name-asc"

EMPTY_MESSAGE = "No Pokémon found."
PLACEHOLDER_URL = "https://placehold.co/{size}/ADD8E6/000000?text={letter}"


class ListQuery(BaseModel):
    """Search, filter and sort settings of the list view."""

    model_config = ConfigDict(frozen=True)

    search: str = ""
    ability: str = ""
    type: str = ""
    species: str = ""
    order: OrderOption = DEFAULT_ORDER


class FilterOptions(BaseModel):
    abilities: List[str] = Field(default_factory=list)
    types: List[str] = Field(default_factory=list)
    species: List[str] = Field(default_factory=list)


class Card(BaseModel):
    record: PokemonSummary
    image_url: str
    placeholder_url: str
    is_favorite: bool


class Pagination(BaseModel):
    page: int
    total_pages: int
    has_prev: bool
    has_next: bool

    @property
    def label(self) -> str:
        return f"Page {self.page} of {self.total_pages}"


class ListViewModel(BaseModel):
    title: str
    query: ListQuery
    options: FilterOptions
    cards: List[Card]
    empty_message: Optional[str] = None
    pagination: Optional[Pagination] = None


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for v in values:
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out


def filter_options(records: Sequence[PokemonSummary]) -> FilterOptions:
    """Unique abilities, types and species in order of first appearance."""
    return FilterOptions(
        abilities=_unique(a for r in records for a in r.abilities),
        types=_unique(t for r in records for t in r.types),
        species=_unique(r.species for r in records),
    )


def apply_filters(records: Sequence[PokemonSummary], query: ListQuery) -> List[PokemonSummary]:
    """Conjunctive filters; an empty value disables that filter."""
    items = list(records)
    term = query.search.lower()
    if term:
        items = [r for r in items if term in r.name.lower()]
    if query.ability:
        items = [r for r in items if query.ability in r.abilities]
    if query.type:
        items = [r for r in items if query.type in r.types]
    if query.species:
        items = [r for r in items if r.species == query.species]
    return items


def sort_records(records: Sequence[PokemonSummary], order: str) -> List[PokemonSummary]:
    """Stable sort; records with equal keys keep their relative order."""
    field, _, direction = (order if order in ORDER_OPTIONS else DEFAULT_ORDER).partition("-")
    if field == "id":
        key: Callable[[PokemonSummary], object] = lambda r: r.id
    else:
        key = lambda r: locale.strxfrm(r.name)
    return sorted(records, key=key, reverse=direction == "desc")


def project(records: Sequence[PokemonSummary], query: ListQuery) -> List[PokemonSummary]:
    return sort_records(apply_filters(records, query), query.order)


def placeholder_url(name: str, size: str = "96x96") -> str:
    letter = name[:1].upper() or "?"
    return PLACEHOLDER_URL.format(size=size, letter=letter)


def build_list_view(
    records: Sequence[PokemonSummary],
    query: ListQuery,
    is_favorite: Callable[[PokemonSummary], bool],
    title: str = "Pokémon list",
    pagination: Optional[Pagination] = None,
) -> ListViewModel:
    """Project ``records`` into the card grid shown for a list or favourites view."""
    visible = project(records, query)
    cards = []
    for record in visible:
        fallback = placeholder_url(record.name)
        cards.append(
            Card(
                record=record,
                image_url=record.image or fallback,
                placeholder_url=fallback,
                is_favorite=is_favorite(record),
            )
        )
    return ListViewModel(
        title=title,
        query=query,
        options=filter_options(records),
        cards=cards,
        empty_message=None if cards else EMPTY_MESSAGE,
        pagination=pagination,
    )
