"""
Catalogue session: the single owner of the viewer's state.

The session keeps an immutable ``CatalogSnapshot`` and replaces it on
every transition.  It fetches pages from PokeAPI, enriches each listing
entry with a second request, tracks pagination and view selection, and
keeps the favourites collection in sync with its repository.

State changes go through small pure functions (``apply_page``,
``toggle_in``, ...) so they can be reasoned about and tested without
any network.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from ..config import PAGE_SIZE
from .details import DetailLoader, DetailSnapshot
from .pokeapi_service import PokeApiClient, PokeApiError
from .projection import ListQuery, ListViewModel, Pagination, build_list_view
from .schemas import PokemonSummary
from .tasks import CancellationToken, LoadCancelled, gather_bounded

if TYPE_CHECKING:
    from ..storage import FavoritesRepository


logger = logging.getLogger(__name__)

PAGE_ERROR_MESSAGE = "Could not load this page of Pokémon. Showing the previous results."
NO_PAGE_MESSAGE = "Could not load Pokémon from the service. Reload the page to try again."


class View(str, Enum):
    LIST = "list"
    FAVORITES = "favorites"
    DETAILS = "details"


class CatalogSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    view: View = View.LIST
    current_page: int = 1
    total_pages: int = 0
    records: Tuple[PokemonSummary, ...] = ()
    favorites: Tuple[PokemonSummary, ...] = ()
    selected: Optional[PokemonSummary] = None
    page_error: Optional[str] = None
    loading: bool = False


def total_pages_for(count: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(max(0, count) / page_size)


def apply_page(
    snapshot: CatalogSnapshot, page: int, count: int, records: Sequence[PokemonSummary]
) -> CatalogSnapshot:
    return snapshot.model_copy(
        update={
            "current_page": page,
            "total_pages": total_pages_for(count),
            "records": tuple(records),
            "page_error": None,
            "loading": False,
        }
    )


def contains(favorites: Sequence[PokemonSummary], record: PokemonSummary) -> bool:
    return any(f.id == record.id for f in favorites)


def toggle_in(
    favorites: Sequence[PokemonSummary], record: PokemonSummary
) -> Tuple[PokemonSummary, ...]:
    """Remove ``record`` by id when present, otherwise append it."""
    if contains(favorites, record):
        return tuple(f for f in favorites if f.id != record.id)
    return tuple(favorites) + (record,)


class CatalogSession:
    """Coordinates fetches, pagination, view selection and favourites."""

    def __init__(
        self,
        client: PokeApiClient,
        repository: "FavoritesRepository",
        max_concurrency: int = 8,
    ):
        self.client = client
        self.repository = repository
        self.max_concurrency = max_concurrency
        self.details = DetailLoader(client)
        self._page_token: Optional[CancellationToken] = None
        # Favourites are read once, here.
        self.snapshot = CatalogSnapshot(favorites=repository.load())

    # ------------------------------------------------------------------
    # Pagination

    def in_range(self, page: int) -> bool:
        if page < 1:
            return False
        total = self.snapshot.total_pages
        return total == 0 or page <= total

    async def load_page(self, page: int) -> bool:
        """Fetch and enrich page ``page``; returns whether it was applied.

        On failure the previous records and page number are kept and
        ``page_error`` is set.  A load superseded by a newer one is
        dropped without touching the snapshot.
        """
        if not self.in_range(page):
            return False
        if self._page_token is not None:
            self._page_token.cancel()
        token = CancellationToken()
        self._page_token = token
        self.snapshot = self.snapshot.model_copy(update={"loading": True})

        try:
            listing = await self.client.fetch_page(PAGE_SIZE, (page - 1) * PAGE_SIZE)
            token.raise_if_cancelled()
            urls = [entry["url"] for entry in listing.results]
            records = await gather_bounded(
                urls, self.client.fetch_summary, self.max_concurrency, token
            )
            token.raise_if_cancelled()
        except LoadCancelled:
            logger.debug("Page %s load superseded", page)
            return False
        except PokeApiError as exc:
            if token.cancelled:
                return False
            logger.error("Failed to load page %s: %s", page, exc)
            message = PAGE_ERROR_MESSAGE if self.snapshot.records else NO_PAGE_MESSAGE
            self.snapshot = self.snapshot.model_copy(
                update={"page_error": message, "loading": False}
            )
            return False

        self.snapshot = apply_page(self.snapshot, page, listing.count, records)
        logger.info("Loaded page %s of %s", page, self.snapshot.total_pages)
        return True

    async def ensure_loaded(self) -> bool:
        """Retry the current page when none has been applied yet."""
        if self.snapshot.total_pages:
            return True
        return await self.load_page(self.snapshot.current_page)

    async def next_page(self) -> bool:
        snap = self.snapshot
        if snap.view is View.FAVORITES or snap.current_page >= snap.total_pages:
            return False
        return await self.load_page(snap.current_page + 1)

    async def prev_page(self) -> bool:
        snap = self.snapshot
        if snap.view is View.FAVORITES or snap.current_page <= 1:
            return False
        return await self.load_page(snap.current_page - 1)

    # ------------------------------------------------------------------
    # Favourites

    def is_favorite(self, record: PokemonSummary) -> bool:
        return contains(self.snapshot.favorites, record)

    def toggle_favorite(self, record: PokemonSummary) -> bool:
        """Flip membership of ``record`` and persist. Returns the new membership."""
        favorites = toggle_in(self.snapshot.favorites, record)
        self.snapshot = self.snapshot.model_copy(update={"favorites": favorites})
        if not self.repository.save(favorites):
            logger.warning("Favourites kept in memory only; they may not survive a restart")
        return self.is_favorite(record)

    # ------------------------------------------------------------------
    # View selection

    def find_record(self, pokemon_id: int) -> Optional[PokemonSummary]:
        for record in self.snapshot.records + self.snapshot.favorites:
            if record.id == pokemon_id:
                return record
        selected = self.snapshot.selected
        if selected is not None and selected.id == pokemon_id:
            return selected
        return None

    def show_list(self) -> CatalogSnapshot:
        self.details.reset()
        self.snapshot = self.snapshot.model_copy(update={"view": View.LIST, "selected": None})
        return self.snapshot

    def show_favorites(self) -> CatalogSnapshot:
        self.details.reset()
        self.snapshot = self.snapshot.model_copy(
            update={"view": View.FAVORITES, "selected": None}
        )
        return self.snapshot

    async def show_details(self, record: PokemonSummary) -> DetailSnapshot:
        self.snapshot = self.snapshot.model_copy(
            update={"view": View.DETAILS, "selected": record}
        )
        return await self.details.show(record)

    async def open_details(self, pokemon_id: int) -> DetailSnapshot:
        """Show a record by id, using the known summary when there is one."""
        record = self.find_record(pokemon_id)
        if record is not None:
            return await self.show_details(record)
        self.snapshot = self.snapshot.model_copy(update={"view": View.DETAILS, "selected": None})
        detail = await self.details.show_id(pokemon_id)
        if detail.subject is not None and detail.subject.id == pokemon_id:
            self.snapshot = self.snapshot.model_copy(update={"selected": detail.subject})
        return detail

    # ------------------------------------------------------------------
    # Projections

    def list_view(self, query: ListQuery) -> ListViewModel:
        """The card grid for the active list-like view."""
        snap = self.snapshot
        if snap.view is View.FAVORITES:
            return build_list_view(
                snap.favorites, query, self.is_favorite, title="My favorites"
            )
        pagination = Pagination(
            page=snap.current_page,
            total_pages=max(snap.total_pages, 1),
            has_prev=snap.current_page > 1,
            has_next=snap.current_page < snap.total_pages,
        )
        return build_list_view(snap.records, query, self.is_favorite, pagination=pagination)
