"""
Route definitions for the catalogue viewer.

HTML pages (``pages``):
- GET  /                         : list view of the current page
- GET  /favorites                : favourites view (not paginated)
- GET  /details/{pokemon_id}     : detail view
- POST /page/next, /page/prev    : pagination intents
- POST /favorites/{id}/toggle    : favourite toggle intent

JSON endpoints under /api/catalog (``router``):
- GET  /pokemon                  : projected current page
- GET  /pokemon/{pokemon_id}     : detail form of one record
- GET  /favorites                : favourites collection
- POST /favorites/{pokemon_id}   : toggle a favourite
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..config import PAGE_SIZE
from .details import DetailStatus
from .pokeapi_service import PokeApiError
from .projection import DEFAULT_ORDER, ListQuery, OrderOption
from .render import render_details, render_layout, render_list
from .schemas import PaginatedPokemon, PokemonDetail, PokemonSummary
from .session import CatalogSession, View


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["catalog"])
pages = APIRouter(tags=["pages"])


def get_session(request: Request) -> CatalogSession:
    return request.app.state.session


def list_query(
    q: str = Query(default="", description="Name search (case-insensitive)"),
    ability: str = Query(default="", description="Filter by ability"),
    type_: str = Query(default="", alias="type", description="Filter by type"),
    species: str = Query(default="", description="Filter by species"),
    order: OrderOption = Query(default=DEFAULT_ORDER, description="Sort order of the cards"),
) -> ListQuery:
    return ListQuery(search=q, ability=ability, type=type_, species=species, order=order)


def _safe_next(target: Optional[str]) -> str:
    # Only redirect within this site.
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return "/"


async def _resolve(session: CatalogSession, pokemon_id: int) -> PokemonSummary:
    """Find a record the session knows, or fetch it for a direct link.

    Only an upstream 404 becomes a 404 here; any other failure is a 502.
    """
    record = session.find_record(pokemon_id)
    if record is not None:
        return record
    try:
        detail = await session.client.fetch_detail(pokemon_id)
    except PokeApiError as exc:
        logger.warning("Could not resolve #%s: %s", pokemon_id, exc)
        if exc.not_found:
            raise HTTPException(status_code=404, detail="Pokémon not found") from exc
        raise HTTPException(status_code=502, detail="Upstream error") from exc
    return detail.to_summary()


# ---------------------------------------------------------------------------
# HTML pages


@pages.get("/health")
async def health_check():
    return {"status": "ok"}


@pages.get("/", response_class=HTMLResponse)
async def list_page(
    query: ListQuery = Depends(list_query),
    session: CatalogSession = Depends(get_session),
) -> HTMLResponse:
    session.show_list()
    await session.ensure_loaded()
    snap = session.snapshot
    body = render_list(session.list_view(query), action="/", notice=snap.page_error)
    return HTMLResponse(render_layout(body, len(snap.favorites), "list"))


@pages.get("/favorites", response_class=HTMLResponse)
async def favorites_page(
    query: ListQuery = Depends(list_query),
    session: CatalogSession = Depends(get_session),
) -> HTMLResponse:
    session.show_favorites()
    body = render_list(session.list_view(query), action="/favorites")
    return HTMLResponse(render_layout(body, len(session.snapshot.favorites), "favorites"))


@pages.get("/details/{pokemon_id}", response_class=HTMLResponse)
async def details_page(
    pokemon_id: int, session: CatalogSession = Depends(get_session)
) -> HTMLResponse:
    snapshot = await session.open_details(pokemon_id)
    subject = snapshot.subject
    body = render_details(snapshot, subject is not None and session.is_favorite(subject))
    return HTMLResponse(render_layout(body, len(session.snapshot.favorites), "details"))


@pages.post("/page/next")
async def next_page(session: CatalogSession = Depends(get_session)):
    await session.next_page()
    return RedirectResponse("/", status_code=303)


@pages.post("/page/prev")
async def prev_page(session: CatalogSession = Depends(get_session)):
    await session.prev_page()
    return RedirectResponse("/", status_code=303)


@pages.post("/favorites/{pokemon_id}/toggle")
async def toggle_favorite_page(
    pokemon_id: int,
    next: Optional[str] = Query(default=None),
    session: CatalogSession = Depends(get_session),
):
    record = await _resolve(session, pokemon_id)
    session.toggle_favorite(record)
    return RedirectResponse(_safe_next(next), status_code=303)


# ---------------------------------------------------------------------------
# JSON API


@router.get("/pokemon", response_model=PaginatedPokemon)
async def list_pokemon(
    favorites: bool = Query(default=False, description="Project the favourites instead"),
    query: ListQuery = Depends(list_query),
    session: CatalogSession = Depends(get_session),
) -> PaginatedPokemon:
    if favorites:
        session.show_favorites()
    else:
        session.show_list()
        await session.ensure_loaded()
    view = session.list_view(query)
    snap = session.snapshot
    paginated = snap.view is View.LIST
    return PaginatedPokemon(
        page=snap.current_page if paginated else 1,
        page_size=PAGE_SIZE if paginated else len(view.cards),
        total_pages=max(snap.total_pages, 1) if paginated else 1,
        paginated=paginated,
        abilities=view.options.abilities,
        types=view.options.types,
        species=view.options.species,
        items=[card.record for card in view.cards],
    )


@router.get("/pokemon/{pokemon_id}", response_model=PokemonDetail)
async def get_pokemon(
    pokemon_id: int, session: CatalogSession = Depends(get_session)
) -> PokemonDetail:
    snapshot = await session.open_details(pokemon_id)
    if snapshot.not_found:
        raise HTTPException(status_code=404, detail="Pokémon not found")
    if snapshot.status is not DetailStatus.LOADED or snapshot.detail is None:
        raise HTTPException(status_code=502, detail=snapshot.error or "Upstream error")
    return snapshot.detail


@router.get("/favorites", response_model=List[PokemonSummary])
async def list_favorites(session: CatalogSession = Depends(get_session)) -> List[PokemonSummary]:
    return list(session.snapshot.favorites)


@router.post("/favorites/{pokemon_id}")
async def toggle_favorite(
    pokemon_id: int, session: CatalogSession = Depends(get_session)
):
    record = await _resolve(session, pokemon_id)
    return {"id": pokemon_id, "favorite": session.toggle_favorite(record)}
