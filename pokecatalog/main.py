# pokecatalog/main.py
import locale
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .catalog import catalog_pages, catalog_router
from .catalog.pokeapi_service import PokeApiClient
from .catalog.session import CatalogSession
from .config import AppConfig, get_config
from .storage import FavoritesRepository, JsonKeyValueStore


logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        )
    else:
        root.setLevel(level)


def configure_locale() -> None:
    """Adopt the environment's collation so name sorting is locale-aware."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logger.warning("Could not apply the environment locale, sorting by code point: %s", exc)


def create_app(
    config: Optional[AppConfig] = None,
    client: Optional[PokeApiClient] = None,
    repository: Optional[FavoritesRepository] = None,
) -> FastAPI:
    config = config or get_config()
    configure_logging(config.log_level)
    configure_locale()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session = CatalogSession(
            client=client or PokeApiClient(config.api_base, timeout=config.http_timeout),
            repository=repository or FavoritesRepository(JsonKeyValueStore(config.storage_file)),
            max_concurrency=config.max_concurrency,
        )
        app.state.session = session
        logger.info("Loaded %s favourites", len(session.snapshot.favorites))
        await session.load_page(1)
        yield

    app = FastAPI(
        title="PokeCatalog",
        description=(
            "Browse the PokeAPI catalogue page by page, filter and sort the "
            "current page, open a detail view and keep a list of favourites."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.include_router(catalog_pages)
    app.include_router(catalog_router)
    return app


app = create_app()
