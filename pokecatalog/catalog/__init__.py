"""
Catalogue package for the PokeAPI viewer.

This package holds the record schemas, the PokeAPI client, the
catalogue session that owns pagination and favourites state, the pure
list and detail projections, and the routes that render them for a
browser.  ``pages`` serves the HTML views; ``catalog_router`` exposes
the same state as JSON under ``/api/catalog``.
"""

from .router import pages as catalog_pages  # noqa: F401
from .router import router as catalog_router  # noqa: F401
