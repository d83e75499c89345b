"""PokeCatalog: a browser-based viewer for the PokeAPI creature catalogue."""

__version__ = "1.0.0"
