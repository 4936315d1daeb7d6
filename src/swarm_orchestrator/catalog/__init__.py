"""Agent catalog - static specialist profiles."""

from .loader import DEFAULT_CATALOG_PATH, AgentCatalog, load_catalog, parse_catalog

__all__ = [
	"AgentCatalog",
	"DEFAULT_CATALOG_PATH",
	"load_catalog",
	"parse_catalog",
]
