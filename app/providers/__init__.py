"""External catalog providers used for search enrichment."""

from app.providers.base import EnrichmentProvider
from app.providers.tmdb_provider import TmdbProvider

__all__ = ["EnrichmentProvider", "TmdbProvider"]
