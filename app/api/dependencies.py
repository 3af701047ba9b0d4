"""Explicit wiring of the search collaborators."""

from fastapi import Request
from sqlalchemy.engine import Engine

from app.core.config import Settings
from app.indexes.elasticsearch_index import ElasticsearchIndex
from app.providers.tmdb_provider import TmdbProvider
from app.services.filters import ResultFilter
from app.services.pagination import Paginator
from app.services.search import SearchOrchestrator
from app.stores.sql_store import SqlCatalogStore


def build_orchestrator(settings: Settings, engine: Engine) -> SearchOrchestrator:
    """Construct the orchestrator and its collaborators from settings."""
    return SearchOrchestrator(
        store=SqlCatalogStore(engine),
        index=ElasticsearchIndex(
            base_url=settings.elasticsearch_url,
            index_name=settings.elasticsearch_index,
        ),
        provider=TmdbProvider(
            api_key=settings.tmdb_api_key, language=settings.tmdb_language
        ),
        result_filter=ResultFilter(),
        paginator=Paginator(),
        max_concurrency=settings.ingest_concurrency,
        enrich_availability=settings.enrich_availability,
    )


def get_orchestrator(request: Request) -> SearchOrchestrator:
    """FastAPI dependency returning the orchestrator built at startup."""
    return request.app.state.orchestrator
