import itertools
from unittest.mock import AsyncMock

import pytest

from app.indexes.base import SearchIndex
from app.models.title import Title
from app.providers.base import EnrichmentProvider
from app.services.filters import ResultFilter
from app.services.pagination import Paginator
from app.services.search import SearchOrchestrator
from app.stores.base import CatalogStore


@pytest.fixture
def store():
    """CatalogStore mock that assigns sequential ids on create."""
    store = AsyncMock(spec=CatalogStore)
    counter = itertools.count(1)

    async def create(title: Title) -> Title:
        return title.model_copy(update={"id": f"new-{next(counter)}"})

    store.create.side_effect = create
    store.get_by_id.return_value = None
    return store


@pytest.fixture
def index():
    index = AsyncMock(spec=SearchIndex)
    index.search.return_value = []
    index.index.return_value = None
    return index


@pytest.fixture
def provider():
    provider = AsyncMock(spec=EnrichmentProvider)
    provider.name = "TestProvider"
    provider.search.return_value = []
    provider.get_availability.return_value = []
    return provider


@pytest.fixture
def orchestrator(store, index, provider):
    return SearchOrchestrator(
        store=store,
        index=index,
        provider=provider,
        result_filter=ResultFilter(),
        paginator=Paginator(),
        max_concurrency=4,
        enrich_availability=False,
    )
