"""Search service merging the local index with provider enrichment."""

import asyncio
import logging
from typing import List, Optional

from app.core.config import get_settings
from app.core.errors import SearchUnavailable
from app.indexes.base import SearchIndex
from app.models.search import SearchQuery, SearchResult
from app.models.title import Title
from app.providers.base import EnrichmentProvider
from app.services.filters import ResultFilter
from app.services.ingestion import (
    Ingested,
    IngestionFailure,
    IngestionOutcome,
    IngestionStage,
    failures,
    successful_titles,
)
from app.services.pagination import Paginator
from app.stores.base import CatalogStore

logger = logging.getLogger(__name__)


def select_candidates(
    candidates: List[Title], local_hits: List[Title], limit: int
) -> List[Title]:
    """Pick up to ``limit`` provider candidates not already in ``local_hits``.

    Provider order is kept. A candidate is a duplicate if its id or its
    external id matches a local hit, or an earlier candidate.
    """
    if limit <= 0:
        return []

    seen_ids = {t.id for t in local_hits if t.id}
    seen_external = {t.external_id for t in local_hits if t.external_id}
    selected = []
    for candidate in candidates:
        if candidate.id and candidate.id in seen_ids:
            continue
        if candidate.external_id and candidate.external_id in seen_external:
            continue
        if candidate.id:
            seen_ids.add(candidate.id)
        if candidate.external_id:
            seen_external.add(candidate.external_id)
        selected.append(candidate)
        if len(selected) >= limit:
            break
    return selected


class SearchOrchestrator:
    """Answer title searches from the local index, backfilling from a provider.

    When the index returns fewer hits than the requested page size, the
    provider is searched for the same text and each new candidate is
    persisted to the catalog store and indexed before being appended to
    the result. A candidate that fails to persist or index is left out;
    it never fails the request. Only a failure of the index read itself
    is fatal.

    Concurrent identical searches may both ingest the same provider title.
    """

    def __init__(
        self,
        store: CatalogStore,
        index: SearchIndex,
        provider: EnrichmentProvider,
        result_filter: ResultFilter,
        paginator: Paginator,
        max_concurrency: Optional[int] = None,
        enrich_availability: Optional[bool] = None,
    ):
        settings = get_settings()
        self.store = store
        self.index = index
        self.provider = provider
        self.result_filter = result_filter
        self.paginator = paginator
        self.max_concurrency = max_concurrency or settings.ingest_concurrency
        self.enrich_availability = (
            settings.enrich_availability
            if enrich_availability is None
            else enrich_availability
        )

    async def search(self, query: SearchQuery) -> SearchResult:
        """Run a search and return one page of merged, filtered titles.

        Raises:
            SearchUnavailable: if the local index cannot be queried.
        """
        try:
            local_hits = await self.index.search(query.text, query.page, query.page_size)
        except Exception as exc:
            logger.error("Search index failed for '%s': %s", query.text, exc)
            raise SearchUnavailable(
                f"Search index unavailable for '{query.text}'", exc
            ) from exc

        titles = list(local_hits)
        if len(local_hits) < query.page_size:
            titles.extend(await self._enrich(query, local_hits))
        else:
            logger.debug(
                "Local index covered '%s' with %d hits", query.text, len(local_hits)
            )

        filtered = self.result_filter.apply(
            titles, platform=query.platform, genre=query.genre, kind=query.kind
        )
        result = self.paginator.paginate(filtered, query.page, query.page_size)
        logger.info(
            "Found %d titles for '%s' (%d local)",
            result.total_results,
            query.text,
            len(local_hits),
        )
        return result

    async def get_by_id(self, title_id: str) -> Optional[Title]:
        """Return the catalog title with ``title_id``, or None if absent."""
        return await self.store.get_by_id(title_id)

    async def _enrich(self, query: SearchQuery, local_hits: List[Title]) -> List[Title]:
        try:
            candidates = await self.provider.search(query.text)
        except Exception as exc:
            logger.warning(
                "Provider %s failed for '%s', using local results only: %s",
                self.provider.name,
                query.text,
                exc,
            )
            return []

        selected = select_candidates(
            candidates, local_hits, query.page_size - len(local_hits)
        )
        if not selected:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks: List[asyncio.Task] = []

        def cancel_siblings(task: asyncio.Task) -> None:
            # A cancelled ingestion aborts the whole batch
            if task.cancelled():
                for sibling in tasks:
                    sibling.cancel()

        async with asyncio.TaskGroup() as group:
            for c in selected:
                task = group.create_task(self._ingest(c, query.region, semaphore))
                task.add_done_callback(cancel_siblings)
                tasks.append(task)
        # Read back in provider order regardless of completion order
        outcomes = [task.result() for task in tasks]

        for failure in failures(outcomes):
            logger.warning(
                "Dropping '%s' from results, %s step failed: %s",
                failure.candidate.name,
                failure.stage.value,
                failure.error,
            )
        return successful_titles(outcomes)

    async def _ingest(
        self, candidate: Title, region: str, semaphore: asyncio.Semaphore
    ) -> IngestionOutcome:
        async with semaphore:
            if self.enrich_availability and candidate.external_id:
                candidate = await self._with_availability(candidate, region)

            try:
                stored = await self.store.create(candidate)
            except Exception as exc:
                return IngestionFailure(candidate, IngestionStage.STORE, exc)

            try:
                await self.index.index(stored)
            except Exception as exc:
                # The stored title remains in the catalog store
                return IngestionFailure(stored, IngestionStage.INDEX, exc)

            return Ingested(stored)

    async def _with_availability(self, candidate: Title, region: str) -> Title:
        try:
            availabilities = await self.provider.get_availability(
                candidate.external_id, candidate.kind, region
            )
        except Exception as exc:
            logger.warning(
                "No availability for '%s' in %s: %s", candidate.name, region, exc
            )
            return candidate
        return candidate.merge_availabilities(availabilities)
