"""Elasticsearch-backed title index over the REST API."""

import logging
from typing import Any, List

import niquests
from pydantic import ValidationError
from urllib3.util import Retry

from app.core.config import get_settings
from app.core.errors import IndexUnavailable, IndexWriteError
from app.indexes.base import SearchIndex
from app.models.title import Title

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ["name^3", "original_name^2", "overview"]

INDEX_DEFINITION: dict[str, Any] = {
    "settings": {
        "number_of_shards": 1,
        "number_of_replicas": 1,
        "analysis": {
            "analyzer": {
                "title_analyzer": {
                    "type": "custom",
                    "tokenizer": "standard",
                    "filter": ["lowercase", "asciifolding", "stop"],
                }
            }
        },
    },
    "mappings": {
        "properties": {
            "name": {"type": "text", "analyzer": "title_analyzer"},
            "original_name": {"type": "text", "analyzer": "title_analyzer"},
            "overview": {"type": "text", "analyzer": "standard"},
            "kind": {"type": "keyword"},
            "release_date": {"type": "date"},
            "vote_average": {"type": "double"},
            "vote_count": {"type": "integer"},
            "genres": {"type": "keyword"},
            "external_id": {"type": "keyword"},
            "availabilities": {
                "type": "nested",
                "properties": {
                    "platform": {"type": "keyword"},
                    "region": {"type": "keyword"},
                    "offer_type": {"type": "keyword"},
                },
            },
        }
    },
}


class ElasticsearchIndex(SearchIndex):
    """Title index stored in a single Elasticsearch index."""

    def __init__(
        self,
        base_url: str | None = None,
        index_name: str | None = None,
        retry_config: Retry | None = None,
        session: niquests.AsyncSession | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.elasticsearch_url).rstrip("/")
        self.index_name = index_name or settings.elasticsearch_index
        self.timeout = settings.index_timeout
        if retry_config is None:
            retry_config = Retry(
                total=3,
                backoff_factor=0.5,
                status_forcelist=[429, 502, 503, 504],
                allowed_methods=["HEAD", "GET", "PUT", "DELETE", "POST"],
            )
        self.session = session or niquests.AsyncSession(retries=retry_config)

    @property
    def index_url(self) -> str:
        return f"{self.base_url}/{self.index_name}"

    async def aclose(self) -> None:
        """Properly close the internal HTTP session."""
        if self.session:
            await self.session.close()

    @staticmethod
    def build_query(text: str, page: int, page_size: int) -> dict[str, Any]:
        """Build the relevance query for one page of results."""
        return {
            "query": {
                "multi_match": {
                    "query": text,
                    "fields": SEARCH_FIELDS,
                    "type": "best_fields",
                    "fuzziness": "AUTO",
                }
            },
            "from": (max(page, 1) - 1) * page_size,
            "size": page_size,
            "sort": [{"_score": "desc"}, {"vote_average": "desc"}],
        }

    async def search(self, text: str, page: int = 1, page_size: int = 20) -> List[Title]:
        body = self.build_query(text, page, page_size)
        try:
            response = await self.session.post(
                f"{self.index_url}/_search", json=body, timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except niquests.exceptions.RequestException as exc:
            logger.error("Index search failed for '%s': %s", text, exc)
            raise IndexUnavailable(f"Index search failed for '{text}'", exc) from exc

        titles = []
        for hit in payload.get("hits", {}).get("hits", []):
            try:
                titles.append(Title.model_validate({**hit["_source"], "id": hit["_id"]}))
            except (KeyError, ValidationError) as exc:
                logger.warning("Skipping malformed index document %s: %s", hit.get("_id"), exc)
        return titles

    async def index(self, title: Title) -> None:
        if not title.id:
            raise IndexWriteError("Cannot index a title without an id")
        document = title.model_dump(mode="json", exclude={"id"})
        try:
            response = await self.session.put(
                f"{self.index_url}/_doc/{title.id}", json=document, timeout=self.timeout
            )
            response.raise_for_status()
        except niquests.exceptions.RequestException as exc:
            logger.error("Failed to index title %s: %s", title.id, exc)
            raise IndexWriteError(f"Failed to index title {title.id}", exc) from exc

    async def delete(self, title_id: str) -> None:
        try:
            response = await self.session.delete(
                f"{self.index_url}/_doc/{title_id}", timeout=self.timeout
            )
            if response.status_code == 404:
                return
            response.raise_for_status()
        except niquests.exceptions.RequestException as exc:
            raise IndexWriteError(f"Failed to delete title {title_id}", exc) from exc

    async def exists(self) -> bool:
        try:
            response = await self.session.head(self.index_url, timeout=self.timeout)
        except niquests.exceptions.RequestException as exc:
            raise IndexUnavailable(f"Index {self.index_name} unreachable", exc) from exc
        return response.status_code == 200

    async def create(self) -> None:
        try:
            response = await self.session.put(
                self.index_url, json=INDEX_DEFINITION, timeout=self.timeout
            )
            response.raise_for_status()
        except niquests.exceptions.RequestException as exc:
            raise IndexUnavailable(f"Failed to create index {self.index_name}", exc) from exc
        logger.info("Created search index %s", self.index_name)
