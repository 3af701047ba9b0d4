"""Search index implementations."""

from app.indexes.base import SearchIndex
from app.indexes.elasticsearch_index import ElasticsearchIndex

__all__ = ["SearchIndex", "ElasticsearchIndex"]
