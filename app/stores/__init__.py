"""Catalog store implementations."""

from app.stores.base import CatalogStore
from app.stores.sql_store import SqlCatalogStore

__all__ = ["CatalogStore", "SqlCatalogStore"]
