"""Catalog store interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.models.title import Title


class CatalogStore(ABC):
    """Abstract system of record for titles.

    Implementations own id and timestamp assignment. Transport or database
    failures must surface as ``StoreUnavailable``.
    """

    @abstractmethod
    async def get_by_id(self, title_id: str) -> Optional[Title]:
        """Return the title with ``title_id`` or None if absent."""
        pass

    @abstractmethod
    async def create(self, title: Title) -> Title:
        """Persist ``title`` under a fresh id.

        The input is left untouched; the stored copy is returned with
        ``id``, ``created_at`` and ``updated_at`` set.
        """
        pass

    @abstractmethod
    async def update(self, title: Title) -> Title:
        """Replace an existing title and bump ``updated_at``."""
        pass

    @abstractmethod
    async def delete(self, title_id: str) -> None:
        """Delete a title. Deleting a missing id is a no-op."""
        pass

    @abstractmethod
    async def search(self, text: str, page: int = 1, page_size: int = 20) -> List[Title]:
        """Case-insensitive substring search over names and overview."""
        pass

    @abstractmethod
    async def get_by_genre(
        self, genre: str, page: int = 1, page_size: int = 20
    ) -> List[Title]:
        pass

    @abstractmethod
    async def get_by_platform(
        self, platform: str, page: int = 1, page_size: int = 20
    ) -> List[Title]:
        pass
