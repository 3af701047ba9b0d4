"""Search index interface."""

from abc import ABC, abstractmethod
from typing import List

from app.models.title import Title


class SearchIndex(ABC):
    """Abstract full-text index mirroring the catalog store.

    The index may lag the store; a freshly indexed title is not guaranteed
    to be searchable immediately.
    """

    @abstractmethod
    async def search(self, text: str, page: int = 1, page_size: int = 20) -> List[Title]:
        """Return one page of titles in relevance order.

        Raises:
            IndexUnavailable: if the index cannot be queried.
        """
        pass

    @abstractmethod
    async def index(self, title: Title) -> None:
        """Add or replace ``title`` in the index.

        Raises:
            IndexWriteError: if the document was not accepted.
        """
        pass

    @abstractmethod
    async def delete(self, title_id: str) -> None:
        pass

    @abstractmethod
    async def exists(self) -> bool:
        pass

    @abstractmethod
    async def create(self) -> None:
        pass

    async def ensure(self) -> None:
        """Create the index if it does not exist yet."""
        if not await self.exists():
            await self.create()

    async def aclose(self) -> None:
        """Release any held connections."""
        pass
