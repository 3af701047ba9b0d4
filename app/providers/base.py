"""Enrichment provider interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.models.title import StreamingAvailability, Title, TitleKind


class EnrichmentProvider(ABC):
    """Abstract base class for external catalog providers.

    Providers return best-effort, partially populated titles. Returned
    titles never carry a catalog id; ``external_id`` identifies them on
    the provider side. Transport or API failures raise
    ``ProviderUnavailable``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of this provider."""
        pass

    @abstractmethod
    async def search(self, text: str) -> List[Title]:
        """Search the provider catalog for ``text``.

        Args:
            text: The free-text query.

        Returns:
            Candidate titles in provider order. May be empty.
        """
        pass

    @abstractmethod
    async def get_details(
        self, external_id: str, kind: Optional[TitleKind] = None
    ) -> Optional[Title]:
        """Fetch a fully populated title, or None if the provider has no such id.

        Args:
            external_id: The provider-side identifier.
            kind: Title kind if known. When None, implementations may probe
                each kind in turn.
        """
        pass

    @abstractmethod
    async def get_availability(
        self, external_id: str, kind: TitleKind, region: str
    ) -> List[StreamingAvailability]:
        """Return where the title can be watched in ``region``."""
        pass

    async def aclose(self) -> None:
        """Release any held connections."""
        pass
