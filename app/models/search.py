"""Search request and response envelopes."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.core.config import get_settings
from app.models.title import Title

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 20


def clamp_page_size(page_size: int) -> int:
    """Clamp ``page_size`` into ``[1, MAX_PAGE_SIZE]``."""
    return max(1, min(int(page_size), MAX_PAGE_SIZE))


class SearchQuery(BaseModel):
    """A title search request.

    ``text`` must be non-blank; callers are expected to reject empty text
    before building a query. ``page_size`` is clamped, never rejected.
    """

    text: str
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    genre: Optional[str] = None
    platform: Optional[str] = None
    kind: Optional[str] = None
    region: str = Field(default="", validate_default=True)

    @field_validator("text")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Query text is required")
        return v

    @field_validator("page")
    @classmethod
    def at_least_first_page(cls, v: int) -> int:
        return max(1, v)

    @field_validator("page_size")
    @classmethod
    def clamp(cls, v: int) -> int:
        return clamp_page_size(v)

    @field_validator("genre", "platform", "kind")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("region")
    @classmethod
    def default_region(cls, v: str) -> str:
        v = v.strip().upper()
        return v or get_settings().default_region


class SearchResult(BaseModel):
    """Paginated search response."""

    items: List[Title] = []
    total_results: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 0
