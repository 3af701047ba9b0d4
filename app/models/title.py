"""Catalog models for titles and where they can be watched."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class TitleKind(str, Enum):
    """Kind of catalog entry."""

    MOVIE = "movie"
    TV_SHOW = "tv_show"


class OfferType(str, Enum):
    """How a title is offered on a platform."""

    SUBSCRIPTION = "subscription"
    RENT = "rent"
    BUY = "buy"
    FREE = "free"


class StreamingAvailability(BaseModel):
    """A (platform, region, offer type) record for a title."""

    platform: str
    region: str = ""
    offer_type: OfferType = OfferType.SUBSCRIPTION
    price: Optional[Decimal] = None
    currency: str = ""
    quality: str = ""
    added_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    link: str = ""

    @field_validator("region")
    @classmethod
    def normalize_region(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def drop_price_unless_paid(self) -> "StreamingAvailability":
        # Only rentals and purchases carry a price
        if self.offer_type not in (OfferType.RENT, OfferType.BUY):
            self.price = None
        return self

    def key(self) -> tuple[str, str, OfferType]:
        """Identity used to detect duplicate availabilities."""
        return (self.platform.strip().lower(), self.region, self.offer_type)


def dedupe_availabilities(
    items: Iterable[StreamingAvailability],
) -> List[StreamingAvailability]:
    """Drop repeated (platform, region, offer type) entries, first seen wins."""
    seen = set()
    unique = []
    for item in items:
        key = item.key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


class Title(BaseModel):
    """A movie or TV show in the catalog.

    ``id`` is empty until the catalog store assigns one on creation.
    ``external_id`` is the identifier used by the catalog provider the
    title was discovered through (e.g. the TMDB id), if any.
    """

    id: str = ""
    name: str
    original_name: str = ""
    overview: str = ""
    poster_url: str = ""
    backdrop_url: str = ""
    release_date: Optional[date] = None
    vote_average: float = Field(default=0.0, ge=0.0, le=10.0)
    vote_count: int = Field(default=0, ge=0)
    kind: TitleKind = TitleKind.MOVIE
    genres: List[str] = []
    availabilities: List[StreamingAvailability] = []
    production_countries: List[str] = []
    runtime: str = ""
    status: str = ""  # e.g., "Released", "Returning Series"
    external_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v):
        """Treat empty strings and the minimum date as unknown."""
        if v in (None, ""):
            return None
        if isinstance(v, datetime):
            v = v.date()
        if isinstance(v, date):
            return None if v == date.min else v
        if isinstance(v, str):
            try:
                parsed = date.fromisoformat(v[:10])
            except ValueError:
                return None
            return None if parsed == date.min else parsed
        return v

    @field_validator("genres")
    @classmethod
    def unique_genres(cls, v: List[str]) -> List[str]:
        seen = set()
        genres = []
        for genre in v:
            label = genre.strip()
            if not label or label.lower() in seen:
                continue
            seen.add(label.lower())
            genres.append(label)
        return genres

    @field_validator("availabilities")
    @classmethod
    def unique_availabilities(
        cls, v: List[StreamingAvailability]
    ) -> List[StreamingAvailability]:
        return dedupe_availabilities(v)

    def has_genre(self, genre: str) -> bool:
        """Return True if the title carries ``genre`` (case-insensitive)."""
        wanted = genre.strip().lower()
        return any(g.lower() == wanted for g in self.genres)

    def has_platform(self, platform: str) -> bool:
        """Return True if any availability is on ``platform`` (case-insensitive)."""
        wanted = platform.strip().lower()
        return any(a.platform.strip().lower() == wanted for a in self.availabilities)

    def merge_availabilities(
        self, items: Iterable[StreamingAvailability]
    ) -> "Title":
        """Return a copy with ``items`` appended; existing entries win."""
        merged = dedupe_availabilities([*self.availabilities, *items])
        return self.model_copy(update={"availabilities": merged})
