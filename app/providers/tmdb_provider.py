"""TMDB provider for searching titles and fetching details and watch providers."""

import asyncio
import logging
from typing import Dict, List, Optional

import requests
import tmdbsimple as tmdb
from aiolimiter import AsyncLimiter
from cachetools import TTLCache, cached

from app.core.config import get_settings
from app.core.errors import ProviderUnavailable
from app.models.title import (
    OfferType,
    StreamingAvailability,
    Title,
    TitleKind,
    dedupe_availabilities,
)
from app.providers.base import EnrichmentProvider

logger = logging.getLogger(__name__)

POSTER_BASE = "https://image.tmdb.org/t/p/w500"
BACKDROP_BASE = "https://image.tmdb.org/t/p/w1280"

details_cache = TTLCache(maxsize=200, ttl=1800)
genre_cache = TTLCache(maxsize=8, ttl=86400)

# TMDB watch provider buckets
OFFER_BUCKETS = {
    "flatrate": OfferType.SUBSCRIPTION,
    "free": OfferType.FREE,
    "ads": OfferType.FREE,
    "rent": OfferType.RENT,
    "buy": OfferType.BUY,
}

TMDB_ERRORS = (requests.exceptions.RequestException, tmdb.APIKeyError)


def _image_url(base: str, path: Optional[str]) -> str:
    return f"{base}{path}" if path else ""


def _is_not_found(exc: Exception) -> bool:
    response = getattr(exc, "response", None)
    return response is not None and response.status_code == 404


def parse_search_result(
    item: dict, kind: TitleKind, genre_names: Dict[int, str] | None = None
) -> Title:
    """Map a TMDB search result to a partially populated Title."""
    genre_names = genre_names or {}
    if kind == TitleKind.TV_SHOW:
        name = item.get("name") or item.get("title") or ""
        original = item.get("original_name") or item.get("original_title") or ""
        released = item.get("first_air_date")
    else:
        name = item.get("title") or item.get("name") or ""
        original = item.get("original_title") or item.get("original_name") or ""
        released = item.get("release_date")

    return Title(
        name=name,
        original_name=original,
        overview=item.get("overview") or "",
        poster_url=_image_url(POSTER_BASE, item.get("poster_path")),
        backdrop_url=_image_url(BACKDROP_BASE, item.get("backdrop_path")),
        release_date=released,
        vote_average=item.get("vote_average") or 0.0,
        vote_count=item.get("vote_count") or 0,
        kind=kind,
        genres=[genre_names.get(g, str(g)) for g in item.get("genre_ids") or []],
        external_id=str(item["id"]),
    )


def parse_details(info: dict, kind: TitleKind) -> Title:
    """Map a TMDB movie or TV detail payload to a Title."""
    if kind == TitleKind.TV_SHOW:
        run_times = info.get("episode_run_time") or []
        runtime = str(run_times[0]) if run_times else ""
    else:
        runtime = str(info["runtime"]) if info.get("runtime") else ""

    title = parse_search_result(info, kind)
    return Title.model_validate(
        {
            **title.model_dump(),
            "genres": [g["name"] for g in info.get("genres", [])],
            "runtime": runtime,
            "status": info.get("status") or "",
            "production_countries": [
                c["name"] for c in info.get("production_countries", [])
            ],
        }
    )


def parse_watch_providers(payload: dict, region: str) -> List[StreamingAvailability]:
    """Map a TMDB watch/providers payload to availabilities for ``region``."""
    entry = (payload.get("results") or {}).get(region.upper())
    if not entry:
        return []

    link = entry.get("link") or ""
    availabilities = []
    for bucket, offer_type in OFFER_BUCKETS.items():
        for provider in entry.get(bucket) or []:
            availabilities.append(
                StreamingAvailability(
                    platform=provider.get("provider_name", ""),
                    region=region,
                    offer_type=offer_type,
                    quality="HD",
                    link=link,
                )
            )
    return dedupe_availabilities(availabilities)


@cached(genre_cache)
def _get_genre_names_sync(kind: TitleKind, language: str) -> Dict[int, str]:
    """Fetch the TMDB genre id -> name table (synchronous, cached)."""
    genres_api = tmdb.Genres()
    if kind == TitleKind.TV_SHOW:
        info = genres_api.tv_list(language=language)
    else:
        info = genres_api.movie_list(language=language)
    return {g["id"]: g["name"] for g in info.get("genres", [])}


def _genre_names(kind: TitleKind, language: str) -> Dict[int, str]:
    try:
        return _get_genre_names_sync(kind, language)
    except TMDB_ERRORS as exc:
        # Fall back to raw genre ids
        logger.warning("Could not load TMDB %s genres: %s", kind.value, exc)
        return {}


def _search_sync(query: str, language: str) -> List[Title]:
    """Search TMDB movies, then TV series (synchronous)."""
    search = tmdb.Search()
    titles = []
    try:
        search.movie(query=query, language=language)
        movie_genres = _genre_names(TitleKind.MOVIE, language)
        titles.extend(
            parse_search_result(m, TitleKind.MOVIE, movie_genres)
            for m in search.results
        )

        search.tv(query=query, language=language)
        tv_genres = _genre_names(TitleKind.TV_SHOW, language)
        titles.extend(
            parse_search_result(s, TitleKind.TV_SHOW, tv_genres)
            for s in search.results
        )
    except TMDB_ERRORS as exc:
        logger.error("Error searching TMDB for '%s': %s", query, exc)
        raise ProviderUnavailable(f"TMDB search failed for '{query}'", exc) from exc
    return titles


@cached(details_cache)
def _get_details_sync(external_id: str, kind: TitleKind, language: str) -> Optional[Title]:
    """Fetch full title details from TMDB (synchronous, cached)."""
    api = tmdb.TV(external_id) if kind == TitleKind.TV_SHOW else tmdb.Movies(external_id)
    try:
        info = api.info(language=language)
    except TMDB_ERRORS as exc:
        if _is_not_found(exc):
            return None
        logger.error("Failed to fetch %s details for ID %s: %s", kind.value, external_id, exc)
        raise ProviderUnavailable(
            f"Failed to fetch {kind.value} details for ID {external_id}", exc
        ) from exc
    return parse_details(info, kind)


def _get_availability_sync(
    external_id: str, kind: TitleKind, region: str
) -> List[StreamingAvailability]:
    """Fetch watch providers for a title (synchronous)."""
    api = tmdb.TV(external_id) if kind == TitleKind.TV_SHOW else tmdb.Movies(external_id)
    try:
        payload = api.watch_providers()
    except TMDB_ERRORS as exc:
        if _is_not_found(exc):
            return []
        logger.error("Failed to fetch watch providers for ID %s: %s", external_id, exc)
        raise ProviderUnavailable(
            f"Failed to fetch watch providers for ID {external_id}", exc
        ) from exc
    return parse_watch_providers(payload, region)


class TmdbProvider(EnrichmentProvider):
    """Catalog provider backed by The Movie Database."""

    def __init__(
        self,
        api_key: str | None = None,
        language: str | None = None,
        rate_limit: int = 40,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.tmdb_api_key
        if self.api_key:
            tmdb.API_KEY = self.api_key
        else:
            logger.warning("TMDB_API_KEY is not set, catalog enrichment is disabled")
        tmdb.REQUESTS_TIMEOUT = settings.provider_timeout
        self.language = language or settings.tmdb_language
        self.rate_limiter = AsyncLimiter(rate_limit, 1.0)

    @property
    def name(self) -> str:
        return "TMDB"

    def _require_key(self) -> None:
        if not self.api_key:
            raise ProviderUnavailable("TMDB_API_KEY configuration is required")

    async def search(self, text: str) -> List[Title]:
        self._require_key()
        async with self.rate_limiter:
            return await asyncio.to_thread(_search_sync, text, self.language)

    async def get_details(
        self, external_id: str, kind: Optional[TitleKind] = None
    ) -> Optional[Title]:
        self._require_key()
        kinds = [kind] if kind else [TitleKind.MOVIE, TitleKind.TV_SHOW]
        for candidate_kind in kinds:
            async with self.rate_limiter:
                title = await asyncio.to_thread(
                    _get_details_sync, external_id, candidate_kind, self.language
                )
            if title is not None:
                return title
        return None

    async def get_availability(
        self, external_id: str, kind: TitleKind, region: str
    ) -> List[StreamingAvailability]:
        self._require_key()
        async with self.rate_limiter:
            return await asyncio.to_thread(
                _get_availability_sync, external_id, kind, region
            )
