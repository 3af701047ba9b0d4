"""Post-query filters over merged search results."""

import re
from typing import Iterable, List, Optional

from app.models.title import Title, TitleKind

KIND_ALIASES = {
    "movie": TitleKind.MOVIE,
    "movies": TitleKind.MOVIE,
    "film": TitleKind.MOVIE,
    "tv": TitleKind.TV_SHOW,
    "tvshow": TitleKind.TV_SHOW,
    "tvshows": TitleKind.TV_SHOW,
    "show": TitleKind.TV_SHOW,
    "series": TitleKind.TV_SHOW,
}


def parse_kind(value: Optional[str]) -> Optional[TitleKind]:
    """Parse a user-supplied kind, returning None for anything unknown.

    Case, spaces, dashes and underscores are ignored, so "TvShow",
    "tv_show" and "TV Show" all parse to ``TitleKind.TV_SHOW``.
    """
    if not value:
        return None
    normalized = re.sub(r"[\s_-]+", "", value).lower()
    return KIND_ALIASES.get(normalized)


class ResultFilter:
    """Narrow a title list by platform, genre and kind."""

    def apply(
        self,
        titles: Iterable[Title],
        platform: Optional[str] = None,
        genre: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> List[Title]:
        results = list(titles)

        if platform:
            results = [t for t in results if t.has_platform(platform)]

        if genre:
            results = [t for t in results if t.has_genre(genre)]

        # An unknown kind matches everything
        wanted_kind = parse_kind(kind)
        if wanted_kind is not None:
            results = [t for t in results if t.kind == wanted_kind]

        return results
