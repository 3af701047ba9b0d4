"""Pagination of merged search results."""

from typing import Sequence

from app.models.search import SearchResult, clamp_page_size
from app.models.title import Title


class Paginator:
    """Build the result envelope for one page of titles.

    An empty result set has zero pages, not one empty page.
    """

    @staticmethod
    def total_pages(total_results: int, page_size: int) -> int:
        if total_results <= 0:
            return 0
        return -(-total_results // page_size)

    def paginate(
        self, titles: Sequence[Title], page: int, page_size: int
    ) -> SearchResult:
        page_size = clamp_page_size(page_size)
        total = len(titles)
        return SearchResult(
            items=list(titles[:page_size]),
            total_results=total,
            page=max(page, 1),
            page_size=page_size,
            total_pages=self.total_pages(total, page_size),
        )
