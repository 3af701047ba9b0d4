"""API routes for title search and lookup."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.errors import SearchUnavailable, StoreUnavailable
from app.models.search import DEFAULT_PAGE_SIZE, SearchQuery, SearchResult
from app.models.title import Title
from app.api.dependencies import get_orchestrator
from app.services.search import SearchOrchestrator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/titles", response_model=SearchResult)
async def search_titles(
    query: str = Query("", description="Search text"),
    page: int = Query(1, description="Page number, starting at 1"),
    page_size: int = Query(
        DEFAULT_PAGE_SIZE, description="Results per page (values above 50 are clamped)"
    ),
    genre: Optional[str] = Query(None, description="Genre label"),
    platform: Optional[str] = Query(None, description="Streaming platform name"),
    kind: Optional[str] = Query(None, alias="type", description="Title kind: movie or tv"),
    region: str = Query("", description="Region code, defaults to configured region"),
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    """Search movies and TV shows and where they can be watched."""
    if not query.strip():
        raise HTTPException(status_code=400, detail="Query parameter is required")

    search_query = SearchQuery(
        text=query,
        page=page,
        page_size=page_size,
        genre=genre,
        platform=platform,
        kind=kind,
        region=region,
    )
    logger.info("Searching titles with query: %s", search_query.text)

    try:
        return await orchestrator.search(search_query)
    except SearchUnavailable as exc:
        logger.error("Search unavailable for query %s: %s", search_query.text, exc)
        raise HTTPException(status_code=503, detail="Search is temporarily unavailable")
    except Exception as exc:
        logger.error(
            "Error searching titles with query %s: %s", search_query.text, exc, exc_info=exc
        )
        raise HTTPException(
            status_code=500, detail="An error occurred while searching titles"
        )


@router.get("/titles/{title_id}", response_model=Title)
async def get_title(
    title_id: str,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    """Get a single title from the catalog."""
    try:
        title = await orchestrator.get_by_id(title_id)
    except StoreUnavailable as exc:
        logger.error("Error getting title with ID %s: %s", title_id, exc)
        raise HTTPException(
            status_code=503, detail="An error occurred while retrieving the title"
        )

    if title is None:
        logger.warning("Title not found with ID: %s", title_id)
        raise HTTPException(status_code=404, detail=f"Title with ID {title_id} not found")
    return title


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "streamscout"}
