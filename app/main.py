import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from app.api.dependencies import build_orchestrator
from app.api.routes_api import router as api_router
from app.core.config import get_settings
from app.core.database import build_engine, create_db_and_tables
from app.core.errors import IndexUnavailable

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Application lifespan context manager."""
    settings = get_settings()
    engine = build_engine(settings.database_url)
    create_db_and_tables(engine)

    orchestrator = build_orchestrator(settings, engine)
    try:
        await orchestrator.index.ensure()
    except IndexUnavailable as exc:
        # Searches fail with 503 until the index is reachable
        logger.warning("Search index not ready at startup: %s", exc)

    app.state.orchestrator = orchestrator
    try:
        yield
    finally:
        for collaborator in (orchestrator.index, orchestrator.provider):
            try:
                await collaborator.aclose()
            except Exception as e:
                logger.error("Error closing %s: %s", type(collaborator).__name__, e)
        engine.dispose()


app = FastAPI(
    title="Streamscout",
    description="Find where movies and TV shows can be watched",
    version="0.1.0",
    lifespan=app_lifespan,
)

app.include_router(api_router, prefix="/api")
