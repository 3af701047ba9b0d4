"""Database setup for Streamscout using SQLModel."""

import json

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from app.core.config import get_settings
from app.stores.sql_store import TitleRecord  # noqa: F401 registers the titles table


def build_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """Create an engine for the catalog database."""
    settings = get_settings()
    url = database_url or settings.database_url
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # Needed for SQLite
    return create_engine(
        url,
        echo=settings.debug if echo is None else echo,
        connect_args=connect_args,
        # JSON columns are prefiltered with LIKE, store labels unescaped
        json_serializer=lambda obj: json.dumps(obj, ensure_ascii=False),
    )


def create_db_and_tables(engine: Engine) -> None:
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)
