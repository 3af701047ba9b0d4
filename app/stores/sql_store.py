"""SQL-backed catalog store using SQLModel."""

import asyncio
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from sqlalchemy import JSON, Column, String, cast, func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, col, or_, select

from app.core.errors import NotFound, StoreUnavailable
from app.models.title import StreamingAvailability, Title, TitleKind
from app.stores.base import CatalogStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TitleRecord(SQLModel, table=True):
    """Row layout of the ``titles`` table."""

    __tablename__ = "titles"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    original_name: str = ""
    overview: str = ""
    poster_url: str = ""
    backdrop_url: str = ""
    release_date: Optional[date] = None
    vote_average: float = 0.0
    vote_count: int = 0
    kind: str = Field(default=TitleKind.MOVIE.value, index=True)
    genres: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    availabilities: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    production_countries: List[str] = Field(
        default_factory=list, sa_column=Column(JSON)
    )
    runtime: str = ""
    status: str = ""
    external_id: Optional[str] = Field(default=None, index=True)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_title(cls, title: Title) -> "TitleRecord":
        data = title.model_dump(mode="json", exclude={"kind", "release_date"})
        data["kind"] = title.kind.value
        data["release_date"] = title.release_date
        data["created_at"] = title.created_at
        data["updated_at"] = title.updated_at
        return cls(**data)

    def to_title(self) -> Title:
        return Title(
            id=self.id,
            name=self.name,
            original_name=self.original_name,
            overview=self.overview,
            poster_url=self.poster_url,
            backdrop_url=self.backdrop_url,
            release_date=self.release_date,
            vote_average=self.vote_average,
            vote_count=self.vote_count,
            kind=TitleKind(self.kind),
            genres=list(self.genres or []),
            availabilities=[
                StreamingAvailability.model_validate(a)
                for a in (self.availabilities or [])
            ],
            production_countries=list(self.production_countries or []),
            runtime=self.runtime,
            status=self.status,
            external_id=self.external_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _page(titles: Iterable[Title], page: int, page_size: int) -> List[Title]:
    """Skip ``(page - 1) * page_size`` matches and take ``page_size``."""
    skip = (max(page, 1) - 1) * page_size
    results = []
    for title in titles:
        if skip:
            skip -= 1
            continue
        if len(results) >= page_size:
            break
        results.append(title)
    return results


class SqlCatalogStore(CatalogStore):
    """Catalog store persisting titles through a SQLAlchemy engine.

    Session work is synchronous and runs in a worker thread so the event
    loop is never blocked.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    async def _run(self, operation: str, fn: Callable[[Session], T]) -> T:
        def work() -> T:
            with Session(self.engine) as session:
                return fn(session)

        try:
            return await asyncio.to_thread(work)
        except SQLAlchemyError as exc:
            logger.error("Catalog store %s failed: %s", operation, exc)
            raise StoreUnavailable(f"Catalog store {operation} failed", exc) from exc

    async def get_by_id(self, title_id: str) -> Optional[Title]:
        def fn(session: Session) -> Optional[Title]:
            record = session.get(TitleRecord, title_id)
            return record.to_title() if record else None

        return await self._run("get", fn)

    async def create(self, title: Title) -> Title:
        now = _utcnow()
        stored = title.model_copy(
            update={"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        )

        def fn(session: Session) -> Title:
            session.add(TitleRecord.from_title(stored))
            session.commit()
            return stored

        created = await self._run("create", fn)
        logger.debug("Created title %s (%s)", created.id, created.name)
        return created

    async def update(self, title: Title) -> Title:
        def fn(session: Session) -> Title:
            existing = session.get(TitleRecord, title.id)
            if existing is None:
                raise NotFound(f"Title with ID {title.id} not found")
            # Never move updated_at backwards
            updated_at = max(_utcnow(), _aware(existing.updated_at))
            updated = title.model_copy(
                update={"created_at": existing.created_at, "updated_at": updated_at}
            )
            session.merge(TitleRecord.from_title(updated))
            session.commit()
            return updated

        return await self._run("update", fn)

    async def delete(self, title_id: str) -> None:
        def fn(session: Session) -> None:
            record = session.get(TitleRecord, title_id)
            if record is not None:
                session.delete(record)
                session.commit()

        await self._run("delete", fn)

    async def search(self, text: str, page: int = 1, page_size: int = 20) -> List[Title]:
        pattern = _contains_pattern(text)

        def fn(session: Session) -> List[Title]:
            statement = (
                select(TitleRecord)
                .where(
                    or_(
                        func.lower(col(TitleRecord.name)).like(pattern, escape="\\"),
                        func.lower(col(TitleRecord.original_name)).like(pattern, escape="\\"),
                        func.lower(col(TitleRecord.overview)).like(pattern, escape="\\"),
                    )
                )
                .order_by(col(TitleRecord.vote_average).desc())
                .offset((max(page, 1) - 1) * page_size)
                .limit(page_size)
            )
            return [r.to_title() for r in session.exec(statement)]

        return await self._run("search", fn)

    async def get_by_genre(
        self, genre: str, page: int = 1, page_size: int = 20
    ) -> List[Title]:
        return await self._scan_json(
            TitleRecord.genres, genre, lambda t: t.has_genre(genre), page, page_size
        )

    async def get_by_platform(
        self, platform: str, page: int = 1, page_size: int = 20
    ) -> List[Title]:
        return await self._scan_json(
            TitleRecord.availabilities,
            platform,
            lambda t: t.has_platform(platform),
            page,
            page_size,
        )

    async def _scan_json(
        self,
        column: Any,
        needle: str,
        predicate: Callable[[Title], bool],
        page: int,
        page_size: int,
    ) -> List[Title]:
        """Prefilter on the serialized JSON column, then match exactly."""
        pattern = _contains_pattern(needle)

        def fn(session: Session) -> List[Title]:
            statement = select(TitleRecord).where(
                func.lower(cast(column, String)).like(pattern, escape="\\")
            )
            matches = (
                t for t in (r.to_title() for r in session.exec(statement)) if predicate(t)
            )
            return _page(matches, page, page_size)

        return await self._run("scan", fn)


def _contains_pattern(text: str) -> str:
    """Case-folded LIKE pattern matching ``text`` literally anywhere."""
    escaped = (
        text.strip()
        .lower()
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
