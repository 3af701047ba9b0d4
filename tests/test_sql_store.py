from datetime import date
from decimal import Decimal

import pytest

from app.core.database import build_engine, create_db_and_tables
from app.core.errors import NotFound, StoreUnavailable
from app.models.title import OfferType, StreamingAvailability, Title, TitleKind
from app.stores.sql_store import SqlCatalogStore


@pytest.fixture
def catalog(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'catalog.db'}", echo=False)
    create_db_and_tables(engine)
    yield SqlCatalogStore(engine)
    engine.dispose()


def make_title(name: str, **kwargs) -> Title:
    return Title(name=name, **kwargs)


@pytest.mark.asyncio
async def test_create_assigns_id_and_timestamps(catalog):
    title = make_title(
        "The Matrix",
        release_date="1999-03-31",
        kind=TitleKind.MOVIE,
        genres=["Action"],
        external_id="603",
        availabilities=[
            StreamingAvailability(
                platform="Apple TV", region="BR", offer_type=OfferType.RENT, price="9.90"
            )
        ],
    )

    created = await catalog.create(title)

    assert created.id
    assert created.created_at is not None
    assert created.updated_at == created.created_at
    assert title.id == ""

    fetched = await catalog.get_by_id(created.id)
    assert fetched.name == "The Matrix"
    assert fetched.release_date == date(1999, 3, 31)
    assert fetched.external_id == "603"
    assert fetched.availabilities[0].price == Decimal("9.90")
    assert fetched.availabilities[0].offer_type == OfferType.RENT


@pytest.mark.asyncio
async def test_create_twice_gives_distinct_ids(catalog):
    title = make_title("Dune", external_id="438631")
    first = await catalog.create(title)
    second = await catalog.create(title)
    assert first.id != second.id


@pytest.mark.asyncio
async def test_get_missing_returns_none(catalog):
    assert await catalog.get_by_id("999") is None


@pytest.mark.asyncio
async def test_update_bumps_updated_at(catalog):
    created = await catalog.create(make_title("Dark", kind=TitleKind.TV_SHOW))

    updated = await catalog.update(created.model_copy(update={"status": "Ended"}))

    assert updated.updated_at >= created.updated_at
    assert (await catalog.get_by_id(created.id)).status == "Ended"


@pytest.mark.asyncio
async def test_update_missing_raises_not_found(catalog):
    with pytest.raises(NotFound):
        await catalog.update(make_title("Ghost", id="missing"))


@pytest.mark.asyncio
async def test_delete(catalog):
    created = await catalog.create(make_title("Heat"))
    await catalog.delete(created.id)
    await catalog.delete(created.id)
    assert await catalog.get_by_id(created.id) is None


@pytest.mark.asyncio
async def test_search_matches_name_and_overview(catalog):
    await catalog.create(make_title("Batman Begins", vote_average=7.7))
    await catalog.create(make_title("Joker", overview="A Gotham story before BATMAN", vote_average=8.2))
    await catalog.create(make_title("Heat"))

    results = await catalog.search("batman")

    assert [t.name for t in results] == ["Joker", "Batman Begins"]
    assert len(await catalog.search("batman", page=2, page_size=1)) == 1


@pytest.mark.asyncio
async def test_get_by_genre_matches_whole_labels(catalog):
    await catalog.create(make_title("Avatar", genres=["Action"]))
    await catalog.create(make_title("The Mandalorian", genres=["Action & Adventure"]))

    results = await catalog.get_by_genre("action")

    assert [t.name for t in results] == ["Avatar"]


@pytest.mark.asyncio
async def test_get_by_platform(catalog):
    await catalog.create(
        make_title("Dark", availabilities=[StreamingAvailability(platform="Netflix", region="BR")])
    )
    await catalog.create(
        make_title("Succession", availabilities=[StreamingAvailability(platform="Max", region="BR")])
    )

    results = await catalog.get_by_platform("NETFLIX")

    assert [t.name for t in results] == ["Dark"]


@pytest.mark.asyncio
async def test_database_errors_raise_store_unavailable(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'missing' / 'catalog.db'}", echo=False)
    catalog = SqlCatalogStore(engine)

    with pytest.raises(StoreUnavailable):
        await catalog.get_by_id("1")


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(catalog):
    await catalog.create(make_title("Heat"))
    await catalog.create(make_title("Up"))
    await catalog.create(make_title("100% Wolf"))

    assert [t.name for t in await catalog.search("%")] == ["100% Wolf"]
    assert await catalog.search("_") == []
    assert await catalog.get_by_genre("%") == []
