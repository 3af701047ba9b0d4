from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.models.search import SearchQuery
from app.models.title import OfferType, StreamingAvailability, Title


@pytest.mark.parametrize("requested, effective", [(51, 50), (500, 50), (50, 50), (1, 1), (0, 1), (-3, 1)])
def test_page_size_is_clamped(requested, effective):
    assert SearchQuery(text="batman", page_size=requested).page_size == effective


def test_query_text_is_trimmed_and_required():
    assert SearchQuery(text="  batman ").text == "batman"
    with pytest.raises(ValidationError):
        SearchQuery(text="   ")


def test_query_defaults():
    query = SearchQuery(text="batman", genre=" ", platform="Netflix")
    assert query.page == 1
    assert query.page_size == 20
    assert query.region == "BR"
    assert query.genre is None
    assert query.platform == "Netflix"


def test_duplicate_availabilities_are_dropped():
    title = Title(
        name="Dark",
        availabilities=[
            StreamingAvailability(platform="Netflix", region="br", link="first"),
            StreamingAvailability(platform="NETFLIX", region="BR", link="second"),
            StreamingAvailability(platform="Netflix", region="US"),
            StreamingAvailability(platform="Netflix", region="BR", offer_type=OfferType.BUY),
        ],
    )
    assert len(title.availabilities) == 3
    assert title.availabilities[0].link == "first"


def test_merge_availabilities_keeps_existing_entries():
    title = Title(
        name="Dark",
        availabilities=[StreamingAvailability(platform="Netflix", region="BR", link="old")],
    )
    merged = title.merge_availabilities(
        [
            StreamingAvailability(platform="netflix", region="BR", link="new"),
            StreamingAvailability(platform="Prime Video", region="BR"),
        ]
    )
    assert [a.link for a in merged.availabilities] == ["old", ""]
    assert len(title.availabilities) == 1


def test_price_only_kept_for_paid_offers():
    rent = StreamingAvailability(platform="Apple TV", offer_type=OfferType.RENT, price="3.99")
    sub = StreamingAvailability(platform="Netflix", price="3.99")
    assert rent.price == Decimal("3.99")
    assert sub.price is None


def test_genres_deduplicated_case_insensitively():
    title = Title(name="Alien", genres=["Horror", "horror", " Science Fiction "])
    assert title.genres == ["Horror", "Science Fiction"]
    assert title.has_genre("HORROR")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1999-03-31", date(1999, 3, 31)),
        ("", None),
        (None, None),
        ("0001-01-01T00:00:00", None),
        ("not a date", None),
    ],
)
def test_release_date_parsing(raw, expected):
    assert Title(name="The Matrix", release_date=raw).release_date == expected


def test_vote_average_range():
    with pytest.raises(ValidationError):
        Title(name="Bad", vote_average=11)
