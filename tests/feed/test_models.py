from __future__ import annotations

import pytest

from mediafeed.errors import ConfigError
from mediafeed.feed.models import (
    Credentials,
    FeedRequest,
    FeedResult,
    RunState,
    Sort,
    StopReason,
    TimeFilter,
    clamp_limit,
    normalize_source,
)
from mediafeed.provider.base import ListingItem, ListingQuery


@pytest.mark.parametrize(
    "raw, expected",
    [("pics", "pics"), ("  r/pics ", "pics"), ("/r/aww/", "aww"), ("R/EarthPorn", "EarthPorn"), ("pics+aww", "pics+aww")],
)
def test_normalize_source(raw: str, expected: str) -> None:
    assert normalize_source(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "r/", "/r/"])
def test_empty_source_rejected(raw: str | None) -> None:
    with pytest.raises(ConfigError, match="subreddit"):
        normalize_source(raw)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 5),
        ("abc", 5),
        ("0", 5),
        (0, 5),
        ("12", 12),
        ("7abc", 7),
        ("2.5", 2),
        (" 9 ", 9),
        (-3, 1),
        (1, 1),
        (100, 100),
        (500, 100),
    ],
)
def test_clamp_limit(raw, expected: int) -> None:
    assert clamp_limit(raw) == expected


def test_build_defaults() -> None:
    request = FeedRequest.build("pics")
    assert request == FeedRequest(source="pics", sort=Sort.BEST, limit=5, time_filter=None)


def test_top_defaults_to_day_and_other_sorts_drop_time_filter() -> None:
    assert FeedRequest.build("pics", sort="TOP").time_filter is TimeFilter.DAY
    assert FeedRequest.build("pics", sort=Sort.TOP, time_filter="All").time_filter is TimeFilter.ALL
    assert FeedRequest.build("pics", sort="hot", time_filter="week").time_filter is None


def test_unknown_values_rejected() -> None:
    with pytest.raises(ConfigError, match="sort"):
        FeedRequest.build("pics", sort="sideways")
    with pytest.raises(ConfigError, match="time filter"):
        FeedRequest.build("pics", sort="top", time_filter="decade")


def test_to_query_uses_page_size() -> None:
    request = FeedRequest.build("pics", sort="top", limit=10, time_filter="month")
    assert request.to_query(15) == ListingQuery(source="pics", sort="top", limit=15, time_filter="month")


@pytest.mark.parametrize("client_id, secret", [("", "s"), ("id", ""), (None, None), ("  ", "s")])
def test_credentials_required(client_id, secret) -> None:
    with pytest.raises(ConfigError, match="Client ID and Secret"):
        Credentials.build(client_id, secret)


def test_credentials_secret_hidden_from_repr() -> None:
    assert "hunter2" not in repr(Credentials.build("id", "hunter2"))


def test_result_from_state_copies_lists() -> None:
    item = ListingItem.from_payload({"url": "https://i.example.com/a.jpg"})
    state = RunState(media=[item], requests_issued=2, stop_reason=StopReason.SATISFIED)
    result = FeedResult.from_state(state)
    state.media.clear()
    assert result.media == (item,)
    assert result.requests == 2
    assert result.stop_reason is StopReason.SATISFIED
    assert FeedResult.from_state(RunState(), fallback=StopReason.FETCH_FAILED).stop_reason is StopReason.FETCH_FAILED


def test_listing_item_from_payload_and_link() -> None:
    item = ListingItem.from_payload({"url": "u", "permalink": "/r/pics/comments/1/x/", "title": None, "extra": 1})
    assert item.title == ""
    assert item.link == "https://reddit.com/r/pics/comments/1/x/"
    assert item.raw["extra"] == 1
    assert item.with_url("v").url == "v"
    assert item.url == "u"
    assert item.to_dict() == {
        "title": "",
        "url": "u",
        "permalink": "/r/pics/comments/1/x/",
        "link": "https://reddit.com/r/pics/comments/1/x/",
    }


def test_listing_item_is_hashable_despite_preview() -> None:
    preview = {"images": [{"source": {"url": "https://preview.redd.it/a.png"}}]}
    item = ListingItem.from_payload({"url": "u", "permalink": "/p", "title": "t", "preview": preview})
    assert item in {item}
    assert item == ListingItem.from_payload({"url": "u", "permalink": "/p", "title": "t"})
