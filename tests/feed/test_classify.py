from __future__ import annotations

import pytest

from mediafeed.feed.classify import Media, NonMedia, classify, is_media_url, normalize_url, resolve_preview_url
from mediafeed.provider.base import ListingItem


def _item(**data) -> ListingItem:
    data.setdefault("permalink", "/r/pics/comments/abc/title/")
    data.setdefault("title", "A title")
    return ListingItem.from_payload(data)


def test_uppercase_extension_with_query_is_media_and_url_kept() -> None:
    item = _item(url="https://x.com/a.JPG?x=1")
    result = classify(item)
    assert isinstance(result, Media)
    assert result.item.url == "https://x.com/a.JPG?x=1"
    assert result.item is item


def test_preview_source_replaces_url() -> None:
    item = _item(
        url="https://x.com/a.html",
        preview={"images": [{"source": {"url": "https://y.com/b.png?w=1"}}]},
    )
    result = classify(item)
    assert isinstance(result, Media)
    assert result.item.url == "https://y.com/b.png?w=1"
    assert item.url == "https://x.com/a.html"
    assert result.item.permalink == item.permalink


def test_gif_variant_used_when_source_missing() -> None:
    item = _item(
        url="https://v.redd.it/xyz",
        preview={"images": [{"variants": {"gif": {"source": {"url": "https://y.com/anim.gif?s=2"}}}}]},
    )
    result = classify(item)
    assert isinstance(result, Media)
    assert result.item.url == "https://y.com/anim.gif?s=2"


def test_source_preferred_over_gif_variant() -> None:
    preview = {
        "images": [
            {
                "source": {"url": "https://y.com/still.jpg"},
                "variants": {"gif": {"source": {"url": "https://y.com/anim.gif"}}},
            }
        ]
    }
    result = classify(_item(url="https://x.com/post", preview=preview))
    assert result.item.url == "https://y.com/still.jpg"


def test_non_media_preview_falls_through() -> None:
    item = _item(url="https://x.com/a.html", preview={"images": [{"source": {"url": "https://y.com/page.html"}}]})
    result = classify(item)
    assert isinstance(result, NonMedia)
    assert result.item is item


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"url": None},
        {"url": ""},
        {"url": "", "preview": None},
        {"url": "https://x.com", "preview": "broken"},
        {"url": "https://x.com", "preview": {"images": []}},
        {"url": "https://x.com", "preview": {"images": "nope"}},
        {"url": "https://x.com", "preview": {"images": [None]}},
        {"url": "https://x.com", "preview": {"images": [{"source": None}]}},
        {"url": "https://x.com", "preview": {"images": [{"source": {"url": 42}}]}},
    ],
)
def test_missing_or_malformed_fields_never_raise(payload: dict) -> None:
    item = ListingItem.from_payload(payload)
    assert isinstance(classify(item), NonMedia)


def test_empty_primary_url_still_uses_preview() -> None:
    item = ListingItem.from_payload({"preview": {"images": [{"source": {"url": "https://y.com/p.jpeg"}}]}})
    result = classify(item)
    assert isinstance(result, Media)
    assert result.item.url == "https://y.com/p.jpeg"


def test_classify_is_idempotent() -> None:
    item = _item(url="https://x.com/a.html", preview={"images": [{"source": {"url": "https://y.com/b.png"}}]})
    assert classify(item) == classify(item)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://i.redd.it/a.gif", True),
        ("https://i.redd.it/a.jpeg", True),
        ("HTTPS://I.REDD.IT/A.PNG", True),
        ("https://i.imgur.com/a.gifv", False),
        ("https://x.com/a.jpg.html", False),
        ("https://x.com/a.html?img=b.jpg", False),
        ("", False),
        (None, False),
    ],
)
def test_is_media_url(url: str | None, expected: bool) -> None:
    assert is_media_url(url) is expected


def test_normalize_url_strips_everything_after_first_question_mark() -> None:
    assert normalize_url("https://X.com/A.png?a=1?b=2") == "https://x.com/a.png"


def test_resolve_preview_url_defaults_to_empty() -> None:
    assert resolve_preview_url(None) == ""
    assert resolve_preview_url({"enabled": True}) == ""
