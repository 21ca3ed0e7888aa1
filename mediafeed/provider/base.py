from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Protocol

PERMALINK_BASE = "https://reddit.com"


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass(slots=True, frozen=True)
class ListingItem:
    url: str
    permalink: str
    title: str
    preview: Optional[Mapping[str, Any]] = field(default=None, compare=False)
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ListingItem":
        preview = data.get("preview")
        return cls(
            url=_text(data.get("url")),
            permalink=_text(data.get("permalink")),
            title=_text(data.get("title")),
            preview=preview if isinstance(preview, Mapping) else None,
            raw=data,
        )

    @property
    def link(self) -> str:
        return f"{PERMALINK_BASE}{self.permalink}" if self.permalink else ""

    def with_url(self, url: str) -> "ListingItem":
        return replace(self, url=url)

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url, "permalink": self.permalink, "link": self.link}


@dataclass(slots=True, frozen=True)
class Page:
    items: tuple[ListingItem, ...]
    after: Optional[str] = None


@dataclass(slots=True, frozen=True)
class ListingQuery:
    source: str
    sort: str
    limit: int
    time_filter: Optional[str] = None


class ListingProvider(Protocol):
    async def request_token(self, client_id: str, client_secret: str) -> str: ...

    async def fetch_page(self, token: str, query: ListingQuery, after: str | None = None) -> Page: ...
