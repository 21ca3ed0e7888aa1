"""Media detection for listing items.

An item is media when its URL, or failing that the URL of its first preview
image, points to an image or animation file. Matching ignores case and the
query string; the stored URL keeps both.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from ..provider.base import ListingItem

MEDIA_EXTENSIONS = (".gif", ".jpg", ".jpeg", ".png")


@dataclass(slots=True, frozen=True)
class Media:
    item: ListingItem


@dataclass(slots=True, frozen=True)
class NonMedia:
    item: ListingItem


ClassifiedResult = Union[Media, NonMedia]


def normalize_url(url: str | None) -> str:
    return (url or "").lower().split("?", 1)[0]


def is_media_url(url: str | None) -> bool:
    return normalize_url(url).endswith(MEDIA_EXTENSIONS)


def _lookup(data: Any, *path: str | int) -> Any:
    node = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, (list, tuple)) or len(node) <= key:
                return None
        elif not isinstance(node, Mapping):
            return None
        node = node[key] if isinstance(key, int) else node.get(key)
    return node


def resolve_preview_url(preview: Mapping[str, Any] | None) -> str:
    for path in (("images", 0, "source", "url"), ("images", 0, "variants", "gif", "source", "url")):
        url = _lookup(preview, *path)
        if isinstance(url, str) and url:
            return url
    return ""


def classify(item: ListingItem) -> ClassifiedResult:
    if is_media_url(item.url):
        return Media(item)
    preview_url = resolve_preview_url(item.preview)
    if is_media_url(preview_url):
        return Media(item.with_url(preview_url))
    return NonMedia(item)
