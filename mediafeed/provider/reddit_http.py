from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any, Mapping

import aiohttp
import orjson

from ..config import RedditConfig
from ..errors import AuthError, FetchError
from .base import ListingItem, ListingProvider, ListingQuery, Page

LOGGER = logging.getLogger(__name__)
TOKEN_BODY = {"grant_type": "client_credentials"}


class RedditHttpProvider(ListingProvider):
    def __init__(self, config: RedditConfig) -> None:
        self._config = config
        self._session: aiohttp.ClientSession | None = None

    async def startup(self) -> None:
        if self._session is not None:
            return
        timeout = aiohttp.ClientTimeout(total=self._config.http_timeout_seconds)
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": "application/json",
        }
        ssl_context: ssl.SSLContext | bool | None = None
        if not self._config.verify_ssl:
            LOGGER.warning("TLS certificate verification disabled for provider")
            ssl_context = False
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        self._session = aiohttp.ClientSession(timeout=timeout, headers=headers, connector=connector)

    async def shutdown(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def request_token(self, client_id: str, client_secret: str) -> str:
        session = await self._ensure_session()
        headers = {
            "Authorization": aiohttp.BasicAuth(client_id, client_secret).encode(),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        LOGGER.debug("Requesting access token", extra={"url": self._config.auth_url})
        try:
            async with session.post(self._config.auth_url, data=TOKEN_BODY, headers=headers) as response:
                payload = await self._read_json(response)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise AuthError(_describe(exc)) from exc
        except ValueError as exc:
            raise AuthError("token endpoint returned a non-JSON response") from exc

        error = _error_of(payload)
        if error:
            raise AuthError(error)
        token = payload.get("access_token")
        if not isinstance(token, str) or not token:
            raise AuthError("response has no access_token")
        return token

    async def fetch_page(self, token: str, query: ListingQuery, after: str | None = None) -> Page:
        session = await self._ensure_session()
        url = self.listing_url(query)
        params = self.listing_params(query, after)
        LOGGER.debug("Fetching page", extra={"url": url, "params": params})
        try:
            async with session.get(url, params=params, headers={"Authorization": f"Bearer {token}"}) as response:
                payload = await self._read_json(response)
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(_describe(exc)) from exc
        except ValueError as exc:
            raise FetchError("listing endpoint returned a non-JSON response") from exc

        error = _error_of(payload)
        if error:
            raise FetchError(error)
        if status >= 400:
            raise FetchError(f"HTTP {status}")
        return self._parse_page(payload)

    def listing_url(self, query: ListingQuery) -> str:
        return f"{self._config.api_base}/r/{query.source}/{query.sort}.json"

    @staticmethod
    def listing_params(query: ListingQuery, after: str | None) -> dict[str, str]:
        params = {"limit": str(query.limit)}
        if query.sort == "top" and query.time_filter:
            params["t"] = query.time_filter
        if after:
            params["after"] = after
        return params

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            await self.startup()
        if self._session is None:  # pragma: no cover
            raise RuntimeError("HTTP session is not initialized")
        return self._session

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> dict[str, Any]:
        body = await response.read()
        payload = orjson.loads(body) if body else {}
        if not isinstance(payload, dict):
            raise ValueError("JSON payload is not an object")
        return payload

    @staticmethod
    def _parse_page(payload: Mapping[str, Any]) -> Page:
        data = payload.get("data")
        if not isinstance(data, Mapping):
            raise FetchError("listing response has no data")
        children = data.get("children") or []
        items: list[ListingItem] = []
        for child in children:
            if not isinstance(child, Mapping):
                continue
            item_data = child.get("data")
            if isinstance(item_data, Mapping):
                items.append(ListingItem.from_payload(item_data))
        after = data.get("after")
        return Page(items=tuple(items), after=after if isinstance(after, str) and after else None)


def _error_of(payload: Mapping[str, Any]) -> str | None:
    error = payload.get("error")
    if error in (None, "", False):
        return None
    message = payload.get("message")
    if message:
        return f"{error} {message}"
    return str(error)


def _describe(exc: BaseException) -> str:
    text = str(exc)
    return text or exc.__class__.__name__
