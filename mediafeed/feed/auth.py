from __future__ import annotations

import logging

from ..errors import AuthError
from ..provider.base import ListingProvider
from .callbacks import StatusSink, emit_status
from .models import Credentials

LOGGER = logging.getLogger(__name__)


class Authenticator:
    def __init__(self, provider: ListingProvider) -> None:
        self._provider = provider

    async def authenticate(self, credentials: Credentials, on_status: StatusSink | None = None) -> str:
        await emit_status(on_status, "Fetching access token...")
        try:
            token = await self._provider.request_token(credentials.client_id, credentials.client_secret)
        except AuthError as exc:
            LOGGER.warning("Access token request failed", extra={"error": str(exc)})
            await emit_status(on_status, f"Error getting access token: {exc}", True)
            raise
        LOGGER.debug("Access token retrieved")
        await emit_status(on_status, "Access token retrieved")
        return token
