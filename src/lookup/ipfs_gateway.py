"""IPFS gateway metadata lookup.

This module fetches metadata documents over HTTP from an IPFS
gateway. Transient failures are retried with exponential backoff;
the translator never retries on its own.
"""

from __future__ import annotations

import asyncio
from types import TracebackType

import httpx

from core.config import IndexerConfig
from core.errors import MetadataLookupError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class IpfsGatewayLookup:
    """Resolve CIDs through an HTTP gateway."""

    def __init__(
        self,
        gateway_url: str,
        timeout_seconds: float,
        max_retries: int,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._gateway_url = gateway_url
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: IndexerConfig) -> "IpfsGatewayLookup":
        """Create a lookup from runtime configuration."""
        return cls(
            gateway_url=config.ipfs_gateway,
            timeout_seconds=config.lookup_timeout_seconds,
            max_retries=config.lookup_max_retries,
        )

    async def __aenter__(self) -> "IpfsGatewayLookup":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this lookup created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def resolve(self, pointer: str) -> str:
        """Fetch the document behind ``pointer``.

        Args:
            pointer: Content identifier appended to the gateway URL.

        Returns:
            Response body text.

        Raises:
            MetadataLookupError: If every attempt fails, or at once on a
                4xx response.
        """
        url = f"{self._gateway_url}{pointer}"
        attempt = 0
        while True:
            try:
                return await self._fetch(url)
            except httpx.HTTPError as error:
                if attempt >= self._max_retries or _is_client_error(error):
                    raise MetadataLookupError(
                        pointer,
                        f"Failed to fetch metadata for pointer '{pointer}' from {url} "
                        f"after {attempt + 1} attempt(s): {error}. "
                        "Check the gateway URL or retry later.",
                    ) from error
                wait_seconds = 2**attempt
                _LOGGER.warning(
                    "metadata_lookup_retry",
                    pointer=pointer,
                    attempt=attempt + 1,
                    wait_seconds=wait_seconds,
                    error=str(error),
                )
                await asyncio.sleep(wait_seconds)
                attempt += 1

    async def _fetch(self, url: str) -> str:
        response = await self._get_client().get(url, timeout=self._timeout_seconds)
        response.raise_for_status()
        return response.text

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
            self._owns_client = True
        return self._client


def _is_client_error(error: httpx.HTTPError) -> bool:
    """Return whether the gateway rejected the request itself (4xx)."""
    return isinstance(error, httpx.HTTPStatusError) and error.response.is_client_error
