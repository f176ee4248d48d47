"""Async client for the Firecrawl scrape endpoint."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any

import aiohttp

from .. import __version__
from ..exceptions import ScrapeError
from ..models.config import FIRECRAWL_SCRAPE_URL, ScrapeOptions
from ..models.results import ScrapeResult

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "An unexpected network error occurred"


class FirecrawlClient:
    """
    Async client for a Firecrawl-compatible ``/scrape`` endpoint.

    Each ``scrape`` call sends exactly one POST request. There is no retry:
    network errors, non-2xx responses and malformed JSON are reported in
    ``ScrapeResult.error`` exactly as they were received.

    Example:
        async with FirecrawlClient(api_key="fc-...") as client:
            result = await client.scrape("https://example.com", ScrapeOptions(mobile=True))
            if result.success:
                print(result.markdown)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = FIRECRAWL_SCRAPE_URL,
        timeout: float = 60.0,
        user_agent: str | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Bearer token for the scrape endpoint
            base_url: Full URL of the scrape endpoint
            timeout: Total request timeout in seconds
            user_agent: Custom User-Agent string

        Raises:
            ScrapeError: If no API key is given
        """
        if not api_key or not api_key.strip():
            raise ScrapeError("A Firecrawl API key is required to scrape URLs")

        self._api_key = api_key.strip()
        self._base_url = base_url
        self._timeout = timeout
        self._user_agent = user_agent or f"fireconvert/{__version__}"
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> FirecrawlClient:
        """Enter async context and create session."""
        self._session = aiohttp.ClientSession(
            headers={"User-Agent": self._user_agent},
            timeout=aiohttp.ClientTimeout(total=self._timeout),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    def build_payload(self, url: str, options: ScrapeOptions | None = None) -> dict[str, Any]:
        """JSON body for a scrape request."""
        options = options or ScrapeOptions()
        return {
            "url": url,
            "formats": ["markdown"],
            "waitFor": options.wait_for,
            "mobile": options.mobile,
        }

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def scrape(self, url: str, options: ScrapeOptions | None = None) -> ScrapeResult:
        """
        Scrape ``url`` and return its Markdown.

        Args:
            url: Page to scrape
            options: Wait time and device emulation

        Returns:
            ScrapeResult with markdown and metadata, or an error string

        Raises:
            ScrapeError: If ``url`` is empty
            RuntimeError: If called outside ``async with``
        """
        if not url or not url.strip():
            raise ScrapeError("A URL is required")
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        url = url.strip()
        payload = self.build_payload(url, options)
        logger.debug(f"POST {self._base_url} for {url} (waitFor={payload['waitFor']}, mobile={payload['mobile']})")

        try:
            async with self._session.post(self._base_url, json=payload, headers=self._headers()) as response:
                status = response.status
                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    logger.warning(f"Scrape of {url} returned a non-JSON body (HTTP {status})")
                    return ScrapeResult(success=False, error=f"Invalid JSON response: {e}", status_code=status)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Scrape request for {url} failed: {e!r}")
            return ScrapeResult(success=False, error=str(e) or NETWORK_ERROR_MESSAGE)

        return self._parse_body(url, status, body)

    def _parse_body(self, url: str, status: int, body: Any) -> ScrapeResult:
        """Map a decoded JSON body onto a ScrapeResult."""
        if not isinstance(body, dict):
            body = {}

        if not 200 <= status < 300:
            error = body.get("error") or body.get("message") or f"Error {status}: Failed to scrape URL"
            logger.warning(f"Scrape of {url} failed with HTTP {status}: {error}")
            return ScrapeResult(success=False, error=str(error), status_code=status)

        data = body.get("data")
        if not isinstance(data, dict) or not isinstance(data.get("markdown"), str):
            error = body.get("error") or "Response did not contain markdown"
            return ScrapeResult(success=False, error=str(error), status_code=status)

        metadata = data.get("metadata")
        logger.info(f"Scraped {url} ({len(data['markdown'])} characters of Markdown)")
        return ScrapeResult(
            success=True,
            markdown=data["markdown"],
            metadata=metadata if isinstance(metadata, dict) else {},
            status_code=status,
        )


def scrape_blocking(
    api_key: str,
    url: str,
    options: ScrapeOptions | None = None,
    **client_kwargs: Any,
) -> ScrapeResult:
    """
    Blocking scrape for sync code that can't use async/await.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use FirecrawlClient directly instead.

    Args:
        api_key: Bearer token for the scrape endpoint
        url: Page to scrape
        options: Wait time and device emulation
        **client_kwargs: Passed to FirecrawlClient (base_url, timeout, user_agent)

    Returns:
        ScrapeResult
    """

    async def run() -> ScrapeResult:
        async with FirecrawlClient(api_key, **client_kwargs) as client:
            return await client.scrape(url, options)

    return asyncio.run(run())
