"""Protocol definitions for the remote scraping client."""

from __future__ import annotations

from typing import Protocol

from ..models.config import ScrapeOptions
from ..models.results import ScrapeResult


class Scraper(Protocol):
    """
    Protocol for remote scrapers.

    This abstraction allows for:
    - Mock implementations in tests
    - Other scraping services with the same request/response shape
    """

    async def scrape(self, url: str, options: ScrapeOptions | None = None) -> ScrapeResult:
        """
        Scrape a single URL.

        Args:
            url: Page to scrape
            options: Per-request scrape options

        Returns:
            ScrapeResult; transport failures are reported, not raised
        """
        ...
