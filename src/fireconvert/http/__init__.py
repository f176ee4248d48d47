"""HTTP client for the remote scraping service."""

from .client import NETWORK_ERROR_MESSAGE, FirecrawlClient, scrape_blocking
from .protocols import Scraper

__all__ = [
    "FirecrawlClient",
    "NETWORK_ERROR_MESSAGE",
    "Scraper",
    "scrape_blocking",
]
