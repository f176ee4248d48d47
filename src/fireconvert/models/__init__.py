"""Fireconvert configuration and result models."""

from .config import (
    DEFAULT_REMOVE_TAGS,
    FIRECRAWL_SCRAPE_URL,
    ApiConfig,
    ConversionOptions,
    FireconvertConfig,
    OutputConfig,
    ScrapeOptions,
)
from .results import ConversionResult, ScrapeResult

__all__ = [
    # Config
    "ApiConfig",
    "ConversionOptions",
    "DEFAULT_REMOVE_TAGS",
    "FIRECRAWL_SCRAPE_URL",
    "FireconvertConfig",
    "OutputConfig",
    "ScrapeOptions",
    # Results
    "ConversionResult",
    "ScrapeResult",
]
