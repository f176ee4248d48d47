"""
fireconvert - Turn web pages and HTML into clean Markdown.

Usage:
    from fireconvert import HtmlToMarkdown, ConversionOptions

    converter = HtmlToMarkdown(ConversionOptions(heading_style="atx"))
    markdown = converter.convert("<h1>Hello</h1><p>World</p>")

    from fireconvert import FirecrawlClient

    async with FirecrawlClient(api_key="fc-...") as client:
        result = await client.scrape("https://example.com")
"""

__version__ = "1.0.0"

from .conversion import (
    FrontmatterBuilder,
    HtmlToMarkdown,
    MarkdownConverter,
    Rule,
    convert_html_to_markdown,
)
from .credentials import CredentialStore
from .exceptions import ConversionError, CredentialError, FireconvertError, ScrapeError
from .http import FirecrawlClient, Scraper, scrape_blocking
from .models import (
    ApiConfig,
    ConversionOptions,
    ConversionResult,
    FireconvertConfig,
    OutputConfig,
    ScrapeOptions,
    ScrapeResult,
)

__all__ = [
    "__version__",
    # Conversion
    "HtmlToMarkdown",
    "MarkdownConverter",
    "Rule",
    "FrontmatterBuilder",
    "convert_html_to_markdown",
    # Remote
    "FirecrawlClient",
    "Scraper",
    "scrape_blocking",
    # Config
    "FireconvertConfig",
    "ConversionOptions",
    "ScrapeOptions",
    "ApiConfig",
    "OutputConfig",
    # Results
    "ConversionResult",
    "ScrapeResult",
    # Storage
    "CredentialStore",
    # Errors
    "FireconvertError",
    "ConversionError",
    "ScrapeError",
    "CredentialError",
]
