"""Result types returned by the local and remote conversion pipelines."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ConversionResult:
    """
    Outcome of a local HTML to Markdown conversion.

    Either ``markdown`` is set and ``success`` is True, or ``error`` holds
    a message suitable for display. No partial output is returned.
    """

    success: bool
    markdown: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, markdown: str) -> "ConversionResult":
        return cls(success=True, markdown=markdown)

    @classmethod
    def failed(cls, error: str) -> "ConversionResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class ScrapeResult:
    """
    Outcome of a remote scrape request.

    Example:
        result = await client.scrape("https://example.com")
        if result.success:
            print(result.markdown)
        else:
            print(f"Error: {result.error}")
    """

    success: bool
    markdown: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def title(self) -> Optional[str]:
        """Page title reported by the scraping service, if any."""
        value = self.metadata.get("title")
        return str(value) if value else None

    @property
    def source_url(self) -> Optional[str]:
        """Source URL reported by the scraping service, if any."""
        value = self.metadata.get("sourceURL") or self.metadata.get("url")
        return str(value) if value else None
