"""Protocol definitions for content conversion."""

from typing import Protocol


class MarkdownConverter(Protocol):
    """
    Protocol for converting HTML to Markdown.

    Implementations must be safe to call repeatedly and from several threads:
    no state may carry over from one ``convert`` call to the next.
    """

    def convert(self, html: str) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string

        Returns:
            Markdown string

        Raises:
            ConversionError: If the input cannot be parsed at all
        """
        ...
