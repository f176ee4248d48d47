"""Content conversion for fireconvert (HTML to Markdown, frontmatter)."""

from .frontmatter import FrontmatterBuilder
from .markdown import CONVERSION_FAILED_MESSAGE, HtmlToMarkdown, convert_html_to_markdown
from .protocols import MarkdownConverter
from .rules import BLOCK_ELEMENTS, BUILTIN_RULES, Rule

__all__ = [
    # Protocols
    "MarkdownConverter",
    # Implementations
    "HtmlToMarkdown",
    "FrontmatterBuilder",
    "convert_html_to_markdown",
    # Rules
    "Rule",
    "BUILTIN_RULES",
    "BLOCK_ELEMENTS",
    "CONVERSION_FAILED_MESSAGE",
]
