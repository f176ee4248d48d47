"""HTML parsing front-end for the Markdown engine."""

import logging
from collections.abc import Iterable

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from ..exceptions import ConversionError

logger = logging.getLogger(__name__)

# Rendered only when the document has no <body> to select
HEAD_ONLY_TAGS = ("head", "title", "meta", "link", "base")


def parse_html(html: str) -> BeautifulSoup:
    """
    Parse an HTML string into a fresh document tree.

    Unclosed tags, stray end tags and bad nesting are repaired by the
    parser; only non-string input and markup the parser rejects outright
    raise.

    Args:
        html: Raw HTML (or plain text)

    Returns:
        Parsed BeautifulSoup document

    Raises:
        ConversionError: If the input cannot be parsed at all
    """
    if not isinstance(html, str):
        raise ConversionError(f"Expected HTML as str, got {type(html).__name__}")

    try:
        return BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as e:
        raise ConversionError(f"HTML parser rejected the document: {e}") from e


def select_content_root(soup: BeautifulSoup) -> Tag:
    """Return <body> when present, else the whole document minus head content."""
    body = soup.find("body")
    if isinstance(body, Tag):
        return body

    for element in soup.find_all(list(HEAD_ONLY_TAGS)):
        if not element.decomposed:
            element.decompose()
    return soup


def remove_elements(root: Tag, tag_names: Iterable[str]) -> int:
    """
    Remove every element named in ``tag_names`` together with its subtree.

    Returns:
        Number of subtrees removed
    """
    names = sorted(set(tag_names))
    if not names:
        return 0

    removed = 0
    for element in root.find_all(names):
        # Nested matches are already gone with their ancestor
        if element.decomposed:
            continue
        element.decompose()
        removed += 1
    return removed


def build_tree(html: str, remove_tags: Iterable[str] = ()) -> Tag:
    """
    Parse ``html`` and prepare the subtree that will be rendered.

    The tree is private to the call, so the removal pass mutates it freely.
    """
    soup = parse_html(html)
    root = select_content_root(soup)
    removed = remove_elements(root, remove_tags)
    if removed:
        logger.debug(f"Removed {removed} excluded element(s) before rendering")
    return root
