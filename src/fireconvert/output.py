"""Helpers for writing converted Markdown to disk."""

import logging
import re
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def download_filename(timestamp_ms: Optional[int] = None) -> str:
    """Default name for a saved conversion: ``converted-<epoch milliseconds>.md``."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"converted-{timestamp_ms}.md"


def url_to_filename(url: str) -> str:
    """
    Convert a scraped URL to a safe Markdown filename.

    Args:
        url: The URL that was scraped

    Returns:
        Filename such as ``example.com_docs_intro.md``
    """
    parsed = urlparse(url if "://" in url else f"https://{url}")
    path = parsed.path.strip("/")
    if path.endswith((".html", ".htm")):
        path = path.rsplit(".", 1)[0]

    filename = "_".join(part for part in (parsed.hostname or "", path.replace("/", "_")) if part)
    filename = re.sub(r"[^\w\-.]", "_", filename)
    filename = re.sub(r"_+", "_", filename).strip("_.")

    return (filename or "index") + ".md"


def looks_like_html(text: str) -> bool:
    """Cheap check used before auto-converting pasted or piped input."""
    return "<" in text and ">" in text


def save_markdown(markdown: str, path: Path) -> Path:
    """
    Write Markdown to ``path``, creating parent directories.

    A directory path gets a ``converted-<ms>.md`` file inside it.

    Returns:
        The file that was written
    """
    path = Path(path)
    if path.is_dir():
        path = path / download_filename()

    path.parent.mkdir(parents=True, exist_ok=True)
    if not markdown.endswith("\n"):
        markdown += "\n"
    path.write_text(markdown, encoding="utf-8")
    logger.info(f"Saved {len(markdown)} characters of Markdown to {path}")
    return path
