"""YAML frontmatter for converted Markdown."""

import json
from collections.abc import Mapping
from typing import Any, Optional

# Scrape metadata keys copied into frontmatter, in output order
METADATA_FIELDS = (
    ("title", "title"),
    ("sourceURL", "source"),
    ("description", "description"),
    ("language", "language"),
    ("statusCode", "status_code"),
)

MAX_VALUE_LENGTH = 500


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    # A JSON string literal is a valid double-quoted YAML scalar
    return json.dumps(str(value)[:MAX_VALUE_LENGTH], ensure_ascii=False)


class FrontmatterBuilder:
    """
    Builds YAML frontmatter for Markdown files.

    Example:
        builder = FrontmatterBuilder()
        header = builder.build({"title": "Getting Started", "source": "https://example.com"})
        header = builder.from_metadata(scrape_result.metadata)
    """

    def build(self, fields: Mapping[str, Any]) -> str:
        """
        Build a frontmatter block from ``fields``.

        ``None`` and empty values are skipped; lists become YAML sequences.

        Returns:
            Frontmatter with ``---`` delimiters and a trailing blank line, or
            an empty string when no field has a value
        """
        lines = []
        for key, value in fields.items():
            if value is None or value == "" or value == []:
                continue
            if isinstance(value, (list, tuple)):
                lines.append(f"{key}:")
                lines.extend(f"  - {_scalar(item)}" for item in value)
            else:
                lines.append(f"{key}: {_scalar(value)}")

        if not lines:
            return ""
        return "---\n" + "\n".join(lines) + "\n---\n\n"

    def from_metadata(self, metadata: Optional[Mapping[str, Any]], url: Optional[str] = None) -> str:
        """Build frontmatter from the metadata returned with a scrape."""
        metadata = metadata or {}
        fields: dict[str, Any] = {}
        for source_key, target_key in METADATA_FIELDS:
            fields[target_key] = metadata.get(source_key)
        if not fields.get("source"):
            fields["source"] = url
        return self.build(fields)
