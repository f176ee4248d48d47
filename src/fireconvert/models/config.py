"""Pydantic configuration models for fireconvert."""

import os
import re
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_REMOVE_TAGS = ("script", "style", "noscript")

FIRECRAWL_SCRAPE_URL = "https://api.firecrawl.dev/v1/scrape"


class ConversionOptions(BaseModel):
    """
    Options for the HTML to Markdown engine.

    Resolved once when a converter is built and never changed afterwards.

    Example:
        options = ConversionOptions(heading_style="setext", bullet_list_marker="*")
        converter = HtmlToMarkdown(options)
    """

    heading_style: Literal["atx", "setext"] = Field(
        "atx",
        description="'atx' for '#' prefixed headings, 'setext' for underlined h1/h2",
    )
    code_block_style: Literal["fenced", "indented"] = Field(
        "fenced",
        description="Render <pre> as fenced or 4-space indented blocks",
    )
    fence: Literal["```", "~~~"] = Field("```", description="Fence used for fenced code blocks")
    hr: str = Field("---", min_length=3, description="Token for horizontal rules")
    bullet_list_marker: Literal["-", "+", "*"] = Field("-", description="Marker for unordered list items")
    strong_delimiter: Literal["**", "__"] = Field("**", description="Delimiter for strong emphasis")
    em_delimiter: Literal["*", "_"] = Field("*", description="Delimiter for emphasis")
    line_break: str = Field("  ", description="Text emitted before the newline of a <br>")
    remove_tags: tuple[str, ...] = Field(
        DEFAULT_REMOVE_TAGS,
        description="Tags removed together with their content before rendering",
    )
    keep_tags: tuple[str, ...] = Field(
        (),
        description="Tags emitted verbatim as HTML",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("remove_tags", "keep_tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(str(tag).strip().lower() for tag in value if str(tag).strip())
        return value


class ScrapeOptions(BaseModel):
    """Per-request options forwarded to the scraping API."""

    wait_for: int = Field(0, ge=0, description="Milliseconds to wait for the page before scraping")
    mobile: bool = Field(False, description="Emulate a mobile device")

    model_config = {"extra": "forbid"}


_ENV_REFERENCE_RE = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def expand_env_refs(value: str) -> str:
    """Replace ``$VAR`` and ``${VAR}`` with environment values; unset names stay as written."""
    return _ENV_REFERENCE_RE.sub(lambda m: os.environ.get(m.group(1) or m.group(2), m.group(0)), value)


class ApiConfig(BaseModel):
    """Configuration for the remote scraping API.

    The API key supports environment variable expansion, e.g.
    ``api_key: $FIRECRAWL_API_KEY``.
    """

    base_url: str = Field(FIRECRAWL_SCRAPE_URL, description="Scrape endpoint URL")
    api_key: Optional[str] = Field(None, description="Bearer token for the scrape endpoint")
    timeout: float = Field(60.0, gt=0, description="Total request timeout in seconds")

    model_config = {"extra": "forbid"}

    @field_validator("api_key", "base_url")
    @classmethod
    def _expand_env(cls, value: Optional[str]) -> Optional[str]:
        return expand_env_refs(value) if value else value


class OutputConfig(BaseModel):
    """Configuration for saving converted Markdown."""

    directory: Path = Field(Path("."), description="Directory for generated .md files")
    frontmatter: bool = Field(False, description="Prepend YAML frontmatter built from scrape metadata")

    model_config = {"extra": "forbid"}


class FireconvertConfig(BaseModel):
    """
    Root configuration model for fireconvert.

    YAML format:
        conversion:
          heading_style: setext
          remove_tags: [script, style, noscript, iframe]
        api:
          api_key: $FIRECRAWL_API_KEY
          timeout: 30
        scrape:
          wait_for: 1000
        output:
          directory: ./markdown
    """

    conversion: ConversionOptions = Field(default_factory=ConversionOptions)
    api: ApiConfig = Field(default_factory=ApiConfig)
    scrape: ScrapeOptions = Field(default_factory=ScrapeOptions)
    output: OutputConfig = Field(default_factory=OutputConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "FireconvertConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "FireconvertConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text(encoding="utf-8"))
