"""Rule table mapping HTML elements to Markdown fragments."""

from __future__ import annotations

import re
from collections.abc import Iterable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Callable, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from ..models.config import ConversionOptions
from .escaping import (
    collapse_whitespace,
    escape_link_text,
    escape_title,
    escape_url,
    split_whitespace,
    wrap_inline,
)

Predicate = Callable[[Tag], bool]
RenderFunction = Callable[[Tag, str, ConversionOptions], str]
RuleFilter = Union[str, Iterable[str], Predicate]

# Elements separated from their neighbours by a blank line
# fmt: off
BLOCK_ELEMENTS = frozenset(
    {
        "address", "article", "aside", "audio", "blockquote", "body", "canvas",
        "center", "dd", "details", "dialog", "dir", "div", "dl", "dt", "fieldset",
        "figcaption", "figure", "footer", "form", "frameset", "h1", "h2", "h3",
        "h4", "h5", "h6", "header", "hgroup", "hr", "html", "li", "main", "menu",
        "nav", "noframes", "noscript", "ol", "output", "p", "pre", "section",
        "summary", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
        "video",
    }
)
# fmt: on

# Elements whose text is taken verbatim
PREFORMATTED_ELEMENTS = frozenset({"pre"})

LIST_INDENT = "    "
CODE_INDENT = "    "

_LANGUAGE_CLASS_RE = re.compile(r"^(?:language|lang)-(.+)$")
_NEWLINE_RUN_RE = re.compile(r"\s*\n\s*")
_UNESCAPED_PIPE_RE = re.compile(r"(?<!\\)\|")
_BACKTICK_RUN_RE = re.compile(r"`+")

# Position of the <li> being rendered among the items of its list
list_item_index: ContextVar[Optional[int]] = ContextVar("list_item_index", default=None)


@dataclass(frozen=True)
class Rule:
    """
    A named (predicate, render) pair.

    ``render`` receives the element, the already rendered Markdown of its
    children, and the converter's options, and returns a Markdown fragment.
    Block-level fragments surround themselves with ``"\\n\\n"``; the renderer
    merges those separators when joining siblings.
    """

    name: str
    predicate: Predicate
    render: RenderFunction

    def matches(self, element: Tag) -> bool:
        return bool(self.predicate(element))


def make_predicate(rule_filter: RuleFilter) -> Predicate:
    """Turn a tag name, a collection of tag names, or a callable into a predicate."""
    if callable(rule_filter):
        return rule_filter
    if isinstance(rule_filter, str):
        names = frozenset({rule_filter.lower()})
    else:
        names = frozenset(name.lower() for name in rule_filter)
    if not names:
        raise ValueError("Rule filter must name at least one tag")
    return lambda element: element.name in names


def is_block(node: object) -> bool:
    """True for block-level elements and for the document root."""
    if isinstance(node, BeautifulSoup):
        return True
    return isinstance(node, Tag) and node.name in BLOCK_ELEMENTS


def _int_attr(value: object, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _raw_text(element: Tag) -> str:
    """Text content with <br> mapped to newlines and comments dropped."""
    parts: list[str] = []
    for node in element.descendants:
        if isinstance(node, Tag):
            if node.name == "br":
                parts.append("\n")
        elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            parts.append(str(node))
    return "".join(parts)


# Block rules


def render_paragraph(element: Tag, content: str, options: ConversionOptions) -> str:
    return f"\n\n{content.strip()}\n\n"


def render_heading(element: Tag, content: str, options: ConversionOptions) -> str:
    level = int(element.name[1])
    text = _NEWLINE_RUN_RE.sub(" ", content).strip()
    if not text:
        return ""

    # setext only has underlines for the first two levels
    if options.heading_style == "setext" and level <= 2:
        underline = ("=" if level == 1 else "-") * len(text)
        return f"\n\n{text}\n{underline}\n\n"
    return f"\n\n{'#' * level} {text}\n\n"


def render_blockquote(element: Tag, content: str, options: ConversionOptions) -> str:
    body = content.strip("\n")
    if not body.strip():
        return ""
    quoted = "\n".join(f"> {line}" if line.strip() else ">" for line in body.split("\n"))
    return f"\n\n{quoted}\n\n"


def render_horizontal_rule(element: Tag, content: str, options: ConversionOptions) -> str:
    return f"\n\n{options.hr}\n\n"


def render_line_break(element: Tag, content: str, options: ConversionOptions) -> str:
    return f"{options.line_break}\n"


def render_list(element: Tag, content: str, options: ConversionOptions) -> str:
    body = content.strip("\n")
    if not body:
        return ""
    # Nested lists hug the text of their parent item
    if isinstance(element.parent, Tag) and element.parent.name == "li":
        return f"\n{body}\n"
    return f"\n\n{body}\n\n"


def list_item_prefix(element: Tag, options: ConversionOptions, index: Optional[int] = None) -> str:
    """
    Bullet marker, or ``N.`` counted from the list's ``start`` attribute.

    The renderer publishes each item's position in ``list_item_index``;
    counting earlier siblings is the fallback for callers outside a render.
    """
    parent = element.parent
    if isinstance(parent, Tag) and parent.name == "ol":
        start = _int_attr(parent.get("start"), 1)
        if index is None:
            index = list_item_index.get()
        if index is None:
            index = len(element.find_previous_siblings("li"))
        return f"{start + index}. "
    return f"{options.bullet_list_marker} "


def render_list_item(element: Tag, content: str, options: ConversionOptions) -> str:
    prefix = list_item_prefix(element, options)
    body = content.strip("\n").strip(" ")
    body = re.sub(r"\n(?=[^\n])", "\n" + LIST_INDENT, body)
    return f"{prefix}{body}\n"


def code_language(element: Tag) -> str:
    """Language hint from a ``language-*``/``lang-*`` class on <pre> or its <code>."""
    candidates = [element]
    code = element.find("code")
    if isinstance(code, Tag):
        candidates.insert(0, code)
    for candidate in candidates:
        for css_class in candidate.get("class") or []:
            match = _LANGUAGE_CLASS_RE.match(css_class)
            if match:
                return match.group(1)
    return ""


def render_code_block(element: Tag, content: str, options: ConversionOptions) -> str:
    code = content
    # A newline directly after <pre> is not part of the content
    if code.startswith("\n"):
        code = code[1:]
    code = code.rstrip("\n")
    if not code.strip():
        return ""

    if options.code_block_style == "indented":
        body = "\n".join(f"{CODE_INDENT}{line}" if line else "" for line in code.split("\n"))
        return f"\n\n{body}\n\n"

    fence_char = options.fence[0]
    longest = max(
        (len(run) for run in re.findall(rf"^{re.escape(fence_char)}{{3,}}", code, re.MULTILINE)),
        default=0,
    )
    fence = fence_char * max(3, longest + 1)
    return f"\n\n{fence}{code_language(element)}\n{code}\n{fence}\n\n"


# Inline rules


def render_strong(element: Tag, content: str, options: ConversionOptions) -> str:
    return wrap_inline(content, options.strong_delimiter)


def render_emphasis(element: Tag, content: str, options: ConversionOptions) -> str:
    return wrap_inline(content, options.em_delimiter)


def render_inline_code(element: Tag, content: str, options: ConversionOptions) -> str:
    code = collapse_whitespace(_raw_text(element))
    if not code.strip():
        return ""
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(code)), default=0)
    fence = "`" * (longest + 1)
    padding = " " if code.startswith("`") or code.endswith("`") else ""
    return f"{fence}{padding}{code}{padding}{fence}"


def render_link(element: Tag, content: str, options: ConversionOptions) -> str:
    href = str(element.get("href") or "").strip()
    if not href:
        return content

    leading, text, trailing = split_whitespace(content)
    if not text:
        return content

    title = element.get("title")
    title_part = f' "{escape_title(str(title))}"' if title else ""
    return f"{leading}[{text}]({escape_url(href)}{title_part}){trailing}"


def render_image(element: Tag, content: str, options: ConversionOptions) -> str:
    src = str(element.get("src") or "").strip()
    if not src:
        return ""
    alt = escape_link_text(str(element.get("alt") or ""))
    title = element.get("title")
    title_part = f' "{escape_title(str(title))}"' if title else ""
    return f"![{alt}]({escape_url(src)}{title_part})"


# Tables


def _cell_span(cell: Tag) -> int:
    return max(1, _int_attr(cell.get("colspan"), 1))


def render_table_cell(element: Tag, content: str, options: ConversionOptions) -> str:
    text = _NEWLINE_RUN_RE.sub(" ", content).strip()
    text = _UNESCAPED_PIPE_RE.sub(r"\\|", text)
    is_first = element.find_previous_sibling(["td", "th"]) is None
    cell = f"{'| ' if is_first else ' '}{text} |"
    return cell + " |" * (_cell_span(element) - 1)


def is_header_row(row: Tag) -> bool:
    """The first row of a table, wherever it sits (thead, tbody or bare)."""
    table = row.find_parent("table")
    if table is None:
        return False
    return table.find("tr") is row


def render_table_row(element: Tag, content: str, options: ConversionOptions) -> str:
    row = content.strip()
    if not row:
        return ""
    line = f"\n{row}\n"
    if is_header_row(element):
        columns = sum(_cell_span(cell) for cell in element.find_all(["td", "th"], recursive=False))
        line += "|" + " --- |" * max(columns, 1) + "\n"
    return line


def render_table_section(element: Tag, content: str, options: ConversionOptions) -> str:
    return content


def render_table(element: Tag, content: str, options: ConversionOptions) -> str:
    body = content.strip("\n")
    if not body.strip():
        return ""
    return f"\n\n{body}\n\n"


# Fallbacks


def render_default(element: Tag, content: str, options: ConversionOptions) -> str:
    """Children pass through unchanged; block elements still get blank-line separation."""
    if is_block(element):
        body = content.strip(" ").strip("\n")
        return f"\n\n{body}\n\n"
    return content


def render_kept(element: Tag, content: str, options: ConversionOptions) -> str:
    if is_block(element):
        return f"\n\n{element}\n\n"
    return str(element)


def render_raw(element: Tag, content: str, options: ConversionOptions) -> str:
    """Markup inside <pre> without a custom rule contributes only its text."""
    if element.name == "br":
        return "\n"
    return content


BUILTIN_RULES: dict[str, Rule] = {}


def _register(names: Iterable[str], render: RenderFunction) -> None:
    names = tuple(names)
    rule = Rule(name=render.__name__.removeprefix("render_"), predicate=make_predicate(names), render=render)
    for name in names:
        BUILTIN_RULES[name] = rule


_register(["p"], render_paragraph)
_register(["h1", "h2", "h3", "h4", "h5", "h6"], render_heading)
_register(["blockquote"], render_blockquote)
_register(["hr"], render_horizontal_rule)
_register(["br"], render_line_break)
_register(["ul", "ol"], render_list)
_register(["li"], render_list_item)
_register(["pre"], render_code_block)
_register(["strong", "b"], render_strong)
_register(["em", "i"], render_emphasis)
_register(["code", "kbd", "samp", "tt"], render_inline_code)
_register(["a"], render_link)
_register(["img"], render_image)
_register(["td", "th"], render_table_cell)
_register(["tr"], render_table_row)
_register(["thead", "tbody", "tfoot"], render_table_section)
_register(["table"], render_table)

DEFAULT_RULE = Rule(name="default", predicate=lambda element: True, render=render_default)
KEEP_RULE = Rule(name="keep", predicate=lambda element: True, render=render_kept)
RAW_RULE = Rule(name="raw", predicate=lambda element: True, render=render_raw)
