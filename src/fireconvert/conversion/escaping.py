"""Whitespace collapsing, Markdown escaping and fragment joining."""

import re

# HTML whitespace only; U+00A0 (&nbsp;) is content and survives collapsing
_HTML_WHITESPACE_RE = re.compile(r"[ \t\n\r\f]+")

# Inline characters with Markdown meaning, unless already backslash-escaped
_INLINE_SPECIAL_RE = re.compile(r"(?<!\\)([*_`\[\]])")

# "<" that would open an HTML tag, comment or autolink
_ANGLE_BRACKET_RE = re.compile(r"(?<!\\)<(?=[A-Za-z/!?])")

# Constructs that only have meaning at the start of a line. A text node may
# land after an empty inline sibling, so a few leading spaces are allowed.
_LINE_START_ESCAPES = (
    (re.compile(r"^( *)#"), r"\1\\#"),
    (re.compile(r"^( *)>"), r"\1\\>"),
    (re.compile(r"^( *)="), r"\1\\="),
    (re.compile(r"^( *)-(?=-|\s|$)"), r"\1\\-"),
    (re.compile(r"^( *)\+(?=\s|$)"), r"\1\\+"),
    (re.compile(r"^( *)~(?=~~)"), r"\1\\~"),
    (re.compile(r"^( *)(\d+)([.)])(?=\s|$)"), r"\1\2\\\3"),
)

# Up to three leading spaces; four or more start an indented code block
_SHALLOW_INDENT_RE = re.compile(r"^ {1,3}(?=\S)")

_URL_REPLACEMENTS = {" ": "%20", "(": "%28", ")": "%29", "<": "%3C", ">": "%3E"}


def collapse_whitespace(text: str) -> str:
    """Collapse runs of HTML whitespace to a single space."""
    return _HTML_WHITESPACE_RE.sub(" ", text)


def escape_markdown(text: str) -> str:
    """
    Backslash-escape characters that would otherwise be read as Markdown.

    Escaping is idempotent: characters that are already preceded by a
    backslash are left alone, so running the output through again is a no-op.

    Args:
        text: Whitespace-collapsed text from a single text node

    Returns:
        Escaped text
    """
    text = _INLINE_SPECIAL_RE.sub(r"\\\1", text)
    text = _ANGLE_BRACKET_RE.sub(r"\\<", text)
    for pattern, replacement in _LINE_START_ESCAPES:
        text = pattern.sub(replacement, text, count=1)
    return text


def escape_link_text(text: str) -> str:
    """Escape square brackets in alt text and titles placed inside [...]."""
    return re.sub(r"(?<!\\)([\[\]])", r"\\\1", collapse_whitespace(text).strip())


def escape_title(title: str) -> str:
    return collapse_whitespace(title).strip().replace('"', '\\"')


def escape_url(url: str) -> str:
    """Percent-encode characters that would terminate an inline link destination."""
    return "".join(_URL_REPLACEMENTS.get(char, char) for char in url.strip())


def split_whitespace(content: str) -> tuple[str, str, str]:
    """Split content into (leading whitespace, core, trailing whitespace)."""
    core = content.strip()
    if not core:
        return content, "", ""
    leading = content[: len(content) - len(content.lstrip())]
    trailing = content[len(content.rstrip()) :]
    return leading, core, trailing


def wrap_inline(content: str, opening: str, closing: str = "") -> str:
    """
    Wrap inline content in delimiters, keeping flanking whitespace outside.

    ``"<b> bold </b>"`` must become ``" **bold** "``; ``"** bold **"`` is not
    emphasis in Markdown. Whitespace-only content is returned unchanged.
    """
    leading, core, trailing = split_whitespace(content)
    if not core:
        return content
    return f"{leading}{opening}{core}{closing or opening}{trailing}"


class FragmentBuffer:
    """
    Accumulates rendered fragments for one element.

    Newlines at a seam are merged: the larger of the two runs wins and is
    capped at two, so consecutive blocks end up separated by exactly one
    blank line. Trailing spaces before a blank line are dropped and shallow
    indentation after a seam is removed. Without a newline at the seam a
    doubled space collapses.

    Only the last stored fragment is inspected on append, so building a
    long run of siblings stays linear.
    """

    def __init__(self, preformatted: bool = False):
        self.preformatted = preformatted
        self._parts: list[str] = []

    def append(self, addition: str) -> None:
        if not addition:
            return
        if self.preformatted or not self._parts:
            self._parts.append(addition)
            return

        last = self._parts[-1]
        left = last.rstrip("\n")
        right = addition.lstrip("\n")
        newlines = max(len(last) - len(left), len(addition) - len(right))

        if newlines:
            if newlines > 1:
                left = left.rstrip(" ")
                # A whitespace-only fragment may hide spaces stored before it
                while not left and len(self._parts) > 1:
                    self._parts.pop()
                    left = self._parts[-1].rstrip(" \n")
            self._parts[-1] = left + "\n" * min(newlines, 2)
            right = _SHALLOW_INDENT_RE.sub("", right)
        else:
            if left.endswith(" ") and right.startswith(" "):
                right = right.lstrip(" ")
            self._parts[-1] = left
        if right:
            self._parts.append(right)

    def getvalue(self) -> str:
        return "".join(self._parts)


def join_fragments(output: str, addition: str) -> str:
    """Concatenate two rendered fragments with the seam rules of FragmentBuffer."""
    buffer = FragmentBuffer()
    buffer.append(output)
    buffer.append(addition)
    return buffer.getvalue()


def finalize(markdown: str) -> str:
    """Strip the document-level separators left over from block rules."""
    return _SHALLOW_INDENT_RE.sub("", markdown.lstrip("\t\r\n")).rstrip()
