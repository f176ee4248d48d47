"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from ..exceptions import ConversionError
from ..models.config import ConversionOptions
from ..models.results import ConversionResult
from .escaping import FragmentBuffer, collapse_whitespace, escape_markdown, finalize
from .parser import build_tree
from .protocols import MarkdownConverter
from .rules import (
    BUILTIN_RULES,
    DEFAULT_RULE,
    KEEP_RULE,
    PREFORMATTED_ELEMENTS,
    RAW_RULE,
    RenderFunction,
    Rule,
    RuleFilter,
    is_block,
    list_item_index,
    make_predicate,
)

logger = logging.getLogger(__name__)

CONVERSION_FAILED_MESSAGE = "Error converting HTML to Markdown. Please check the input HTML."


class HtmlToMarkdown:
    """
    Converts HTML content to clean Markdown.

    Each element is rendered bottom-up: its children are converted first and
    the rule chosen for the element receives their Markdown. Rules are looked
    up in this order:

    1. custom rules, in registration order (the first match wins)
    2. inside <pre>, the raw rule (text only, <br> as a newline)
    3. tags registered with ``keep()``, emitted as raw HTML
    4. the built-in rule for the tag name
    5. the default rule (children pass through unchanged)

    Tags in the removal set are deleted with their whole subtree before
    rendering starts.

    Example:
        converter = HtmlToMarkdown(ConversionOptions(heading_style="setext"))
        converter.exclude("iframe")
        converter.add_rule("strike", ["del", "s"], lambda el, content, opts: f"~~{content}~~")
        markdown = converter.convert("<h1>Title</h1><p>Hello <del>world</del></p>")
    """

    def __init__(self, options: Optional[ConversionOptions] = None):
        """
        Initialize the Markdown converter.

        Args:
            options: Conversion options; fixed for the lifetime of the converter
        """
        self._options = options or ConversionOptions()
        self._rules: list[Rule] = []
        self._removed: set[str] = set(self._options.remove_tags)
        self._kept: set[str] = set(self._options.keep_tags)

    @property
    def options(self) -> ConversionOptions:
        return self._options

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Custom rules in priority order."""
        return tuple(self._rules)

    @property
    def removed_tags(self) -> frozenset[str]:
        return frozenset(self._removed)

    @property
    def kept_tags(self) -> frozenset[str]:
        return frozenset(self._kept)

    def add_rule(self, name: str, rule_filter: RuleFilter, render: RenderFunction) -> Rule:
        """
        Register a custom rule.

        Custom rules take precedence over built-in rules. When several custom
        rules match the same element, the one registered first is used.

        Args:
            name: Rule name, used in debug logging
            rule_filter: Tag name, iterable of tag names, or ``predicate(Tag) -> bool``
            render: ``render(Tag, content, options) -> str``

        Returns:
            The registered rule
        """
        rule = Rule(name=name, predicate=make_predicate(rule_filter), render=render)
        self._rules.append(rule)
        logger.debug(f"Registered custom rule {name!r} (priority {len(self._rules)})")
        return rule

    def exclude(self, tag_name: str) -> None:
        """Remove ``tag_name`` elements and everything inside them from the output."""
        self._removed.add(tag_name.strip().lower())

    def keep(self, tag_name: str) -> None:
        """Emit ``tag_name`` elements as raw HTML instead of converting them."""
        self._kept.add(tag_name.strip().lower())

    def rule_for(self, element: Tag, preformatted: bool = False) -> Rule:
        """Resolve the rule that renders ``element``."""
        for rule in self._rules:
            if rule.matches(element):
                return rule
        if preformatted:
            return RAW_RULE
        if element.name in self._kept:
            return KEEP_RULE
        return BUILTIN_RULES.get(element.name, DEFAULT_RULE)

    def convert(self, html: str) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string (a fragment or a whole document)

        Returns:
            Markdown string; empty for a document without text

        Raises:
            ConversionError: If ``html`` is not a string or is rejected by
                the parser
        """
        root = build_tree(html, self._removed)
        return finalize(self._render_tree(root))

    def _render_tree(self, root: Tag) -> str:
        """
        Post-order walk with an explicit stack.

        A frame is pushed for every element that needs its children rendered;
        when its child iterator is exhausted the frame is popped, its rule is
        applied and the fragment is appended to the parent frame. Depth is
        bounded only by memory.
        """
        stack = [_Frame(root, DEFAULT_RULE, preformatted=False)]
        while True:
            frame = stack[-1]
            child = next(frame.children, None)

            if child is None:
                stack.pop()
                if not stack:
                    return frame.buffer.getvalue()
                stack[-1].buffer.append(self._apply(frame))
            elif isinstance(child, Tag):
                rule = self.rule_for(child, frame.preformatted)
                if rule is KEEP_RULE:
                    frame.buffer.append(rule.render(child, "", self._options))
                    continue
                preformatted = frame.preformatted or child.name in PREFORMATTED_ELEMENTS
                child_frame = _Frame(child, rule, preformatted)
                if child.name == "li":
                    child_frame.index = frame.items
                    frame.items += 1
                stack.append(child_frame)
            elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                frame.buffer.append(self._render_text(child, frame.element, frame.preformatted))

    def _apply(self, frame: _Frame) -> str:
        content = frame.buffer.getvalue()
        if frame.index is None:
            return frame.rule.render(frame.element, content, self._options)

        token = list_item_index.set(frame.index)
        try:
            return frame.rule.render(frame.element, content, self._options)
        finally:
            list_item_index.reset(token)

    def _render_text(self, node: NavigableString, parent: Tag, preformatted: bool) -> str:
        text = str(node)
        if preformatted:
            return text

        text = collapse_whitespace(text)
        if _touches_block(node.previous_sibling, parent, forward=False):
            text = text.lstrip(" ")
        if _touches_block(node.next_sibling, parent, forward=True):
            text = text.rstrip(" ")
        return escape_markdown(text)


class _Frame:
    """An element whose children are being rendered."""

    __slots__ = ("element", "rule", "preformatted", "children", "buffer", "items", "index")

    def __init__(self, element: Tag, rule: Rule, preformatted: bool):
        self.element = element
        self.rule = rule
        self.preformatted = preformatted
        self.children = iter(element.contents)
        self.buffer = FragmentBuffer(preformatted)
        # <li> children seen so far, and this element's position if it is one
        self.items = 0
        self.index: Optional[int] = None


def _touches_block(sibling: Optional[PageElement], parent: Tag, forward: bool) -> bool:
    """Whether whitespace on this side of a text node sits on a block boundary."""
    while isinstance(sibling, PreformattedString):
        sibling = sibling.next_sibling if forward else sibling.previous_sibling

    if sibling is None:
        return is_block(parent)
    if isinstance(sibling, Tag):
        return sibling.name == "br" or is_block(sibling)
    return False


def convert_html_to_markdown(
    html: str,
    options: Optional[ConversionOptions] = None,
    converter: Optional[MarkdownConverter] = None,
) -> ConversionResult:
    """
    Convert HTML and report the outcome as a result instead of raising.

    Args:
        html: HTML content string
        options: Conversion options for a fresh converter (ignored if
            ``converter`` is given)
        converter: Pre-configured converter with custom rules

    Returns:
        ConversionResult with the Markdown, or a generic error message
    """
    converter = converter or HtmlToMarkdown(options)
    try:
        markdown = converter.convert(html)
    except ConversionError as e:
        logger.error(f"Local conversion failed: {e}")
        return ConversionResult.failed(CONVERSION_FAILED_MESSAGE)

    logger.debug(f"Converted {len(html)} characters of HTML to {len(markdown)} characters of Markdown")
    return ConversionResult.ok(markdown)
