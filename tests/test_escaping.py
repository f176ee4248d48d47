"""Tests for escaping helpers and the parsing front-end."""

import pytest
from fireconvert import ConversionError
from fireconvert.conversion.escaping import (
    FragmentBuffer,
    collapse_whitespace,
    escape_markdown,
    escape_url,
    finalize,
    join_fragments,
    wrap_inline,
)
from fireconvert.conversion.parser import build_tree, parse_html, remove_elements, select_content_root


class TestEscapeMarkdown:
    """Tests for escape_markdown."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a*b", "a\\*b"),
            ("snake_case", "snake\\_case"),
            ("`code`", "\\`code\\`"),
            ("[link]", "\\[link\\]"),
            ("# title", "\\# title"),
            ("> quote", "\\> quote"),
            ("- item", "\\- item"),
            ("+ item", "\\+ item"),
            ("12. item", "12\\. item"),
            ("3) item", "3\\) item"),
            ("---", "\\---"),
            ("===", "\\==="),
            ("~~~ fence", "\\~~~ fence"),
            (" # x", " \\# x"),
            ("<div>", "\\<div>"),
            ("a </b> c", "a \\</b> c"),
        ],
    )
    def test_escapes(self, text, expected):
        """Test each escaped construct."""
        assert escape_markdown(text) == expected

    @pytest.mark.parametrize("text", ["a - b", "a # b", "-1", "1.5", "a < b", "x <3", "~~", "plain text"])
    def test_left_alone(self, text):
        """Test text that has no Markdown meaning."""
        assert escape_markdown(text) == text

    def test_idempotent(self):
        """Test that escaping twice equals escaping once."""
        once = escape_markdown("*a* _b_ [c] `d`")

        assert escape_markdown(once) == once

    @pytest.mark.parametrize("text", ["---", "1) a", "<b>", "~~~", "= x"])
    def test_line_start_escapes_idempotent(self, text):
        """Test idempotence for line-start and angle bracket escapes."""
        once = escape_markdown(text)

        assert once != text
        assert escape_markdown(once) == once


class TestHelpers:
    """Tests for whitespace and joining helpers."""

    def test_collapse_whitespace(self):
        """Test that HTML whitespace runs become one space."""
        assert collapse_whitespace("a \n\t b") == "a b"

    def test_nbsp_survives(self):
        """Test that non-breaking spaces are content."""
        assert collapse_whitespace("a\u00a0 b") == "a\u00a0 b"

    def test_escape_url(self):
        """Test that spaces and parentheses are percent-encoded."""
        assert escape_url(" /a b(c) ") == "/a%20b%28c%29"

    def test_wrap_inline_keeps_flanking_space_outside(self):
        """Test that delimiters hug the content."""
        assert wrap_inline(" x ", "**") == " **x** "

    def test_wrap_inline_blank(self):
        """Test that blank content is not wrapped."""
        assert wrap_inline("  ", "*") == "  "

    def test_join_merges_newlines(self):
        """Test that separators merge to at most one blank line."""
        assert join_fragments("\n\na\n\n", "\n\nb\n\n") == "\n\na\n\nb\n\n"

    def test_join_collapses_double_space(self):
        """Test that a doubled space at an inline seam collapses."""
        assert join_fragments("a ", " b") == "a b"

    def test_join_keeps_hard_break(self):
        """Test that a line break's trailing spaces survive."""
        assert join_fragments("a  \n", "b") == "a  \nb"

    def test_join_keeps_indented_code(self):
        """Test that four-space indentation after a blank line is kept."""
        assert join_fragments("x\n\n", "\n\n    code\n\n") == "x\n\n    code\n\n"

    def test_buffer_matches_pairwise_joins(self):
        """Test that appending many fragments follows the seam rules."""
        buffer = FragmentBuffer()
        for fragment in ["\n\na\n\n", "b ", " c", "  \n", "\n\n- x\n", "- y\n", ""]:
            buffer.append(fragment)

        assert buffer.getvalue() == "\n\na\n\nb c\n\n- x\n- y\n"

    def test_buffer_preformatted_concatenates(self):
        """Test that preformatted content is kept exactly."""
        buffer = FragmentBuffer(preformatted=True)
        for fragment in ["a  ", "\n\n\n", "  b"]:
            buffer.append(fragment)

        assert buffer.getvalue() == "a  \n\n\n  b"

    def test_finalize(self):
        """Test that document-level separators are trimmed."""
        assert finalize("\n\n# Title\n\nText\n\n") == "# Title\n\nText"


class TestParser:
    """Tests for the parsing front-end."""

    def test_parse_rejects_non_string(self):
        """Test that bytes are rejected."""
        with pytest.raises(ConversionError):
            parse_html(b"<p>x</p>")

    def test_body_is_root(self):
        """Test that the body element is selected when present."""
        root = select_content_root(parse_html("<html><head><title>t</title></head><body><p>x</p></body></html>"))

        assert root.name == "body"

    def test_head_content_dropped(self):
        """Test that head-only elements are removed without a body."""
        root = select_content_root(parse_html("<title>t</title><meta charset='utf-8'><p>x</p>"))

        assert root.find("title") is None
        assert root.find("meta") is None
        assert root.find("p") is not None

    def test_remove_elements_counts_outermost(self):
        """Test that nested matches are not counted twice."""
        soup = parse_html("<div><aside><aside>x</aside></aside><aside>y</aside></div>")

        assert remove_elements(soup, ["aside"]) == 2
        assert soup.find("aside") is None

    def test_remove_nothing(self):
        """Test an empty removal set."""
        soup = parse_html("<p>x</p>")

        assert remove_elements(soup, []) == 0

    def test_build_tree(self):
        """Test parsing and removal together."""
        root = build_tree("<body><script>x()</script><p>kept</p></body>", ["script"])

        assert root.find("script") is None
        assert root.get_text() == "kept"
