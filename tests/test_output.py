"""Tests for output helpers and frontmatter."""

from fireconvert import FrontmatterBuilder
from fireconvert.output import download_filename, looks_like_html, save_markdown, url_to_filename


class TestFilenames:
    """Tests for generated file names."""

    def test_download_filename(self):
        """Test the timestamped default name."""
        assert download_filename(1700000000123) == "converted-1700000000123.md"

    def test_download_filename_uses_current_time(self):
        """Test that a timestamp is generated when none is given."""
        name = download_filename()

        assert name.startswith("converted-")
        assert name.endswith(".md")
        assert name[len("converted-") : -len(".md")].isdigit()

    def test_url_to_filename(self):
        """Test that host and path become a flat file name."""
        assert url_to_filename("https://example.com/docs/intro") == "example.com_docs_intro.md"

    def test_url_to_filename_strips_html_suffix(self):
        """Test that .html extensions are dropped."""
        assert url_to_filename("https://example.com/guide/page.html") == "example.com_guide_page.md"

    def test_url_to_filename_root(self):
        """Test a URL without a path."""
        assert url_to_filename("https://example.com/") == "example.com.md"

    def test_url_to_filename_sanitizes(self):
        """Test that unsafe characters are replaced."""
        name = url_to_filename("https://example.com/a b/c?d=1")

        assert " " not in name
        assert "?" not in name
        assert name.endswith(".md")

    def test_url_without_scheme(self):
        """Test that a bare host is accepted."""
        assert url_to_filename("example.com/x") == "example.com_x.md"


class TestLooksLikeHtml:
    """Tests for the HTML sniffing check."""

    def test_html(self):
        """Test that markup is detected."""
        assert looks_like_html("<p>hi</p>")

    def test_plain_text(self):
        """Test that plain text is not detected as HTML."""
        assert not looks_like_html("just text")

    def test_single_bracket(self):
        """Test that one angle bracket is not enough."""
        assert not looks_like_html("a < b")


class TestSaveMarkdown:
    """Tests for writing Markdown to disk."""

    def test_save_to_file(self, tmp_path):
        """Test writing to an explicit file path."""
        path = save_markdown("# Title", tmp_path / "out" / "page.md")

        assert path == tmp_path / "out" / "page.md"
        assert path.read_text(encoding="utf-8") == "# Title\n"

    def test_save_to_directory(self, tmp_path):
        """Test that a directory gets a timestamped file."""
        path = save_markdown("text\n", tmp_path)

        assert path.parent == tmp_path
        assert path.name.startswith("converted-")
        assert path.read_text(encoding="utf-8") == "text\n"

    def test_unicode(self, tmp_path):
        """Test that non-ASCII text is written as UTF-8."""
        path = save_markdown("Café ☕", tmp_path / "u.md")

        assert path.read_bytes() == "Café ☕\n".encode()


class TestFrontmatterBuilder:
    """Tests for FrontmatterBuilder."""

    def test_build(self):
        """Test a simple frontmatter block."""
        result = FrontmatterBuilder().build({"title": "Intro", "source": "https://example.com"})

        assert result == '---\ntitle: "Intro"\nsource: "https://example.com"\n---\n\n'

    def test_skips_empty_values(self):
        """Test that None and empty values are left out."""
        result = FrontmatterBuilder().build({"title": "Intro", "description": None, "tags": []})

        assert "description" not in result
        assert "tags" not in result

    def test_nothing_to_write(self):
        """Test that no block is produced without values."""
        assert FrontmatterBuilder().build({"title": None}) == ""

    def test_lists_and_scalars(self):
        """Test sequences, numbers and booleans."""
        result = FrontmatterBuilder().build({"tags": ["a", "b"], "status_code": 200, "draft": False})

        assert 'tags:\n  - "a"\n  - "b"' in result
        assert "status_code: 200" in result
        assert "draft: false" in result

    def test_quotes_are_escaped(self):
        """Test that values with quotes stay valid YAML."""
        result = FrontmatterBuilder().build({"title": 'Say "hi": now'})

        assert 'title: "Say \\"hi\\": now"' in result

    def test_from_metadata(self):
        """Test mapping scrape metadata onto frontmatter fields."""
        metadata = {"title": "Page", "sourceURL": "https://example.com/p", "statusCode": 200, "ogImage": "x"}

        result = FrontmatterBuilder().from_metadata(metadata)

        assert result == '---\ntitle: "Page"\nsource: "https://example.com/p"\nstatus_code: 200\n---\n\n'

    def test_from_metadata_url_fallback(self):
        """Test that the requested URL is used when metadata has none."""
        result = FrontmatterBuilder().from_metadata({}, url="https://example.com")

        assert result == '---\nsource: "https://example.com"\n---\n\n'
