"""Command-line interface for fireconvert."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Prompt

from . import __version__
from .conversion import FrontmatterBuilder, HtmlToMarkdown, convert_html_to_markdown
from .credentials import API_KEY_ENV_VAR, CredentialStore, mask_key
from .exceptions import FireconvertError
from .http import FirecrawlClient
from .logging_config import setup_logging
from .models.config import ConversionOptions, FireconvertConfig, ScrapeOptions
from .models.results import ScrapeResult
from .output import looks_like_html, save_markdown, url_to_filename

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="fireconvert",
        description="Turn any page into clean Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape a page through the Firecrawl API
  fireconvert key set
  fireconvert scrape https://example.com/article -o article.md

  # Wait for client-side rendering, emulate a phone
  fireconvert scrape https://spa.example.com --wait-for 2000 --mobile

  # Convert local HTML without any network access
  fireconvert convert page.html
  curl -s https://example.com | fireconvert convert - --exclude nav --exclude footer
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML configuration file",
    )
    parser.add_argument(
        "--credentials-file",
        type=Path,
        default=None,
        metavar="FILE",
        help="Where the API key is stored (default: ~/.config/fireconvert/credentials.json)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress output other than the Markdown itself",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # scrape
    scrape_parser = subparsers.add_parser("scrape", help="Convert a URL with the Firecrawl API")
    scrape_parser.add_argument("url", help="URL to scrape")
    scrape_parser.add_argument(
        "--wait-for",
        type=int,
        default=None,
        metavar="MS",
        help="Milliseconds to wait for the page before scraping",
    )
    scrape_parser.add_argument(
        "--mobile",
        action="store_true",
        default=None,
        help="Emulate a mobile device",
    )
    scrape_parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help=f"API key (default: ${API_KEY_ENV_VAR} or the stored key)",
    )
    scrape_parser.add_argument(
        "--frontmatter",
        action="store_true",
        default=None,
        help="Prepend YAML frontmatter built from page metadata",
    )
    _add_output_arguments(scrape_parser)

    # convert
    convert_parser = subparsers.add_parser("convert", help="Convert local HTML to Markdown")
    convert_parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="HTML file to convert ('-' or omitted reads stdin)",
    )
    style_group = convert_parser.add_argument_group("markdown style")
    style_group.add_argument(
        "--heading-style",
        choices=["atx", "setext"],
        default=None,
        help="'#' headings or underlined headings",
    )
    style_group.add_argument(
        "--code-block-style",
        choices=["fenced", "indented"],
        default=None,
        help="Fenced or indented code blocks",
    )
    style_group.add_argument(
        "--bullet",
        choices=["-", "+", "*"],
        default=None,
        help="Marker for unordered list items",
    )
    style_group.add_argument(
        "--hr",
        type=str,
        default=None,
        help="Token for horizontal rules",
    )
    filter_group = convert_parser.add_argument_group("element filtering")
    filter_group.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="TAG",
        help="Drop TAG elements and their content (repeatable)",
    )
    filter_group.add_argument(
        "--keep",
        action="append",
        default=[],
        metavar="TAG",
        help="Emit TAG elements as raw HTML (repeatable)",
    )
    _add_output_arguments(convert_parser)

    # key
    key_parser = subparsers.add_parser("key", help="Manage the stored API key")
    key_parser.add_argument("action", choices=["set", "show", "clear"])
    key_parser.add_argument("value", nargs="?", help="Key to store (prompted if omitted)")

    return parser


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write Markdown to a file or directory instead of stdout",
    )
    output_group.add_argument(
        "--render",
        action="store_true",
        help="Pretty-print the Markdown in the terminal",
    )


def load_config(args: argparse.Namespace) -> FireconvertConfig:
    """Load the YAML config named on the command line, or the defaults."""
    if args.config:
        return FireconvertConfig.from_yaml_file(args.config)
    return FireconvertConfig()


def _emit(markdown: str, args: argparse.Namespace, console: Console, default_name: Optional[str] = None) -> int:
    """Send Markdown to a file, the terminal renderer, or stdout."""
    if args.output:
        target = args.output
        if target.is_dir() and default_name:
            target = target / default_name
        path = save_markdown(markdown, target)
        if not args.quiet:
            console.print(f"[green]Saved[/green] {path}")
    elif args.render:
        Console().print(Markdown(markdown))
    else:
        sys.stdout.write(markdown + "\n")
    return 0


def run_convert(args: argparse.Namespace, config: FireconvertConfig, console: Console) -> int:
    """Convert local HTML."""
    if args.input == "-":
        html = sys.stdin.read()
    else:
        try:
            html = Path(args.input).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            console.print(f"[red]Error:[/red] Could not read {escape(str(args.input))}: {escape(str(e))}")
            return 1

    if not html.strip():
        console.print("[red]Error:[/red] No HTML input provided")
        return 1
    if not looks_like_html(html):
        logger.info("Input does not look like HTML; converting it as plain text")

    overrides = {
        "heading_style": args.heading_style,
        "code_block_style": args.code_block_style,
        "bullet_list_marker": args.bullet,
        "hr": args.hr,
    }
    options_data = config.conversion.model_dump()
    options_data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        options = ConversionOptions(**options_data)
    except ValidationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 1

    converter = HtmlToMarkdown(options)
    for tag in args.exclude:
        converter.exclude(tag)
    for tag in args.keep:
        converter.keep(tag)

    result = convert_html_to_markdown(html, converter=converter)
    if not result.success or result.markdown is None:
        console.print(f"[red]Error:[/red] {escape(str(result.error))}")
        return 1

    return _emit(result.markdown, args, console)


def run_scrape(args: argparse.Namespace, config: FireconvertConfig, console: Console) -> int:
    """Scrape a URL through the remote API."""
    store = CredentialStore(args.credentials_file)
    api_key = store.resolve(args.api_key or config.api.api_key)
    if not api_key:
        console.print(
            "[red]Error:[/red] No API key configured. "
            f"Run 'fireconvert key set' or set ${API_KEY_ENV_VAR}."
        )
        return 1

    scrape_data = config.scrape.model_dump()
    if args.wait_for is not None:
        scrape_data["wait_for"] = args.wait_for
    if args.mobile is not None:
        scrape_data["mobile"] = args.mobile
    try:
        options = ScrapeOptions(**scrape_data)
    except ValidationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 1

    async def run() -> ScrapeResult:
        async with FirecrawlClient(api_key, base_url=config.api.base_url, timeout=config.api.timeout) as client:
            if args.quiet:
                return await client.scrape(args.url, options)
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task(f"[cyan]Scraping {args.url}...", total=None)
                return await client.scrape(args.url, options)

    result = asyncio.run(run())
    if not result.success or result.markdown is None:
        console.print(f"[red]Error:[/red] {escape(result.error or 'Failed to convert URL')}")
        return 1

    markdown = result.markdown
    add_frontmatter = args.frontmatter if args.frontmatter is not None else config.output.frontmatter
    if add_frontmatter:
        markdown = FrontmatterBuilder().from_metadata(result.metadata, url=args.url) + markdown

    return _emit(markdown, args, console, default_name=url_to_filename(args.url))


def run_key(args: argparse.Namespace, console: Console) -> int:
    """Set, show, or clear the stored API key."""
    store = CredentialStore(args.credentials_file)

    if args.action == "set":
        value = args.value or Prompt.ask("Firecrawl API key", password=True, console=console)
        if not value or not value.strip():
            console.print("[red]Error:[/red] API key must not be empty")
            return 1
        store.save(value.strip())
        if not args.quiet:
            console.print(f"[green]API key saved[/green] to {store.path}")
        return 0

    if args.action == "show":
        value = store.load()
        if not value:
            console.print("No API key stored")
            return 1
        console.print(mask_key(value))
        return 0

    if store.clear():
        if not args.quiet:
            console.print("[green]API key removed[/green]")
    elif not args.quiet:
        console.print("No API key stored")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = Console(stderr=True)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 1

    if args.verbose:
        log_level = "DEBUG"
    elif args.quiet:
        log_level = "ERROR"
    else:
        log_level = config.log_level
    setup_logging(log_level, log_file=str(config.log_file) if config.log_file else None)

    try:
        if args.command == "convert":
            return run_convert(args, config, console)
        if args.command == "scrape":
            return run_scrape(args, config, console)
        return run_key(args, console)
    except FireconvertError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
