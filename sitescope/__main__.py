"""CLI entry point: python -m sitescope {sitemap,outline,section,page} ..."""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import BaseModel, ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from sitescope import settings
from sitescope.errors import FetchError, ParseError
from sitescope.extractors.scope import blog_scope, docs_scope
from sitescope.items import SitemapListing
from sitescope.query import fetch_page, page_outline, page_section, sitemap_list

logger = logging.getLogger(__name__)

_SCOPES = {"blog": blog_scope, "docs": docs_scope}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitescope",
        description=(
            "Flatten sitemaps and extract heading-scoped sections, outlines\n"
            "and bounded summaries from HTML pages."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("sitemap", help="Fetch and flatten a sitemap tree")
    p.add_argument("url", nargs="?", default=settings.DEFAULT_SITEMAP_URL,
                   help=f"Sitemap or sitemap index URL (default: {settings.DEFAULT_SITEMAP_URL})")
    p.add_argument("--include", action="append", default=[], metavar="TEXT",
                   help="Keep URLs containing TEXT (repeatable; any match keeps)")
    p.add_argument("--exclude", action="append", default=[], metavar="TEXT",
                   help="Drop URLs containing TEXT (repeatable)")
    p.add_argument("--limit", type=int, default=None, metavar="N",
                   help="Maximum number of entries")
    p.add_argument("--skip-errors", action="store_true", default=False,
                   help="Skip unreachable child sitemaps instead of failing")
    p.add_argument("--table", action="store_true", default=False,
                   help="Print a table instead of JSON")

    p = sub.add_parser("outline", help="Title, h1-h3 outline and internal links of a page")
    p.add_argument("url")
    p.add_argument("--scope", choices=sorted(_SCOPES), default="blog",
                   help="Site section that internal links must fall in (default: blog)")

    p = sub.add_parser("section", help="Content under one heading of a blog or docs page")
    p.add_argument("url")
    p.add_argument("--scope", choices=sorted(_SCOPES), default="blog",
                   help="Site section the URL must belong to (default: blog)")
    p.add_argument("--anchor", default=None, metavar="ID", help="Heading id to extract")
    p.add_argument("--heading", default=None, metavar="TEXT",
                   help="Heading text to extract (case-insensitive)")
    p.add_argument("--max-chars", type=int, default=None, metavar="N",
                   help=f"Markup budget (default: {settings.SECTION_MAX_CHARS})")

    p = sub.add_parser("page", help="Bounded text, headings and links of any HTML page")
    p.add_argument("url")
    p.add_argument("--max-chars", type=int, default=None, metavar="N",
                   help=f"Text budget (default: {settings.PAGE_MAX_CHARS})")
    return parser


def _print_sitemap_table(console: Console, listing: SitemapListing) -> None:
    tbl = Table(
        title=f"[bold green]Sitemap entries ({listing.count})[/bold green]",
        box=box.SIMPLE_HEAVY,
    )
    tbl.add_column("#", style="dim", justify="right", width=5, no_wrap=True)
    tbl.add_column("URL", style="blue", no_wrap=True)
    tbl.add_column("Last modified", style="yellow", width=12, no_wrap=True)
    tbl.add_column("Priority", justify="right", width=8, no_wrap=True)
    for i, e in enumerate(listing.entries, 1):
        tbl.add_row(
            str(i),
            e.loc,
            (e.lastmod or "-")[:10],
            "-" if e.priority is None else f"{e.priority:.1f}",
        )
    console.print(tbl)
    for err in listing.errors:
        console.print(f"[yellow]skipped[/yellow] {err.url}: {err.reason}")


def _run(args: argparse.Namespace) -> BaseModel | None:
    if args.command == "sitemap":
        return sitemap_list(
            args.url,
            include=args.include,
            exclude=args.exclude,
            limit=args.limit,
            on_error="skip" if args.skip_errors else "raise",
        )
    if args.command == "outline":
        return page_outline(args.url, scope=_SCOPES[args.scope]())
    if args.command == "section":
        return page_section(
            args.url,
            anchor_id=args.anchor,
            heading_text=args.heading,
            max_chars=args.max_chars,
            scope=_SCOPES[args.scope](),
        )
    if args.command == "page":
        return fetch_page(args.url, max_chars=args.max_chars)
    return None


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format=settings.LOG_FORMAT)
    console = Console()

    try:
        result = _run(args)
    except ValidationError as exc:
        print(f"ERROR: invalid arguments: {exc}", file=sys.stderr)
        return 1
    except (FetchError, ParseError) as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if result is None:
        parser.print_help()
        return 1
    if args.command == "sitemap" and args.table and isinstance(result, SitemapListing):
        _print_sitemap_table(console, result)
    else:
        console.print_json(result.model_dump_json())
    return 0


if __name__ == "__main__":
    sys.exit(main())
