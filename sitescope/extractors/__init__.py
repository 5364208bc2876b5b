"""Extraction sub-package: sitemap trees, heading trees, sections, summaries."""

from .dom import DocumentSnapshot
from .headings import HeadingNode, build_headings
from .scope import SectionScope, is_in_scope
from .section import extract_section
from .sitemap import (
    EmptySitemap,
    SitemapIndex,
    SitemapResolver,
    UrlSet,
    filter_entries,
    parse_sitemap,
    resolve_sitemap,
)
from .summary import page_outline, summarize
from .urlnorm import normalize_url

__all__ = [
    "DocumentSnapshot",
    "EmptySitemap",
    "HeadingNode",
    "SectionScope",
    "SitemapIndex",
    "SitemapResolver",
    "UrlSet",
    "build_headings",
    "extract_section",
    "filter_entries",
    "is_in_scope",
    "normalize_url",
    "page_outline",
    "parse_sitemap",
    "resolve_sitemap",
    "summarize",
]
