"""sitescope - structure-aware extraction from sitemaps and HTML pages.

Flatten a sitemap tree::

    from sitescope import sitemap_list

    listing = sitemap_list("https://example.com/sitemap.xml", include=["/blog/"])
    print(listing.count)

Read one section of a page::

    from sitescope import page_section

    section = page_section(
        "https://example.com/blog/some-post",
        heading_text="Installation",
    )
    print(section.text)
    print(section.code_blocks)

Work on HTML you already have::

    from sitescope import DocumentSnapshot, build_headings, extract_section

    doc = DocumentSnapshot.from_html(html)
    for h in build_headings(doc):
        print(h.rank, h.identifier, h.text)
    result = extract_section(doc, identifier="install", max_chars=2000)
"""

from sitescope.errors import FetchError, ParseError
from sitescope.extractors import (
    DocumentSnapshot,
    build_headings,
    extract_section,
    filter_entries,
    is_in_scope,
    resolve_sitemap,
    summarize,
)
from sitescope.query import fetch_page, page_outline, page_section, sitemap_list

__version__ = "0.1.0"
__all__ = [
    "DocumentSnapshot",
    "FetchError",
    "ParseError",
    "build_headings",
    "extract_section",
    "fetch_page",
    "filter_entries",
    "is_in_scope",
    "page_outline",
    "page_section",
    "resolve_sitemap",
    "sitemap_list",
    "summarize",
]
