"""sitescope.query - the operations an orchestrating controller calls.

Each function is independent and free of side effects beyond network
fetches.  Expected negative outcomes come back as values (``found=False``,
:class:`~sitescope.items.UnsupportedContentType`); only transport and parse
failures raise (:class:`~sitescope.errors.FetchError`,
:class:`~sitescope.errors.ParseError`).

Basic usage::

    from sitescope.query import page_section, sitemap_list

    listing = sitemap_list(include=["/blog/"], limit=20)
    for entry in listing.entries:
        print(entry.loc, entry.lastmod)

    section = page_section(listing.entries[0].loc, heading_text="Getting started")
    if section.found:
        print(section.text)
"""

from __future__ import annotations

import logging

from sitescope.extractors.dom import DocumentSnapshot
from sitescope.extractors.scope import SectionScope, blog_scope
from sitescope.extractors.section import extract_section
from sitescope.extractors.sitemap import SitemapResolver, filter_entries
from sitescope.extractors.summary import is_html_content_type, summarize
from sitescope.extractors.summary import page_outline as _outline
from sitescope.fetcher import Fetcher, fetch_url
from sitescope.items import (
    PageOutline,
    PageRequest,
    PageSummary,
    SectionRequest,
    SectionResult,
    SitemapListing,
    SitemapRequest,
    UnsupportedContentType,
)

logger = logging.getLogger(__name__)


def sitemap_list(
    sitemap_url: str | None = None,
    *,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
    limit: int | None = None,
    on_error: str = "raise",
    fetch: Fetcher | None = None,
) -> SitemapListing:
    """Fetch and flatten a sitemap tree, then filter it.

    Args:
        sitemap_url: Root sitemap or sitemap index (default
                     ``settings.DEFAULT_SITEMAP_URL``).
        include:     Keep entries whose ``loc`` contains any of these.
        exclude:     Drop entries whose ``loc`` contains any of these.
        limit:       Maximum number of entries returned (1-10000).
        on_error:    ``"raise"`` or ``"skip"`` for failing child sitemaps.
        fetch:       Override the fetch boundary (tests, custom transports).

    Raises:
        FetchError, ParseError: see :meth:`SitemapResolver.resolve`.
        pydantic.ValidationError: on out-of-range *limit*.
    """
    req = SitemapRequest(
        **({"sitemap_url": sitemap_url} if sitemap_url else {}),
        include=include or [],
        exclude=exclude or [],
        limit=limit,
    )
    logger.info("sitemap_list: %s", req.sitemap_url)
    resolver = SitemapResolver(fetch, on_error=on_error)
    entries = filter_entries(
        resolver.resolve(req.sitemap_url),
        include=req.include,
        exclude=req.exclude,
        limit=req.limit,
    )
    return SitemapListing(count=len(entries), entries=entries, errors=resolver.errors)


def page_outline(
    url: str,
    *,
    scope: SectionScope | None = None,
    fetch: Fetcher | None = None,
) -> PageOutline:
    """Fetch *url* and return its title, h1-h3 outline, anchors and internal links."""
    logger.info("page_outline: %s", url)
    resp = (fetch or fetch_url)(url)
    return _outline(DocumentSnapshot.from_html(resp.text, url=url), url, scope=scope)


def page_section(
    url: str,
    *,
    anchor_id: str | None = None,
    heading_text: str | None = None,
    max_chars: int | None = None,
    scope: SectionScope | None = None,
    fetch: Fetcher | None = None,
) -> SectionResult:
    """Fetch *url* and extract the section under one heading.

    URLs outside *scope* (default: the blog section) are rejected with
    ``found=False`` before anything is fetched.

    Raises:
        FetchError, ParseError: on transport or parse failure.
        pydantic.ValidationError: when no selector is given or *max_chars*
            is out of range.
    """
    req = SectionRequest(
        url=url,
        anchor_id=anchor_id,
        heading_text=heading_text,
        **({"max_chars": max_chars} if max_chars is not None else {}),
    )
    scope = scope or blog_scope()
    if not scope.contains(req.url):
        logger.info("page_section: %s is outside %s", req.url, scope.path_prefix)
        return SectionResult(
            found=False,
            url=req.url,
            reason=f"URL is outside the {scope.path_prefix} section of {', '.join(scope.hosts)}",
        )

    logger.info("page_section: %s (id=%r text=%r)", req.url, req.anchor_id, req.heading_text)
    resp = (fetch or fetch_url)(req.url)
    return extract_section(
        DocumentSnapshot.from_html(resp.text, url=req.url),
        identifier=req.anchor_id,
        heading_text=req.heading_text,
        max_chars=req.max_chars,
    )


def fetch_page(
    url: str,
    *,
    max_chars: int | None = None,
    fetch: Fetcher | None = None,
) -> PageSummary | UnsupportedContentType:
    """Fetch any page and summarize its readable content.

    Non-HTML responses yield :class:`UnsupportedContentType` instead of a
    summary.
    """
    req = PageRequest(url=url, **({"max_chars": max_chars} if max_chars is not None else {}))
    logger.info("fetch_page: %s", req.url)
    resp = (fetch or fetch_url)(req.url)
    if not is_html_content_type(resp.content_type):
        logger.info("fetch_page: %s is %r, not HTML", req.url, resp.content_type)
        return UnsupportedContentType(
            url=req.url,
            content_type=resp.content_type,
            reason=f"Content type {resp.content_type} is not HTML",
        )
    return summarize(resp.text, req.url, max_chars=req.max_chars)
