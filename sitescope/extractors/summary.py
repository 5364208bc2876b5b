"""Page summarizer and outline builder.

The summarizer strips page chrome (scripts, styles, navigation, header and
footer) from a *working copy* of the document, picks a primary content
region and reports bounded text, headings and links.  Headings are read
from the untouched :class:`~sitescope.extractors.dom.DocumentSnapshot`, so
chrome removal never changes what the heading builder or the section
extractor see.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from sitescope import settings
from sitescope.errors import ParseError
from sitescope.extractors.dom import NO_NODE, DocumentSnapshot
from sitescope.extractors.headings import build_headings
from sitescope.extractors.scope import SectionScope, blog_scope
from sitescope.items import HeadingRef, LinkRef, OutlineHeading, PageOutline, PageSummary

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "... (truncated)"

# Removed from the working copy before text/link extraction
_CHROME_TAGS: tuple[str, ...] = ("script", "style", "nav", "footer", "header")

_HTML_CONTENT_TYPES: tuple[str, ...] = ("text/html", "application/xhtml+xml")


def is_html_content_type(content_type: str | None) -> bool:
    ct = (content_type or "").lower()
    return any(t in ct for t in _HTML_CONTENT_TYPES)


def truncate_text(text: str, max_chars: int) -> tuple[str, bool]:
    """Cut *text* to *max_chars* and append the marker when anything was cut."""
    if len(text) <= max_chars:
        return text, False
    return text[:max_chars] + TRUNCATION_MARKER, True


def _meta_content(soup: BeautifulSoup, attr: str, value: str) -> str | None:
    el = soup.find("meta", attrs={attr: value})
    if isinstance(el, Tag):
        content = str(el.get("content") or "").strip()
        return content or None
    return None


def _resolve_href(base: str, href: str) -> str | None:
    """*href* made absolute against *base*; None when it cannot be parsed."""
    if not base:
        return href
    try:
        return urljoin(base, href)
    except ValueError:
        logger.debug("Dropping unparsable link %r on %s", href, base)
        return None


def _strip_chrome(soup: BeautifulSoup) -> None:
    for tag_name in _CHROME_TAGS:
        for el in soup.find_all(tag_name):
            if el.decomposed:
                continue
            el.decompose()


def _primary_region(soup: BeautifulSoup) -> Tag:
    """main > article > [role=main] > body > whole document."""
    for candidate in (
        soup.find("main"),
        soup.find("article"),
        soup.select_one('[role="main"]'),
        soup.find("body"),
    ):
        if isinstance(candidate, Tag):
            return candidate
    return soup


def summarize(
    html: str,
    url: str = "",
    *,
    max_chars: int = settings.PAGE_MAX_CHARS,
    max_links: int = settings.MAX_LINKS,
    snapshot: DocumentSnapshot | None = None,
) -> PageSummary:
    """Summarize an HTML page.

    Args:
        html:      Raw HTML of the page.
        url:       Page URL; relative links are resolved against it.
        max_chars: Budget for the region text before the marker is added.
        max_links: Cap on the number of links returned (no de-duplication).
        snapshot:  Pre-built snapshot of the same *html*, if the caller has one.

    Raises:
        ParseError: if the HTML cannot be parsed.
    """
    doc = snapshot or DocumentSnapshot.from_html(html, url=url)
    try:
        working = BeautifulSoup(html, "lxml")
    except Exception as exc:
        raise ParseError(f"Could not parse HTML from {url or '<string>'}: {exc}", url=url) from exc

    # both trees come from the same markup and parser, so pre-order
    # positions line up with snapshot indices
    ordinal = {id(t): i for i, t in enumerate(working.find_all(True))}

    title_el = working.find("title")
    title = (title_el.get_text().strip() or None) if isinstance(title_el, Tag) else None
    meta_description = (
        _meta_content(working, "name", "description")
        or _meta_content(working, "property", "og:description")
    )

    _strip_chrome(working)
    region = _primary_region(working)
    region_index = ordinal.get(id(region)) if region is not working else None

    text, truncated = truncate_text(region.get_text().strip(), max_chars)

    links: list[LinkRef] = []
    for a in region.find_all("a", href=True):
        if len(links) >= max_links:
            break
        href = str(a.get("href") or "").strip()
        resolved = _resolve_href(url, href) if href else None
        if resolved is None:
            continue
        links.append(LinkRef(url=resolved, text=a.get_text().strip()))

    headings = [
        HeadingRef(level=h.rank, text=h.text)
        for h in build_headings(doc, max_rank=3, within=region_index)
        if h.text
    ]

    logger.debug(
        "summary of %s: region=<%s> %d chars truncated=%s, %d headings, %d links",
        url, region.name, len(text), truncated, len(headings), len(links),
    )
    return PageSummary(
        url=url,
        title=title,
        meta_description=meta_description,
        text=text,
        truncated=truncated,
        headings=headings,
        links=links,
    )


def page_outline(
    document: DocumentSnapshot | str,
    url: str = "",
    *,
    scope: SectionScope | None = None,
) -> PageOutline:
    """Title, h1-h3 headings with identifiers, in-page anchors and in-scope links."""
    doc = document if isinstance(document, DocumentSnapshot) else DocumentSnapshot.from_html(document, url=url)
    scope = scope or blog_scope()

    title_idx = doc.find_first("title")
    title = (doc.text(title_idx).strip() or None) if title_idx != NO_NODE else None

    anchors: list[str] = []
    internal: list[str] = []
    for i in doc.find_all("a"):
        href = doc.attr(i, "href")
        if not href:
            continue
        if href.startswith("#"):
            anchors.append(href)
        elif href.startswith("/"):
            full = _resolve_href(url, href)
            if full is not None and scope.contains(full):
                internal.append(full)

    return PageOutline(
        url=url,
        title=title,
        headings=[
            OutlineHeading(level=h.rank, id=h.identifier, text=h.text)
            for h in build_headings(doc, max_rank=3)
        ],
        anchors=anchors,
        internal_links=internal,
    )
