"""Sitemap (sitemaps.org 0.9) decoding and recursive resolution.

Decoding turns one XML document into exactly one of three shapes:

  - :class:`SitemapIndex`  (``<sitemapindex>``: child sitemap locations)
  - :class:`UrlSet`        (``<urlset>``: page entries)
  - :class:`EmptySitemap`  (any other root; not an error)

Resolution walks an index tree level by level.  Each level's documents are
fetched concurrently on a thread pool, but every URL is claimed in the
visited-set by the coordinating thread *before* it is dispatched, so no URL
is fetched twice and cyclic indexes terminate.  The flattened result follows
child order depth-first regardless of which fetch finished first.
"""

from __future__ import annotations

import gzip
import logging
import xml.etree.ElementTree as ET  # for ET.ParseError only
import zlib
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import NamedTuple

import defusedxml.ElementTree as defused_ET
from defusedxml import DefusedXmlException

from sitescope import settings
from sitescope.errors import FetchError, ParseError
from sitescope.extractors.urlnorm import normalize_url
from sitescope.fetcher import Fetcher, fetch_url
from sitescope.items import SitemapEntry, SitemapError

logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


class SitemapIndex(NamedTuple):
    children: tuple[str, ...]


class UrlSet(NamedTuple):
    entries: tuple[SitemapEntry, ...]


class EmptySitemap(NamedTuple):
    pass


SitemapDocument = SitemapIndex | UrlSet | EmptySitemap


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _local(tag: object) -> str:
    """Element name without its ``{namespace}`` prefix, lowercased."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


def _child_text(el: ET.Element, name: str) -> str | None:
    for child in el:
        if _local(child.tag) == name:
            t = (child.text or "").strip()
            return t or None
    return None


def _priority(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.debug("Ignoring non-numeric sitemap priority %r", raw)
        return None


def _maybe_gunzip(content: bytes, url: str) -> bytes:
    if not content.startswith(_GZIP_MAGIC):
        return content
    try:
        return gzip.decompress(content)
    except (OSError, EOFError, zlib.error) as exc:
        raise ParseError(f"Corrupt gzip sitemap at {url}: {exc}", url=url) from exc


def parse_sitemap(xml: str | bytes, url: str = "") -> SitemapDocument:
    """Decode one sitemap document.

    Args:
        xml: Raw XML (``bytes`` may be gzip-compressed).
        url: Source URL, used in diagnostics only.

    Raises:
        ParseError: on malformed XML or forbidden XML constructs.
    """
    if isinstance(xml, bytes):
        xml = _maybe_gunzip(xml, url)
    try:
        root = defused_ET.fromstring(xml)
    except (ET.ParseError, DefusedXmlException) as exc:
        raise ParseError(f"Failed to parse sitemap XML {url}: {exc}", url=url) from exc

    kind = _local(root.tag)
    if kind == "sitemapindex":
        children = tuple(
            loc
            for el in root
            if _local(el.tag) == "sitemap"
            for loc in (_child_text(el, "loc"),)
            if loc
        )
        return SitemapIndex(children)

    if kind == "urlset":
        entries: list[SitemapEntry] = []
        for el in root:
            if _local(el.tag) != "url":
                continue
            loc = _child_text(el, "loc")
            if not loc:
                logger.debug("Skipping <url> without <loc> in %s", url)
                continue
            entries.append(
                SitemapEntry(
                    loc=loc,
                    lastmod=_child_text(el, "lastmod"),
                    changefreq=_child_text(el, "changefreq"),
                    priority=_priority(_child_text(el, "priority")),
                ),
            )
        return UrlSet(tuple(entries))

    logger.debug("Unrecognised sitemap root <%s> in %s", kind, url)
    return EmptySitemap()


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

class SitemapResolver:
    """Flatten a sitemap tree into page entries.

    Args:
        fetch:       Callable returning a :class:`~sitescope.fetcher.FetchResponse`
                     for a URL (default :func:`~sitescope.fetcher.fetch_url`).
        max_workers: Concurrent fetches per tree level.
        on_error:    ``"raise"`` (default) aborts the whole call when any
                     child sitemap fails; ``"skip"`` drops the failing branch
                     and records it in :attr:`errors`.  A failing root always
                     raises.
    """

    def __init__(
        self,
        fetch: Fetcher | None = None,
        *,
        max_workers: int = settings.SITEMAP_MAX_WORKERS,
        on_error: str = "raise",
    ) -> None:
        if on_error not in ("raise", "skip"):
            raise ValueError(f"on_error must be 'raise' or 'skip'; got {on_error!r}")
        self._fetch = fetch or fetch_url
        self.max_workers = max(1, max_workers)
        self.on_error = on_error
        self.errors: list[SitemapError] = []

    def load(self, url: str) -> SitemapDocument:
        """Fetch and decode a single sitemap document."""
        resp = self._fetch(url)
        return parse_sitemap(resp.content, url=url)

    def _load_outcome(self, url: str) -> tuple[SitemapDocument | None, Exception | None]:
        try:
            return self.load(url), None
        except (FetchError, ParseError) as exc:
            return None, exc

    def resolve(self, root_url: str, max_entries: int | None = None) -> list[SitemapEntry]:
        """Return the de-duplicated entries reachable from *root_url*.

        Raises:
            FetchError: root unreachable, or a child with ``on_error="raise"``.
            ParseError: root unparsable, or a child with ``on_error="raise"``.
        """
        self.errors = []
        visited: set[str] = {normalize_url(root_url)}
        documents: dict[str, SitemapDocument] = {}
        claimed: dict[str, list[str]] = {}

        frontier = [root_url]
        depth = 0
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            while frontier:
                logger.debug("sitemap level %d: %d document(s)", depth, len(frontier))
                outcomes = list(pool.map(self._load_outcome, frontier))
                next_frontier: list[str] = []
                for url, (doc, exc) in zip(frontier, outcomes):
                    if exc is not None:
                        if depth == 0 or self.on_error == "raise":
                            raise exc
                        logger.warning("sitemap: skipping %s: %s", url, exc)
                        self.errors.append(SitemapError(url=url, reason=str(exc)))
                        continue
                    documents[url] = doc
                    if isinstance(doc, SitemapIndex):
                        mine: list[str] = []
                        for child in doc.children:
                            key = normalize_url(child)
                            if key in visited:
                                logger.debug("sitemap: %s already visited", child)
                                continue
                            visited.add(key)
                            mine.append(child)
                        claimed[url] = mine
                        next_frontier.extend(mine)
                frontier = next_frontier
                depth += 1

        entries = dedupe_entries(_flatten(root_url, documents, claimed))
        if max_entries is not None:
            entries = entries[:max_entries]
        logger.info(
            "sitemap %s: %d entries from %d document(s)",
            root_url, len(entries), len(documents),
        )
        return entries


def _flatten(
    root_url: str,
    documents: dict[str, SitemapDocument],
    claimed: dict[str, list[str]],
) -> list[SitemapEntry]:
    out: list[SitemapEntry] = []
    stack = [root_url]
    while stack:
        url = stack.pop()
        doc = documents.get(url)
        if isinstance(doc, UrlSet):
            out.extend(doc.entries)
        elif isinstance(doc, SitemapIndex):
            stack.extend(reversed(claimed.get(url, [])))
    return out


def dedupe_entries(entries: Iterable[SitemapEntry]) -> list[SitemapEntry]:
    """Drop repeated ``loc`` values, keeping the first occurrence."""
    seen: set[str] = set()
    out: list[SitemapEntry] = []
    for entry in entries:
        if entry.loc in seen:
            continue
        seen.add(entry.loc)
        out.append(entry)
    return out


def resolve_sitemap(
    root_url: str,
    *,
    max_entries: int | None = None,
    on_error: str = "raise",
    fetch: Fetcher | None = None,
) -> list[SitemapEntry]:
    """One-call wrapper around :meth:`SitemapResolver.resolve`."""
    return SitemapResolver(fetch, on_error=on_error).resolve(root_url, max_entries=max_entries)


def filter_entries(
    entries: Iterable[SitemapEntry],
    include: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
    limit: int | None = None,
) -> list[SitemapEntry]:
    """Substring filters over ``loc`` followed by a count cap.

    An entry passes when it contains *any* include token (or no include
    tokens were given) and contains *no* exclude token.
    """
    inc = [t for t in (include or []) if t]
    exc = [t for t in (exclude or []) if t]
    out = [
        e for e in entries
        if (not inc or any(t in e.loc for t in inc))
        and not any(t in e.loc for t in exc)
    ]
    if limit is not None:
        out = out[:limit]
    return out
