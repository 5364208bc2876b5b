"""URL normalization used to key the sitemap visited-set."""

from __future__ import annotations

from urllib.parse import ParseResult, urlparse, urlunparse

_DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """Return a canonical form of *url* for identity checks.

    Transformations applied:
    - Strip surrounding whitespace
    - Lowercase scheme and host
    - Remove default ports
    - Strip URL fragment

    The query string is kept verbatim: paginated sitemaps
    (``sitemap.xml?page=2``) are distinct documents.
    """
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return url.strip()

    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()

    if ":" in netloc:
        host, _, port_str = netloc.rpartition(":")
        try:
            port = int(port_str)
            if _DEFAULT_PORTS.get(scheme) == port:
                netloc = host
        except ValueError:
            pass

    normalized = ParseResult(
        scheme=scheme,
        netloc=netloc,
        path=parsed.path or "/",
        params=parsed.params,
        query=parsed.query,
        fragment="",
    )
    return urlunparse(normalized)
