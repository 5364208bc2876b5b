"""Fetch boundary: resolve a URL to a decoded response or fail.

Uses only the stdlib (``urllib``) for HTTP.  Redirects are followed by
urllib itself.  No retries: a failed fetch is terminal for the caller's
branch; *timeout* bounds each request.

Usage::

    from sitescope.fetcher import fetch_url

    resp = fetch_url("https://example.com/sitemap.xml")
    print(resp.status, resp.content_type)
    print(resp.text[:200])
"""

from __future__ import annotations

import gzip
import logging
import urllib.error
import urllib.request
import zlib
from typing import Callable, NamedTuple
from urllib.parse import urlparse

from sitescope import settings
from sitescope.errors import FetchError

logger = logging.getLogger(__name__)


class FetchResponse(NamedTuple):
    """A successful HTTP response."""

    url: str                 # final URL after redirects
    status: int
    headers: dict[str, str]
    content: bytes           # body after Content-Encoding is undone
    text: str                # body decoded with the response charset
    content_type: str


Fetcher = Callable[[str], FetchResponse]


def _decompress(raw: bytes, headers: object | None, url: str) -> bytes:
    encoding = ""
    if headers is not None:
        encoding = str(headers.get("Content-Encoding", "") or "").lower().strip()

    try:
        if encoding == "gzip":
            return gzip.decompress(raw)
        if encoding in ("deflate", "zlib"):
            return zlib.decompress(raw)
    except (OSError, zlib.error) as exc:
        raise FetchError(
            f"{encoding} decompression failed for {url}: {exc}", url=url,
        ) from exc
    if encoding == "br":
        raise FetchError(f"Brotli-encoded response from {url} is not supported", url=url)
    return raw


def _decode(raw: bytes, headers: object | None) -> str:
    charset = "utf-8"
    if headers is not None:
        try:
            charset = headers.get_content_charset("utf-8") or "utf-8"
        except AttributeError:
            charset = "utf-8"
    try:
        return raw.decode(charset, errors="replace")
    except (LookupError, ValueError):
        return raw.decode("utf-8", errors="replace")


def fetch_url(
    url: str,
    *,
    timeout: int | None = None,
    user_agent: str | None = None,
) -> FetchResponse:
    """Fetch *url* and return a :class:`FetchResponse`.

    Args:
        url:        Fully-qualified HTTP/HTTPS URL.
        timeout:    Socket timeout in seconds (default ``settings.TIMEOUT``).
        user_agent: Override the default browser User-Agent string.

    Raises:
        FetchError: On non-success HTTP status, connection failures,
            undecodable bodies, or non-HTTP URLs.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise FetchError(f"Unsupported URL scheme: {parsed.scheme!r}", url=url)

    req = urllib.request.Request(
        url,
        headers={
            "User-Agent": user_agent or settings.USER_AGENT,
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;"
                "q=0.9,*/*;q=0.8"
            ),
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate",
        },
    )

    logger.debug("GET %s", url)
    try:
        with urllib.request.urlopen(req, timeout=timeout or settings.TIMEOUT) as resp:
            raw: bytes = resp.read()
            content = _decompress(raw, resp.headers, url)
            headers = {str(k): str(v) for k, v in resp.headers.items()}
            return FetchResponse(
                url=resp.geturl() or url,
                status=int(getattr(resp, "status", 200) or 200),
                headers=headers,
                content=content,
                text=_decode(content, resp.headers),
                content_type=str(resp.headers.get("Content-Type", "") or ""),
            )
    except urllib.error.HTTPError as exc:
        body_text: str | None = None
        try:
            err_raw = exc.read()
            if err_raw:
                body_text = _decode(err_raw, exc.headers)
        except (OSError, AttributeError):
            body_text = None
        raise FetchError(
            f"Failed to fetch {url} ({exc.code})",
            url=url,
            status=exc.code,
            body=body_text,
        ) from exc
    except urllib.error.URLError as exc:
        raise FetchError(f"URL error fetching {url}: {exc.reason}", url=url) from exc
    except OSError as exc:
        raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc
