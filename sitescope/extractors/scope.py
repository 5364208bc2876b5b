"""URL classifier: does a URL belong to a given section of a site?

Host matching accepts the host itself and any subdomain of it; path
matching accepts the section root and anything below it, but not siblings
that merely share a prefix (``/blogroll`` is not in ``/blog``).
Malformed URLs are out of scope; these predicates never raise.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple
from urllib.parse import urlparse

from sitescope import settings


def _host_matches(host: str, allowed: Iterable[str]) -> bool:
    for base in allowed:
        base = base.lower().strip(".")
        if base and (host == base or host.endswith("." + base)):
            return True
    return False


def _path_matches(path: str, prefix: str) -> bool:
    prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
    if not prefix:
        return True
    return path == prefix or path.startswith(prefix + "/")


def is_in_scope(url: str, hosts: Iterable[str], path_prefix: str) -> bool:
    """Return True if *url* is on one of *hosts* (or a subdomain) under *path_prefix*."""
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
        host = (parsed.hostname or "").lower()
    except ValueError:
        return False
    if not parsed.scheme or not host:
        return False
    return _host_matches(host, hosts) and _path_matches(parsed.path or "/", path_prefix)


class SectionScope(NamedTuple):
    """A site section: allowed hosts plus a path prefix."""

    hosts: tuple[str, ...]
    path_prefix: str

    def contains(self, url: str) -> bool:
        return is_in_scope(url, self.hosts, self.path_prefix)


def blog_scope() -> SectionScope:
    return SectionScope(tuple(settings.SCOPE_HOSTS), settings.BLOG_PATH)


def docs_scope() -> SectionScope:
    return SectionScope(tuple(settings.SCOPE_HOSTS), settings.DOCS_PATH)
