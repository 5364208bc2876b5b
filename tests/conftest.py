"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from sitescope.errors import FetchError
from sitescope.fetcher import FetchResponse

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def guide_html() -> str:
    return _read_fixture("guide.html")


class FakeFetch:
    """In-memory fetch boundary: serves bodies by URL and records calls.

    URLs missing from *pages* fail with a 404 :class:`FetchError`.
    """

    def __init__(self, pages: dict[str, str | bytes], content_type: str = "application/xml") -> None:
        self.pages = pages
        self.content_type = content_type
        self.calls: list[str] = []

    def __call__(self, url: str) -> FetchResponse:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(f"Failed to fetch {url} (404)", url=url, status=404)
        body = self.pages[url]
        content = body if isinstance(body, bytes) else body.encode("utf-8")
        return FetchResponse(
            url=url,
            status=200,
            headers={"Content-Type": self.content_type},
            content=content,
            text=content.decode("utf-8", errors="replace"),
            content_type=self.content_type,
        )


@pytest.fixture
def fake_fetch() -> Callable[..., FakeFetch]:
    def _make(pages: dict[str, str | bytes], content_type: str = "application/xml") -> FakeFetch:
        return FakeFetch(pages, content_type=content_type)
    return _make
