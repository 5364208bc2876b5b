"""Pydantic models for sitescope inputs and outputs.

Output models are what the consumer contract in :mod:`sitescope.query`
returns; request models validate the bounded inputs the controller may send.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from sitescope import settings

# ---------------------------------------------------------------------------
# Sitemap
# ---------------------------------------------------------------------------

class SitemapEntry(BaseModel):
    """One page listed in a URL-set sitemap.  Identity is ``loc``."""

    model_config = ConfigDict(frozen=True)

    loc: str
    lastmod: str | None = None
    changefreq: str | None = None
    priority: float | None = None

    @field_validator("loc", mode="before")
    @classmethod
    def strip_loc(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


class SitemapError(BaseModel):
    """A sitemap branch that was skipped during resolution."""

    url: str
    reason: str


class SitemapListing(BaseModel):
    count: int
    entries: list[SitemapEntry] = Field(default_factory=list)
    errors: list[SitemapError] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Section extraction
# ---------------------------------------------------------------------------

class SectionResult(BaseModel):
    """Content owned by one heading up to the next equal-or-higher heading."""

    found: bool
    reason: str | None = None
    url: str | None = None
    heading: str | None = None
    identifier: str | None = None
    html: str = ""
    text: str = ""
    code_blocks: list[str] = Field(default_factory=list)
    truncated: bool = False


# ---------------------------------------------------------------------------
# Page summary / outline
# ---------------------------------------------------------------------------

class HeadingRef(BaseModel):
    level: int
    text: str


class OutlineHeading(BaseModel):
    level: int
    id: str | None = None
    text: str


class LinkRef(BaseModel):
    url: str
    text: str = ""


class PageSummary(BaseModel):
    """Bounded readable content of one HTML page."""

    success: Literal[True] = True
    url: str = ""
    title: str | None = None
    meta_description: str | None = None
    text: str = ""
    truncated: bool = False
    headings: list[HeadingRef] = Field(default_factory=list)
    links: list[LinkRef] = Field(default_factory=list)


class UnsupportedContentType(BaseModel):
    """Returned instead of a summary when the fetched resource is not HTML."""

    success: Literal[False] = False
    url: str
    content_type: str = ""
    reason: str


class PageOutline(BaseModel):
    url: str
    title: str | None = None
    headings: list[OutlineHeading] = Field(default_factory=list)
    anchors: list[str] = Field(default_factory=list)
    internal_links: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

_HTTP_URL = TypeAdapter(HttpUrl)


def _check_http_url(v: Any) -> Any:
    """Reject anything that is not an absolute http(s) URL with a host."""
    if not isinstance(v, str):
        return v
    v = v.strip()
    try:
        _HTTP_URL.validate_python(v)
    except ValidationError as exc:
        raise ValueError(f"not a valid http(s) URL: {v!r}") from exc
    return v


class SitemapRequest(BaseModel):
    sitemap_url: str = settings.DEFAULT_SITEMAP_URL
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=1, le=settings.SITEMAP_LIMIT_MAX)

    @field_validator("sitemap_url", mode="before")
    @classmethod
    def check_sitemap_url(cls, v: Any) -> Any:
        return _check_http_url(v)


class SectionRequest(BaseModel):
    url: str
    anchor_id: str | None = None
    heading_text: str | None = None
    max_chars: int = Field(
        default=settings.SECTION_MAX_CHARS,
        ge=settings.MIN_CHARS,
        le=settings.SECTION_MAX_CHARS_LIMIT,
    )

    @field_validator("url", mode="before")
    @classmethod
    def check_url(cls, v: Any) -> Any:
        return _check_http_url(v)

    @model_validator(mode="after")
    def require_selector(self) -> SectionRequest:
        if not self.anchor_id and not self.heading_text:
            raise ValueError("either anchor_id or heading_text is required")
        return self


class PageRequest(BaseModel):
    url: str
    max_chars: int = Field(
        default=settings.PAGE_MAX_CHARS,
        ge=settings.MIN_CHARS,
        le=settings.PAGE_MAX_CHARS_LIMIT,
    )

    @field_validator("url", mode="before")
    @classmethod
    def check_url(cls, v: Any) -> Any:
        return _check_http_url(v)
