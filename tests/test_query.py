"""Tests for sitescope.query - the consumer-facing operations."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from sitescope.errors import FetchError
from sitescope.extractors.scope import SectionScope
from sitescope.items import PageSummary, UnsupportedContentType
from sitescope.query import fetch_page, page_outline, page_section, sitemap_list

BLOG = SectionScope(("example.com",), "/blog")
POST = "https://example.com/blog/deploying"
SITEMAP = "https://example.com/sitemap.xml"
NS = 'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"'


class TestPageSection:
    def test_section_found(self, fake_fetch, guide_html):
        fetch = fake_fetch({POST: guide_html}, content_type="text/html")
        result = page_section(POST, heading_text="Usage", scope=BLOG, fetch=fetch)
        assert result.found is True
        assert result.url == POST
        assert result.code_blocks == ["server --port 8080"]

    def test_out_of_scope_is_a_value(self, fake_fetch):
        fetch = fake_fetch({})
        result = page_section("https://example.com/docs/x", anchor_id="a", scope=BLOG, fetch=fetch)
        assert result.found is False
        assert "/blog" in (result.reason or "")
        assert fetch.calls == []

    def test_heading_missing_is_a_value(self, fake_fetch, guide_html):
        fetch = fake_fetch({POST: guide_html}, content_type="text/html")
        result = page_section(POST, anchor_id="nope", scope=BLOG, fetch=fetch)
        assert result.found is False

    def test_selector_required(self, fake_fetch):
        with pytest.raises(ValidationError):
            page_section(POST, scope=BLOG, fetch=fake_fetch({}))

    @pytest.mark.parametrize("max_chars", [99, 20_001])
    def test_max_chars_bounds(self, fake_fetch, max_chars):
        with pytest.raises(ValidationError):
            page_section(POST, anchor_id="a", max_chars=max_chars, scope=BLOG, fetch=fake_fetch({}))

    def test_max_chars_forwarded(self, fake_fetch):
        html = "<h2>T</h2>" + "<p>xxxxxxxxxx</p>" * 20
        fetch = fake_fetch({POST: html}, content_type="text/html")
        result = page_section(POST, heading_text="T", max_chars=100, scope=BLOG, fetch=fetch)
        assert len(result.html) <= 100
        assert result.truncated is True

    @pytest.mark.parametrize("url", ["not a url", "ftp://example.com/blog/x", "https://", ""])
    def test_invalid_url_rejected(self, fake_fetch, url):
        fetch = fake_fetch({})
        with pytest.raises(ValidationError):
            page_section(url, anchor_id="a", scope=BLOG, fetch=fetch)
        assert fetch.calls == []

    def test_fetch_error_propagates(self, fake_fetch):
        with pytest.raises(FetchError) as exc_info:
            page_section(POST, anchor_id="a", scope=BLOG, fetch=fake_fetch({}))
        assert exc_info.value.status == 404


class TestFetchPage:
    def test_html_summary(self, fake_fetch, guide_html):
        fetch = fake_fetch({POST: guide_html}, content_type="text/html; charset=utf-8")
        result = fetch_page(POST, fetch=fetch)
        assert isinstance(result, PageSummary)
        assert result.title == "Deploying Workspaces | Example Blog"
        assert result.links[0].url == "https://example.com/blog/other-post"

    def test_non_html_is_a_value(self, fake_fetch):
        url = "https://example.com/report.pdf"
        fetch = fake_fetch({url: b"%PDF-1.4"}, content_type="application/pdf")
        result = fetch_page(url, fetch=fetch)
        assert isinstance(result, UnsupportedContentType)
        assert result.success is False
        assert "application/pdf" in result.reason

    def test_max_chars_forwarded(self, fake_fetch):
        fetch = fake_fetch({POST: "<main>" + "b" * 300 + "</main>"}, content_type="text/html")
        result = fetch_page(POST, max_chars=150, fetch=fetch)
        assert result.truncated is True

    def test_max_chars_bounds(self, fake_fetch):
        with pytest.raises(ValidationError):
            fetch_page(POST, max_chars=50_001, fetch=fake_fetch({}))

    def test_invalid_url_rejected(self, fake_fetch):
        fetch = fake_fetch({})
        with pytest.raises(ValidationError):
            fetch_page("example.com/page", fetch=fetch)
        assert fetch.calls == []

    def test_model_dump_serialisable(self, fake_fetch, guide_html):
        fetch = fake_fetch({POST: guide_html}, content_type="text/html")
        data = fetch_page(POST, fetch=fetch).model_dump()
        assert json.loads(json.dumps(data))["success"] is True


class TestPageOutline:
    def test_outline(self, fake_fetch, guide_html):
        fetch = fake_fetch({POST: guide_html}, content_type="text/html")
        outline = page_outline(POST, scope=BLOG, fetch=fetch)
        assert outline.url == POST
        assert "https://example.com/blog/other-post" in outline.internal_links


class TestSitemapList:
    PAGES = {
        SITEMAP: f"<sitemapindex {NS}><sitemap><loc>https://example.com/a.xml</loc></sitemap>"
                 f"<sitemap><loc>https://example.com/b.xml</loc></sitemap></sitemapindex>",
        "https://example.com/a.xml": f"<urlset {NS}><url><loc>https://example.com/blog/1</loc></url>"
                                     f"<url><loc>https://example.com/docs/2</loc></url></urlset>",
        "https://example.com/b.xml": f"<urlset {NS}><url><loc>https://example.com/blog/3</loc></url></urlset>",
    }

    def test_listing(self, fake_fetch):
        listing = sitemap_list(SITEMAP, fetch=fake_fetch(self.PAGES))
        assert listing.count == 3
        assert [e.loc for e in listing.entries] == [
            "https://example.com/blog/1",
            "https://example.com/docs/2",
            "https://example.com/blog/3",
        ]
        assert listing.errors == []

    def test_filters_and_limit(self, fake_fetch):
        listing = sitemap_list(SITEMAP, include=["/blog/"], limit=1, fetch=fake_fetch(self.PAGES))
        assert [e.loc for e in listing.entries] == ["https://example.com/blog/1"]
        assert listing.count == 1

    def test_skip_errors_reported(self, fake_fetch):
        pages = dict(self.PAGES)
        del pages["https://example.com/a.xml"]
        listing = sitemap_list(SITEMAP, on_error="skip", fetch=fake_fetch(pages))
        assert [e.loc for e in listing.entries] == ["https://example.com/blog/3"]
        assert [e.url for e in listing.errors] == ["https://example.com/a.xml"]

    def test_limit_bounds(self, fake_fetch):
        with pytest.raises(ValidationError):
            sitemap_list(SITEMAP, limit=0, fetch=fake_fetch(self.PAGES))

    def test_invalid_sitemap_url_rejected(self, fake_fetch):
        fetch = fake_fetch(self.PAGES)
        with pytest.raises(ValidationError):
            sitemap_list("file:///etc/sitemap.xml", fetch=fetch)
        assert fetch.calls == []
