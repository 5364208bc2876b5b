"""Unit tests for the URL classifier and URL normalization."""

from __future__ import annotations

from sitescope import settings
from sitescope.extractors.scope import SectionScope, blog_scope, docs_scope, is_in_scope
from sitescope.extractors.urlnorm import normalize_url

HOSTS = {"example.com"}


class TestIsInScope:
    def test_subdomain_in_section(self):
        assert is_in_scope("https://sub.example.com/blog/post-1", HOSTS, "/blog") is True

    def test_other_section(self):
        assert is_in_scope("https://example.com/docs/x", HOSTS, "/blog") is False

    def test_not_a_url(self):
        assert is_in_scope("not a url", HOSTS, "/blog") is False

    def test_section_root(self):
        assert is_in_scope("https://example.com/blog", HOSTS, "/blog") is True
        assert is_in_scope("https://example.com/blog/", HOSTS, "/blog") is True

    def test_prefix_sibling_rejected(self):
        assert is_in_scope("https://example.com/blogroll", HOSTS, "/blog") is False

    def test_lookalike_host_rejected(self):
        assert is_in_scope("https://notexample.com/blog/x", HOSTS, "/blog") is False
        assert is_in_scope("https://example.com.evil.io/blog/x", HOSTS, "/blog") is False

    def test_host_case_insensitive(self):
        assert is_in_scope("https://WWW.Example.COM/blog/x", HOSTS, "/blog") is True

    def test_trailing_slash_prefix(self):
        assert is_in_scope("https://example.com/blog/x", HOSTS, "/blog/") is True

    def test_empty_prefix_accepts_any_path(self):
        assert is_in_scope("https://example.com/anything", HOSTS, "") is True

    def test_malformed_inputs_never_raise(self):
        assert is_in_scope("http://[::1", HOSTS, "/blog") is False
        assert is_in_scope("", HOSTS, "/blog") is False
        assert is_in_scope("/blog/relative", HOSTS, "/blog") is False
        assert is_in_scope(None, HOSTS, "/blog") is False  # type: ignore[arg-type]

    def test_section_scope(self):
        scope = SectionScope(("example.com", "example.org"), "/docs")
        assert scope.contains("https://docs.example.org/docs/install")
        assert not scope.contains("https://example.org/blog/install")

    def test_default_site_scopes(self, monkeypatch):
        monkeypatch.setattr(settings, "SCOPE_HOSTS", ("coder.com",))
        monkeypatch.setattr(settings, "BLOG_PATH", "/blog")
        monkeypatch.setattr(settings, "DOCS_PATH", "/docs")
        assert blog_scope().contains("https://coder.com/blog/post")
        assert not blog_scope().contains("https://coder.com/docs/install")
        assert docs_scope().contains("https://coder.com/docs/install")
        assert not docs_scope().contains("https://coder.com/blog/post")


class TestNormalizeUrl:
    def test_strips_fragment(self):
        assert normalize_url("https://example.com/sitemap.xml#x") == "https://example.com/sitemap.xml"

    def test_lowercases_scheme_and_host(self):
        assert normalize_url("HTTPS://Example.COM/Path") == "https://example.com/Path"

    def test_removes_default_port(self):
        assert normalize_url("http://example.com:80/a") == "http://example.com/a"
        assert normalize_url("https://example.com:8443/a") == "https://example.com:8443/a"

    def test_keeps_query(self):
        assert normalize_url("https://example.com/sitemap.xml?page=2").endswith("?page=2")

    def test_empty_path_is_root(self):
        assert normalize_url("https://example.com") == "https://example.com/"
