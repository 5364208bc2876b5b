"""Runtime configuration for sitescope.

Every value can be overridden with a ``SITESCOPE_<NAME>`` environment
variable, read once at import time.
"""

from __future__ import annotations

import os


def _env(name: str, default: str) -> str:
    return os.getenv(f"SITESCOPE_{name}", default)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(f"SITESCOPE_{name}")
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(f"SITESCOPE_{name}")
    if raw is None:
        return default
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
USER_AGENT = _env(
    "USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36",
)
TIMEOUT = _env_int("TIMEOUT", 30)  # seconds, per request

# ---------------------------------------------------------------------------
# Site scope
# ---------------------------------------------------------------------------
DEFAULT_SITEMAP_URL = _env("SITEMAP_URL", "https://coder.com/sitemap.xml")
SCOPE_HOSTS = _env_list("SCOPE_HOSTS", ("coder.com",))
BLOG_PATH = _env("BLOG_PATH", "/blog")
DOCS_PATH = _env("DOCS_PATH", "/docs")

# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------
SECTION_MAX_CHARS = _env_int("SECTION_MAX_CHARS", 5_000)
SECTION_MAX_CHARS_LIMIT = 20_000
PAGE_MAX_CHARS = _env_int("PAGE_MAX_CHARS", 10_000)
PAGE_MAX_CHARS_LIMIT = 50_000
MIN_CHARS = 100
MAX_LINKS = _env_int("MAX_LINKS", 50)
SITEMAP_LIMIT_MAX = 10_000

# ---------------------------------------------------------------------------
# Sitemap fan-out
# ---------------------------------------------------------------------------
SITEMAP_MAX_WORKERS = _env_int("SITEMAP_MAX_WORKERS", 8)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = _env("LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
