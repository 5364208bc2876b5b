"""Exceptions raised by sitescope.

Only transport and parse failures are raised.  Expected negative outcomes
("heading not found", "URL out of scope", "page is not HTML") are returned
as values on the result models in :mod:`sitescope.items`.
"""

from __future__ import annotations


class FetchError(RuntimeError):
    """Raised when a URL cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
        body   -- decoded error body, when the server sent one
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status: int = 0,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body


class ParseError(ValueError):
    """Raised when fetched XML or HTML cannot be turned into a document tree."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url
